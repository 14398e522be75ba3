"""
Supabase Persistence Service for Z-88

Stores finished stories, their UCF trajectories and agent transcripts, and
backs the story library (soft delete, favorites, tags, collections, search).

Tables: ``stories``, ``ucf_states``, ``agent_logs``, ``collections``.
Quality scores are stored as integers x100 and UCF values as integers x10000.
"""

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.ucf import QUALITY_SCALE, UCF_FIELDS, UCF_SCALE, from_fixed, to_fixed, ucf_to_fixed
from ..logging_config import get_logger
from ..models import CreativeRitualResult

logger = get_logger(__name__)

STORIES_TABLE = "stories"
UCF_STATES_TABLE = "ucf_states"
AGENT_LOGS_TABLE = "agent_logs"
COLLECTIONS_TABLE = "collections"


class PersistenceError(Exception):
    """Raised when a write cannot be performed."""
    pass


def story_from_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a stored story row back to float scores and decoded JSON."""
    story = dict(row)
    story["quality_score"] = from_fixed(row.get("quality_score") or 0, QUALITY_SCALE)
    story["ethical_approval"] = bool(row.get("ethical_approval"))
    story["is_favorite"] = bool(row.get("is_favorite"))
    for name in UCF_FIELDS:
        column = f"ucf_{name}"
        if column in row and row[column] is not None:
            story[column] = from_fixed(row[column], UCF_SCALE)
    story["agent_contributions"] = _decode_json(row.get("agent_contributions"), {})
    story["tags"] = _decode_json(row.get("tags"), [])
    return story


def ucf_state_from_row(row: Dict[str, Any]) -> Dict[str, Any]:
    state = {"step": row["step"], "timestamp": row.get("timestamp")}
    for name in UCF_FIELDS:
        state[name] = from_fixed(row[name], UCF_SCALE)
    return state


def _decode_json(value: Any, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return default
    return value


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class StoryPersistenceService:
    """Service for persisting stories and library state to Supabase."""

    def __init__(self, supabase_url: Optional[str] = None, supabase_key: Optional[str] = None):
        """
        Initialize the Supabase persistence service.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase service role key (for server-side operations)
        """
        self.supabase_url = supabase_url or os.getenv("SUPABASE_URL")
        self.supabase_key = supabase_key or os.getenv("SUPABASE_SERVICE_KEY")
        self.client = None
        self._connected = False

    async def connect(self) -> bool:
        """
        Connect to Supabase.

        Returns:
            True if connection successful, False otherwise
        """
        if not self.supabase_url or not self.supabase_key:
            logger.warning("[connect] SUPABASE_URL / SUPABASE_SERVICE_KEY not set, persistence disabled")
            return False

        try:
            from supabase import create_client
            self.client = create_client(self.supabase_url, self.supabase_key)
            self._connected = True
            return True
        except Exception as e:
            logger.error(f"[connect] Failed to connect to Supabase: {e}")
            self._connected = False
            return False

    def attach_client(self, client: Any) -> None:
        """Use an already constructed client."""
        self.client = client
        self._connected = client is not None

    @property
    def is_connected(self) -> bool:
        """Check if connected to Supabase."""
        return self._connected and self.client is not None

    def _require_connection(self) -> None:
        if not self.is_connected:
            raise PersistenceError("Database not available")

    def _insert(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_connection()
        try:
            result = self.client.table(table).insert(data).execute()
        except Exception as e:
            logger.error(f"[_insert] Failed to insert into {table}: {e}")
            raise PersistenceError(f"Failed to insert into {table}: {e}") from e
        if not result.data:
            raise PersistenceError(f"Insert into {table} returned no rows")
        return result.data[0]

    def _update(self, table: str, data: Dict[str, Any], column: str, value: Any) -> List[Dict[str, Any]]:
        self._require_connection()
        try:
            result = self.client.table(table).update(data).eq(column, value).execute()
        except Exception as e:
            logger.error(f"[_update] Failed to update {table}: {e}")
            raise PersistenceError(f"Failed to update {table}: {e}") from e
        return result.data or []

    def _delete(self, table: str, column: str, value: Any) -> None:
        self._require_connection()
        try:
            self.client.table(table).delete().eq(column, value).execute()
        except Exception as e:
            logger.error(f"[_delete] Failed to delete from {table}: {e}")
            raise PersistenceError(f"Failed to delete from {table}: {e}") from e

    def _select(self, table: str, build_query, action: str) -> List[Dict[str, Any]]:
        """Run a read query; an unavailable store or a failed query yields []."""
        if not self.is_connected:
            return []
        try:
            query = build_query(self.client.table(table).select("*"))
            return query.execute().data or []
        except Exception as e:
            logger.error(f"[{action}] Failed to read {table}: {e}")
            return []

    # ========================================================================
    # Stories
    # ========================================================================

    async def create_story(self, story: Dict[str, Any]) -> Dict[str, Any]:
        """
        Store a story row.

        Args:
            story: Column values; scores must already be fixed-point

        Returns:
            The created row
        """
        return self._insert(STORIES_TABLE, story)

    async def get_story_by_id(self, story_id: int) -> Optional[Dict[str, Any]]:
        rows = self._select(
            STORIES_TABLE,
            lambda q: q.eq("id", story_id).limit(1),
            "get_story_by_id",
        )
        return story_from_row(rows[0]) if rows else None

    async def get_story_by_ritual_id(self, ritual_id: str) -> Optional[Dict[str, Any]]:
        rows = self._select(
            STORIES_TABLE,
            lambda q: q.eq("ritual_id", ritual_id).limit(1),
            "get_story_by_ritual_id",
        )
        return story_from_row(rows[0]) if rows else None

    async def list_stories(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Non-deleted stories ordered by creation time, optionally for one user."""
        def build(query):
            if user_id:
                query = query.eq("user_id", user_id)
            return query.is_("deleted_at", "null").order("created_at")

        return [story_from_row(row) for row in self._select(STORIES_TABLE, build, "list_stories")]

    # ========================================================================
    # UCF Trajectory & Agent Transcripts
    # ========================================================================

    async def create_ucf_state(self, state: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(UCF_STATES_TABLE, state)

    async def get_ucf_trajectory(self, ritual_id: str) -> List[Dict[str, Any]]:
        rows = self._select(
            UCF_STATES_TABLE,
            lambda q: q.eq("ritual_id", ritual_id).order("step"),
            "get_ucf_trajectory",
        )
        return [ucf_state_from_row(row) for row in rows]

    async def create_agent_log(self, log: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(AGENT_LOGS_TABLE, log)

    async def get_agent_logs(self, ritual_id: str) -> List[Dict[str, Any]]:
        """Transcripts in the order they were produced."""
        return self._select(
            AGENT_LOGS_TABLE,
            lambda q: q.eq("ritual_id", ritual_id).order("id"),
            "get_agent_logs",
        )

    async def save_ritual(self, result: CreativeRitualResult, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Persist a successful ritual: story row, trajectory and transcripts.

        Returns:
            The created story row
        """
        if not result.success or result.metadata is None:
            raise PersistenceError("Only successful rituals can be stored")

        metadata = result.metadata
        story = {
            "user_id": user_id,
            "title": metadata.title,
            "prompt": metadata.prompt,
            "content": result.story_text,
            "ritual_id": result.ritual_id,
            "preset": metadata.preset,
            "genre": metadata.genre,
            "word_count": metadata.word_count,
            "quality_score": to_fixed(metadata.quality_score, QUALITY_SCALE),
            "ethical_approval": metadata.ethical_approval,
            "agent_contributions": json.dumps({
                key: contribution.model_dump(mode="json")
                for key, contribution in metadata.agent_contributions.items()
            }),
            "is_favorite": False,
            "tags": json.dumps([]),
        }
        for name, value in ucf_to_fixed(metadata.ucf_snapshot).items():
            story[f"ucf_{name}"] = value

        row = await self.create_story(story)
        try:
            await self._save_ritual_records(result)
        except PersistenceError:
            self._discard_ritual(result.ritual_id)
            raise

        logger.info(
            f"[save_ritual] Stored ritual {result.ritual_id}: "
            f"{len(result.ucf_trajectory)} UCF states, {len(result.agent_outputs)} agent logs"
        )
        return row

    async def _save_ritual_records(self, result: CreativeRitualResult) -> None:
        for point in result.ucf_trajectory:
            state = {
                "ritual_id": result.ritual_id,
                "step": point.step,
                "timestamp": point.timestamp.isoformat(),
            }
            state.update(ucf_to_fixed(point))
            await self.create_ucf_state(state)

        for output in result.agent_outputs:
            await self.create_agent_log({
                "ritual_id": result.ritual_id,
                "agent_name": output.agent_key,
                "agent_symbol": output.agent_symbol,
                "role": output.role,
                "provider": output.provider.value,
                "model": output.model,
                "content": output.content,
                "tokens": output.token_usage.get("total_tokens", 0),
                "timestamp": output.timestamp.isoformat(),
            })

    def _discard_ritual(self, ritual_id: str) -> None:
        """Remove the rows of a partially stored ritual."""
        logger.warning(f"[save_ritual] Rolling back partial save of ritual {ritual_id}")
        for table in (UCF_STATES_TABLE, AGENT_LOGS_TABLE, STORIES_TABLE):
            try:
                self._delete(table, "ritual_id", ritual_id)
            except PersistenceError as e:
                logger.error(f"[_discard_ritual] Cleanup of {table} failed: {e}")

    # ========================================================================
    # Soft Delete
    # ========================================================================

    async def delete_story(self, story_id: int) -> None:
        self._update(STORIES_TABLE, {"deleted_at": _utcnow_iso()}, "id", story_id)

    async def restore_story(self, story_id: int) -> None:
        self._update(STORIES_TABLE, {"deleted_at": None}, "id", story_id)

    async def permanently_delete_story(self, story_id: int) -> None:
        self._delete(STORIES_TABLE, "id", story_id)

    async def get_deleted_stories(self, user_id: str) -> List[Dict[str, Any]]:
        rows = self._select(
            STORIES_TABLE,
            lambda q: q.eq("user_id", user_id).not_.is_("deleted_at", "null").order("deleted_at"),
            "get_deleted_stories",
        )
        return [story_from_row(row) for row in rows]

    # ========================================================================
    # Favorites & Tags
    # ========================================================================

    async def toggle_favorite(self, story_id: int, is_favorite: bool) -> None:
        self._update(STORIES_TABLE, {"is_favorite": is_favorite}, "id", story_id)

    async def get_favorite_stories(self, user_id: str) -> List[Dict[str, Any]]:
        rows = self._select(
            STORIES_TABLE,
            lambda q: q.eq("user_id", user_id).eq("is_favorite", True).is_("deleted_at", "null"),
            "get_favorite_stories",
        )
        return [story_from_row(row) for row in rows]

    async def update_tags(self, story_id: int, tags: List[str]) -> None:
        self._update(STORIES_TABLE, {"tags": json.dumps(tags)}, "id", story_id)

    async def _active_user_stories(self, user_id: str, action: str) -> List[Dict[str, Any]]:
        rows = self._select(
            STORIES_TABLE,
            lambda q: q.eq("user_id", user_id).is_("deleted_at", "null").order("created_at"),
            action,
        )
        return [story_from_row(row) for row in rows]

    async def get_stories_by_tag(self, user_id: str, tag: str) -> List[Dict[str, Any]]:
        stories = await self._active_user_stories(user_id, "get_stories_by_tag")
        return [story for story in stories if tag in story["tags"]]

    async def get_all_tags(self, user_id: str) -> List[str]:
        """Every tag the user has applied, deduplicated in first-seen order."""
        tags: List[str] = []
        for story in await self._active_user_stories(user_id, "get_all_tags"):
            for tag in story["tags"]:
                if tag not in tags:
                    tags.append(tag)
        return tags

    # ========================================================================
    # Collections
    # ========================================================================

    async def create_collection(self, collection: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(COLLECTIONS_TABLE, collection)

    async def get_user_collections(self, user_id: str) -> List[Dict[str, Any]]:
        return self._select(
            COLLECTIONS_TABLE,
            lambda q: q.eq("user_id", user_id).order("created_at"),
            "get_user_collections",
        )

    async def update_collection(self, collection_id: int, data: Dict[str, Any]) -> None:
        self._update(COLLECTIONS_TABLE, data, "id", collection_id)

    async def delete_collection(self, collection_id: int) -> None:
        """Detach the collection's stories, then delete it."""
        self._update(STORIES_TABLE, {"collection_id": None}, "collection_id", collection_id)
        self._delete(COLLECTIONS_TABLE, "id", collection_id)

    async def move_to_collection(self, story_id: int, collection_id: Optional[int]) -> None:
        self._update(STORIES_TABLE, {"collection_id": collection_id}, "id", story_id)

    async def get_stories_by_collection(self, collection_id: int) -> List[Dict[str, Any]]:
        rows = self._select(
            STORIES_TABLE,
            lambda q: q.eq("collection_id", collection_id).is_("deleted_at", "null").order("created_at"),
            "get_stories_by_collection",
        )
        return [story_from_row(row) for row in rows]

    # ========================================================================
    # Search
    # ========================================================================

    async def search_stories(self, user_id: str, query: str) -> List[Dict[str, Any]]:
        """Case-insensitive substring match on title or prompt."""
        needle = query.strip().lower()
        stories = await self._active_user_stories(user_id, "search_stories")
        if not needle:
            return stories
        return [
            story for story in stories
            if needle in (story.get("title") or "").lower()
            or needle in (story.get("prompt") or "").lower()
        ]
