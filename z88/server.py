"""
Z-88 HTTP API
Runs creative rituals on request and serves the story library.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .agents import get_agent_config, get_all_agent_configs, get_all_preset_modes, get_preset_mode
from .config import LLMConfiguration, create_default_config_from_env, get_all_models, get_models_for_agent
from .logging_config import get_logger, setup_logging
from .models import (
    ApplyTemplateRequest,
    CollectionCreate,
    CollectionUpdate,
    ContinuationContext,
    ContinuationRequest,
    ContinuationResponse,
    CreativeRitualResult,
    CustomAgentSpec,
    EnhancedPrompt,
    EnhancePromptRequest,
    FavoriteRequest,
    GenerateStoryRequest,
    GenerateStoryResponse,
    MoveToCollectionRequest,
    StoryContext,
    TagsRequest,
)
from .ritual_orchestrator import CreativeRitualEngine
from .services.continuation import StoryContinuationService, generate_series_id
from .services.model_client import LLMProviderError, UnifiedModelClient
from .services.prompt_enhancer import PROMPT_TEMPLATES, PromptEnhancer, apply_template, template_variables
from .services.security import (
    check_story_ownership,
    get_allowed_origins,
    get_current_user,
    get_optional_user,
    validate_request_size,
)
from .services.story_persistence import PersistenceError, StoryPersistenceService

load_dotenv()
setup_logging()

logger = get_logger("z88.server")


class StoryWorker:
    """
    Owns the long-lived services behind the API: the model client,
    persistence and the prompt tooling.
    """

    def __init__(
        self,
        config: Optional[LLMConfiguration] = None,
        persistence: Optional[StoryPersistenceService] = None,
    ):
        self.config = config or create_default_config_from_env()
        self.model_client = UnifiedModelClient(self.config)
        self.persistence = persistence or StoryPersistenceService()
        self.enhancer = PromptEnhancer(self.model_client)
        self.continuation = StoryContinuationService(self.model_client)

    async def initialize(self) -> None:
        """Connect persistence and report configured providers."""
        enabled = [p.value for p in self.config.get_enabled_providers()]
        logger.info(f"[initialize] Enabled providers: {enabled or 'none'}")

        if self.persistence.is_connected or await self.persistence.connect():
            logger.info("[initialize] Connected to Supabase for story persistence")
        else:
            logger.warning("[initialize] Supabase persistence not available - stories will not be stored")

    async def shutdown(self) -> None:
        logger.info("[shutdown] Story worker stopped")

    def _log_event(self, event_type: str, data: Dict[str, Any]) -> None:
        logger.debug(f"[ritual_event] {event_type}: {data}")

    async def generate_story(
        self,
        prompt: str,
        preset: Optional[str] = None,
        custom_agents: Optional[Sequence[CustomAgentSpec]] = None,
        user_id: Optional[str] = None,
    ) -> Tuple[CreativeRitualResult, Optional[Dict[str, Any]]]:
        """
        Run a ritual and store it if it succeeded.

        Returns:
            The ritual result and the created story row (None on failure)
        """
        engine = CreativeRitualEngine(self.model_client, event_callback=self._log_event)
        result = await engine.execute(prompt, preset=preset, custom_agents=custom_agents)
        if not result.success:
            return result, None

        row = await self.persistence.save_ritual(result, user_id=user_id)
        return result, row


worker: Optional[StoryWorker] = None


def get_worker() -> StoryWorker:
    if worker is None:
        raise HTTPException(status_code=503, detail="Worker not initialized")
    return worker


@asynccontextmanager
async def lifespan(app: FastAPI):
    global worker
    worker = StoryWorker()
    await worker.initialize()
    yield
    await worker.shutdown()


# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title="Z-88 Creative Engine", lifespan=lifespan)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS configuration with explicit allowed origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


def _story_summary(story: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": story.get("id"),
        "title": story.get("title"),
        "prompt": story.get("prompt"),
        "ritual_id": story.get("ritual_id"),
        "preset": story.get("preset"),
        "word_count": story.get("word_count"),
        "quality_score": story.get("quality_score"),
        "ethical_approval": story.get("ethical_approval"),
        "ucf_harmony": story.get("ucf_harmony"),
        "is_favorite": story.get("is_favorite"),
        "tags": story.get("tags", []),
        "collection_id": story.get("collection_id"),
        "created_at": story.get("created_at"),
    }


def _require_story(story: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if story is None:
        raise HTTPException(status_code=404, detail="Story not found")
    return story


async def _owned_story(story_worker: StoryWorker, story_id: int, user_id: str) -> Dict[str, Any]:
    story = await story_worker.persistence.get_story_by_id(story_id)
    return check_story_ownership(story, user_id)


async def _owned_collection(story_worker: StoryWorker, collection_id: int, user_id: str) -> Dict[str, Any]:
    for collection in await story_worker.persistence.get_user_collections(user_id):
        if collection.get("id") == collection_id:
            return collection
    raise HTTPException(status_code=404, detail="Collection not found")


def _persistence_failure(e: PersistenceError) -> HTTPException:
    logger.error(f"[persistence] {e}")
    return HTTPException(status_code=503, detail=str(e))


# ============================================================================
# Health & Configuration
# ============================================================================

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "z88-creative-engine",
        "persistence": worker.persistence.is_connected if worker else False,
    }


@app.get("/config/agents")
async def list_agents():
    return [config.model_dump(mode="json") for config in get_all_agent_configs()]


@app.get("/config/presets")
async def list_presets():
    return [preset.model_dump(mode="json") for preset in get_all_preset_modes()]


@app.get("/config/models")
async def list_models():
    return get_all_models()


@app.get("/config/models/{agent_id}")
async def list_models_for_agent(agent_id: str):
    """Recommended models per provider for one agent."""
    if not get_agent_config(agent_id):
        raise HTTPException(status_code=404, detail=f"Unknown agent: {agent_id}")
    return get_models_for_agent(agent_id)


@app.get("/config/providers/test")
@limiter.limit("5/minute")
async def test_providers(request: Request, story_worker: StoryWorker = Depends(get_worker)):
    """Send a tiny prompt to every provider and report which ones answer."""
    return await story_worker.model_client.test_all_providers()


# ============================================================================
# Story Generation & Retrieval
# ============================================================================

@app.post("/stories/generate", response_model=GenerateStoryResponse)
@limiter.limit("10/minute")
async def generate_story(
    gen_request: GenerateStoryRequest,
    request: Request,
    story_worker: StoryWorker = Depends(get_worker),
):
    """Run a creative ritual and store the story. Requires authentication."""
    user_id, _ = await get_current_user(request)

    if not gen_request.custom_agents and gen_request.preset and get_preset_mode(gen_request.preset) is None:
        raise HTTPException(status_code=400, detail=f"Unknown preset mode: {gen_request.preset}")

    if not story_worker.persistence.is_connected:
        raise HTTPException(status_code=503, detail="Database not available")

    logger.info(f"[generate_story] User {user_id} started a ritual (preset: {gen_request.preset or 'default'})")

    try:
        result, row = await story_worker.generate_story(
            gen_request.prompt,
            preset=gen_request.preset,
            custom_agents=gen_request.custom_agents,
            user_id=user_id,
        )
    except PersistenceError as e:
        raise _persistence_failure(e)

    if not result.success:
        raise HTTPException(status_code=502, detail=result.error or "Story generation failed")

    return GenerateStoryResponse(
        story_id=row.get("id") if row else None,
        ritual_id=result.ritual_id,
        title=result.title,
        story_text=result.story_text,
        metadata=result.metadata,
    )


@app.get("/stories")
async def list_stories(request: Request, story_worker: StoryWorker = Depends(get_worker)):
    """List stories; scoped to the caller when a valid token is sent."""
    user_id = await get_optional_user(request)
    stories = await story_worker.persistence.list_stories(user_id)
    return [_story_summary(story) for story in stories]


@app.get("/stories/ritual/{ritual_id}")
async def get_story_by_ritual(ritual_id: str, story_worker: StoryWorker = Depends(get_worker)):
    return _require_story(await story_worker.persistence.get_story_by_ritual_id(ritual_id))


@app.get("/stories/ritual/{ritual_id}/trajectory")
async def get_ucf_trajectory(ritual_id: str, story_worker: StoryWorker = Depends(get_worker)):
    return await story_worker.persistence.get_ucf_trajectory(ritual_id)


@app.get("/stories/ritual/{ritual_id}/agent-logs")
async def get_agent_logs(ritual_id: str, story_worker: StoryWorker = Depends(get_worker)):
    return await story_worker.persistence.get_agent_logs(ritual_id)


@app.get("/stories/{story_id}")
async def get_story(story_id: int, story_worker: StoryWorker = Depends(get_worker)):
    return _require_story(await story_worker.persistence.get_story_by_id(story_id))


# ============================================================================
# Story Library
# ============================================================================

@app.delete("/stories/{story_id}")
async def delete_story(story_id: int, request: Request, story_worker: StoryWorker = Depends(get_worker)):
    """Move a story to the trash."""
    user_id, _ = await get_current_user(request)
    await _owned_story(story_worker, story_id, user_id)
    try:
        await story_worker.persistence.delete_story(story_id)
    except PersistenceError as e:
        raise _persistence_failure(e)
    return {"success": True}


@app.post("/stories/{story_id}/restore")
async def restore_story(story_id: int, request: Request, story_worker: StoryWorker = Depends(get_worker)):
    user_id, _ = await get_current_user(request)
    await _owned_story(story_worker, story_id, user_id)
    try:
        await story_worker.persistence.restore_story(story_id)
    except PersistenceError as e:
        raise _persistence_failure(e)
    return {"success": True}


@app.delete("/stories/{story_id}/permanent")
async def permanently_delete_story(story_id: int, request: Request, story_worker: StoryWorker = Depends(get_worker)):
    user_id, _ = await get_current_user(request)
    await _owned_story(story_worker, story_id, user_id)
    try:
        await story_worker.persistence.permanently_delete_story(story_id)
    except PersistenceError as e:
        raise _persistence_failure(e)
    return {"success": True}


@app.post("/stories/{story_id}/favorite")
async def toggle_favorite(
    story_id: int,
    favorite: FavoriteRequest,
    request: Request,
    story_worker: StoryWorker = Depends(get_worker),
):
    user_id, _ = await get_current_user(request)
    await _owned_story(story_worker, story_id, user_id)
    try:
        await story_worker.persistence.toggle_favorite(story_id, favorite.is_favorite)
    except PersistenceError as e:
        raise _persistence_failure(e)
    return {"success": True, "is_favorite": favorite.is_favorite}


@app.put("/stories/{story_id}/tags")
async def update_tags(
    story_id: int,
    tags_request: TagsRequest,
    request: Request,
    story_worker: StoryWorker = Depends(get_worker),
):
    user_id, _ = await get_current_user(request)
    validate_request_size(tags=tags_request.tags)
    await _owned_story(story_worker, story_id, user_id)

    # Keep first occurrence of each tag
    tags: List[str] = []
    for tag in tags_request.tags:
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)

    try:
        await story_worker.persistence.update_tags(story_id, tags)
    except PersistenceError as e:
        raise _persistence_failure(e)
    return {"success": True, "tags": tags}


@app.put("/stories/{story_id}/collection")
async def move_to_collection(
    story_id: int,
    move_request: MoveToCollectionRequest,
    request: Request,
    story_worker: StoryWorker = Depends(get_worker),
):
    user_id, _ = await get_current_user(request)
    await _owned_story(story_worker, story_id, user_id)
    if move_request.collection_id is not None:
        await _owned_collection(story_worker, move_request.collection_id, user_id)
    try:
        await story_worker.persistence.move_to_collection(story_id, move_request.collection_id)
    except PersistenceError as e:
        raise _persistence_failure(e)
    return {"success": True, "collection_id": move_request.collection_id}


@app.get("/library/deleted")
async def list_deleted_stories(request: Request, story_worker: StoryWorker = Depends(get_worker)):
    user_id, _ = await get_current_user(request)
    return [_story_summary(s) for s in await story_worker.persistence.get_deleted_stories(user_id)]


@app.get("/library/favorites")
async def list_favorite_stories(request: Request, story_worker: StoryWorker = Depends(get_worker)):
    user_id, _ = await get_current_user(request)
    return [_story_summary(s) for s in await story_worker.persistence.get_favorite_stories(user_id)]


@app.get("/library/tags")
async def list_tags(request: Request, story_worker: StoryWorker = Depends(get_worker)):
    user_id, _ = await get_current_user(request)
    return await story_worker.persistence.get_all_tags(user_id)


@app.get("/library/tags/{tag}")
async def list_stories_by_tag(tag: str, request: Request, story_worker: StoryWorker = Depends(get_worker)):
    user_id, _ = await get_current_user(request)
    return [_story_summary(s) for s in await story_worker.persistence.get_stories_by_tag(user_id, tag)]


@app.get("/library/search")
async def search_stories(q: str, request: Request, story_worker: StoryWorker = Depends(get_worker)):
    user_id, _ = await get_current_user(request)
    validate_request_size(search_query=q)
    return [_story_summary(s) for s in await story_worker.persistence.search_stories(user_id, q)]


# ============================================================================
# Collections
# ============================================================================

@app.post("/collections")
async def create_collection(
    collection: CollectionCreate,
    request: Request,
    story_worker: StoryWorker = Depends(get_worker),
):
    user_id, _ = await get_current_user(request)
    try:
        return await story_worker.persistence.create_collection({
            "user_id": user_id,
            **collection.model_dump(),
        })
    except PersistenceError as e:
        raise _persistence_failure(e)


@app.get("/collections")
async def list_collections(request: Request, story_worker: StoryWorker = Depends(get_worker)):
    user_id, _ = await get_current_user(request)
    return await story_worker.persistence.get_user_collections(user_id)


@app.patch("/collections/{collection_id}")
async def update_collection(
    collection_id: int,
    update: CollectionUpdate,
    request: Request,
    story_worker: StoryWorker = Depends(get_worker),
):
    user_id, _ = await get_current_user(request)
    await _owned_collection(story_worker, collection_id, user_id)
    changes = update.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No changes provided")
    try:
        await story_worker.persistence.update_collection(collection_id, changes)
    except PersistenceError as e:
        raise _persistence_failure(e)
    return {"success": True}


@app.delete("/collections/{collection_id}")
async def delete_collection(collection_id: int, request: Request, story_worker: StoryWorker = Depends(get_worker)):
    """Delete a collection; its stories stay in the library."""
    user_id, _ = await get_current_user(request)
    await _owned_collection(story_worker, collection_id, user_id)
    try:
        await story_worker.persistence.delete_collection(collection_id)
    except PersistenceError as e:
        raise _persistence_failure(e)
    return {"success": True}


@app.get("/collections/{collection_id}/stories")
async def list_collection_stories(collection_id: int, request: Request, story_worker: StoryWorker = Depends(get_worker)):
    user_id, _ = await get_current_user(request)
    await _owned_collection(story_worker, collection_id, user_id)
    stories = await story_worker.persistence.get_stories_by_collection(collection_id)
    return [_story_summary(s) for s in stories]


# ============================================================================
# Prompt Tools
# ============================================================================

@app.post("/prompts/enhance", response_model=EnhancedPrompt)
@limiter.limit("20/minute")
async def enhance_prompt(
    enhance_request: EnhancePromptRequest,
    request: Request,
    story_worker: StoryWorker = Depends(get_worker),
):
    try:
        return await story_worker.enhancer.enhance_prompt(enhance_request.prompt)
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"[enhance_prompt] Enhancement failed: {e}")
        raise HTTPException(status_code=502, detail=f"Prompt enhancement failed: {e}")


@app.get("/prompts/templates")
async def list_templates():
    return {
        key: {"template": template, "variables": template_variables(key)}
        for key, template in PROMPT_TEMPLATES.items()
    }


@app.post("/prompts/apply-template")
async def apply_prompt_template(template_request: ApplyTemplateRequest):
    validate_request_size(variables=template_request.variables)
    try:
        prompt = apply_template(template_request.template_key, template_request.variables)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown template: {template_request.template_key}")
    return {"prompt": prompt}


# ============================================================================
# Story Continuation
# ============================================================================

@app.post("/stories/{story_id}/continuation", response_model=ContinuationResponse)
@limiter.limit("10/minute")
async def generate_continuation(
    story_id: int,
    continuation_request: ContinuationRequest,
    request: Request,
    story_worker: StoryWorker = Depends(get_worker),
):
    """Prompt for the next chapter of a story. Requires authentication."""
    await get_current_user(request)
    story = _require_story(await story_worker.persistence.get_story_by_id(story_id))

    context = ContinuationContext(
        previous_title=story.get("title") or "",
        previous_content=story.get("content") or "",
        chapter_number=continuation_request.chapter_number,
        series_title=continuation_request.series_title,
        user_prompt=continuation_request.user_prompt,
    )
    try:
        continuation = await story_worker.continuation.generate_continuation_prompt(context)
    except LLMProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return ContinuationResponse(
        series_id=continuation_request.series_id or generate_series_id(),
        chapter_number=continuation_request.chapter_number + 1,
        **continuation.model_dump(),
    )


@app.post("/stories/{story_id}/context", response_model=StoryContext)
@limiter.limit("10/minute")
async def extract_context(story_id: int, request: Request, story_worker: StoryWorker = Depends(get_worker)):
    """Characters, locations, plot threads and tone of a stored story."""
    await get_current_user(request)
    story = _require_story(await story_worker.persistence.get_story_by_id(story_id))
    try:
        return await story_worker.continuation.extract_story_context(story.get("content") or "")
    except LLMProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))
