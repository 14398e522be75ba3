"""
Pytest configuration and fixtures for Z-88 tests.

This module provides:
- Network blocking fixture to prevent accidental API calls in CI
- An in-memory stand-in for the Supabase table query builder
- Common fixtures for configuration, model client and persistence
"""

import socket
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest
from pydantic import SecretStr
from unittest.mock import AsyncMock, patch

from z88.config import (
    AnthropicConfig,
    GoogleConfig,
    LLMConfiguration,
    LLMProvider,
    OpenAIConfig,
    PerplexityConfig,
    XAIConfig,
)
from z88.services.model_client import ModelResponse, UnifiedModelClient
from z88.services.story_persistence import StoryPersistenceService


class NetworkBlockedError(Exception):
    """Raised when a test attempts to make a network connection."""
    pass


def _block_socket_connect(*args, **kwargs):
    """Block all socket connections to prevent accidental API calls."""
    raise NetworkBlockedError(
        "Network access is blocked in unit tests. "
        "If you need to test network functionality, use mocks. "
        "This prevents accidental OpenAI/Anthropic API calls that cost money."
    )


@pytest.fixture(autouse=True)
def block_network():
    """
    Automatically block all network connections in tests.

    If a test needs to make real network calls (integration tests),
    it should be marked with @pytest.mark.integration and run separately.
    """
    with patch.object(socket.socket, 'connect', _block_socket_connect):
        with patch.object(socket, 'create_connection', _block_socket_connect):
            yield


# ============================================================================
# In-memory Supabase
# ============================================================================

class FakeResult:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeQuery:
    """Supports the subset of the postgrest builder used by the service."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload: Optional[Dict[str, Any]] = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.order_column: Optional[str] = None
        self.order_desc = False
        self.row_limit: Optional[int] = None
        self._negate_next = False

    def select(self, *columns):
        self.operation = "select"
        return self

    def insert(self, data: Dict[str, Any]):
        self.operation = "insert"
        self.payload = data
        return self

    def update(self, data: Dict[str, Any]):
        self.operation = "update"
        self.payload = data
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def _add_filter(self, predicate):
        if self._negate_next:
            self._negate_next = False
            self.filters.append(lambda row: not predicate(row))
        else:
            self.filters.append(predicate)
        return self

    def eq(self, column: str, value: Any):
        return self._add_filter(lambda row: row.get(column) == value)

    def is_(self, column: str, value: str):
        assert value == "null"
        return self._add_filter(lambda row: row.get(column) is None)

    @property
    def not_(self):
        self._negate_next = True
        return self

    def order(self, column: str, desc: bool = False):
        self.order_column = column
        self.order_desc = desc
        return self

    def limit(self, count: int):
        self.row_limit = count
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        return [row for row in self.db.tables[self.table] if all(f(row) for f in self.filters)]

    def execute(self) -> FakeResult:
        self.db.executed.append((self.table, self.operation))
        if self.db.fail_on == self.operation and self.db.fail_on_table in (None, self.table):
            raise RuntimeError(f"{self.operation} failed")

        if self.operation == "insert":
            return FakeResult([self.db.add_row(self.table, self.payload)])

        if self.operation == "update":
            rows = self._matching()
            for row in rows:
                row.update(self.payload)
            return FakeResult([dict(row) for row in rows])

        if self.operation == "delete":
            rows = self._matching()
            self.db.tables[self.table] = [r for r in self.db.tables[self.table] if r not in rows]
            return FakeResult([dict(row) for row in rows])

        rows = self._matching()
        if self.order_column:
            column = self.order_column
            rows = sorted(
                rows,
                key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else 0),
                reverse=self.order_desc,
            )
        if self.row_limit is not None:
            rows = rows[:self.row_limit]
        return FakeResult([dict(row) for row in rows])


class FakeSupabase:
    """Tables are lists of dict rows with serial ids and created_at stamps."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            "stories": [],
            "ucf_states": [],
            "agent_logs": [],
            "collections": [],
        }
        self.executed: List[tuple] = []
        self.fail_on: Optional[str] = None
        self.fail_on_table: Optional[str] = None
        self._next_id = 0
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def add_row(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        self._next_id += 1
        self._clock += timedelta(seconds=1)
        row = {"id": self._next_id, "created_at": self._clock.isoformat()}
        if table == "stories":
            row.update({"deleted_at": None, "collection_id": None})
        row.update(data)
        self.tables.setdefault(table, []).append(row)
        return dict(row)

    def table(self, name: str) -> FakeQuery:
        self.tables.setdefault(name, [])
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def persistence(fake_supabase):
    """Persistence service backed by the in-memory store."""
    service = StoryPersistenceService(supabase_url="http://localhost", supabase_key="test-key")
    service.attach_client(fake_supabase)
    return service


# ============================================================================
# LLM configuration
# ============================================================================

@pytest.fixture
def llm_config():
    """Configuration with every provider enabled and dummy keys."""
    return LLMConfiguration(
        openai=OpenAIConfig(api_key=SecretStr("sk-test-openai")),
        anthropic=AnthropicConfig(api_key=SecretStr("sk-test-anthropic")),
        xai=XAIConfig(api_key=SecretStr("xai-test")),
        google=GoogleConfig(api_key=SecretStr("gemini-test")),
        perplexity=PerplexityConfig(api_key=SecretStr("pplx-test")),
    )


def _make_response(content: str, provider: LLMProvider = LLMProvider.OPENAI, tokens: int = 10) -> ModelResponse:
    return ModelResponse(
        content=content,
        model=f"{provider.value}-model",
        provider=provider,
        usage={"prompt_tokens": tokens // 2, "completion_tokens": tokens - tokens // 2, "total_tokens": tokens},
    )


@pytest.fixture
def make_response():
    """Factory for ModelResponse objects."""
    return _make_response


@pytest.fixture
def model_client(llm_config):
    """Client whose create_chat_completion is an AsyncMock."""
    client = UnifiedModelClient(llm_config)
    client.create_chat_completion = AsyncMock(return_value=_make_response("OK"))
    return client
