"""
Pydantic data models for Z-88.
Ritual results, agent transcripts and the request/response bodies of the API.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..config import LLMProvider
from ..core.ucf import TrajectoryPoint, UCFState

MIN_PROMPT_LENGTH = 10
MAX_PROMPT_LENGTH = 1000
MAX_ENHANCE_LENGTH = 5000
MAX_TAGS = 20


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Ritual Configuration
# ============================================================================

class CustomAgentSpec(BaseModel):
    """User-selected agent for a custom ensemble."""
    agent_id: str
    provider: Optional[LLMProvider] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    multiplicity: int = Field(
        default=1,
        ge=1,
        le=4,
        description="How many instances of this agent to run"
    )


# ============================================================================
# Ritual Output Models
# ============================================================================

class AgentOutput(BaseModel):
    """Transcript entry for a single agent invocation."""
    agent_key: str = Field(..., description="Setup key, e.g. 'oracle' or 'oracle_2'")
    agent_name: str
    agent_symbol: str
    role: str
    provider: LLMProvider
    model: str
    content: str
    token_usage: Dict[str, int] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_utcnow)
    ucf_state: UCFState


class AgentContribution(BaseModel):
    provider: LLMProvider
    role: str
    tokens: int = 0


class StoryMetadata(BaseModel):
    """Everything known about a finished story besides its text."""
    ritual_id: str
    title: str
    prompt: str
    genre: str = "cyberpunk"
    preset: Optional[str] = None
    word_count: int = Field(..., ge=0)
    quality_score: float = Field(..., ge=0.0, le=1.0)
    ethical_approval: bool
    agent_contributions: Dict[str, AgentContribution] = Field(default_factory=dict)
    ucf_snapshot: UCFState
    timestamp: datetime = Field(default_factory=_utcnow)


class CreativeRitualResult(BaseModel):
    """
    Outcome of a ritual.

    On failure ``success`` is False, ``title`` is "Error", ``metadata`` is
    None and ``error`` carries the message; transcripts and trajectory hold
    whatever was produced before the failure.
    """
    success: bool
    ritual_id: str
    title: str
    story_text: str = ""
    metadata: Optional[StoryMetadata] = None
    agent_outputs: List[AgentOutput] = Field(default_factory=list)
    ucf_trajectory: List[TrajectoryPoint] = Field(default_factory=list)
    error: Optional[str] = None


# ============================================================================
# Event Models
# ============================================================================

class AgentEvent(BaseModel):
    """Event emitted by agents for audit logging."""
    ritual_id: str
    agent_name: str
    provider: str
    action: str
    input_summary: str
    output_summary: str
    token_usage: dict
    duration_ms: int
    timestamp: datetime = Field(default_factory=_utcnow)


# ============================================================================
# Prompt Tooling Models
# ============================================================================

class EnhancedPrompt(BaseModel):
    original: str
    enhanced: str
    detected_genre: str
    detected_tone: str
    suggested_themes: List[str] = Field(default_factory=list)
    word_count: int


class ContinuationContext(BaseModel):
    """Previous chapter plus optional series title and user direction."""
    previous_title: str
    previous_content: str
    chapter_number: int = Field(default=1, ge=1)
    series_title: Optional[str] = None
    user_prompt: Optional[str] = None


class ContinuationPrompt(BaseModel):
    prompt: str
    suggested_title: str
    key_elements: List[str] = Field(default_factory=list)


class StoryContext(BaseModel):
    characters: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    plot_threads: List[str] = Field(default_factory=list)
    tone: str = ""


# ============================================================================
# API Request / Response Models
# ============================================================================

class GenerateStoryRequest(BaseModel):
    prompt: str = Field(..., min_length=MIN_PROMPT_LENGTH, max_length=MAX_PROMPT_LENGTH)
    preset: Optional[str] = None
    custom_agents: Optional[List[CustomAgentSpec]] = Field(default=None, max_length=16)


class GenerateStoryResponse(BaseModel):
    story_id: Optional[int] = None
    ritual_id: str
    title: str
    story_text: str
    metadata: StoryMetadata


class EnhancePromptRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=MAX_ENHANCE_LENGTH)


class ApplyTemplateRequest(BaseModel):
    template_key: str
    variables: Dict[str, str] = Field(default_factory=dict)


class ContinuationRequest(BaseModel):
    chapter_number: int = Field(default=1, ge=1, description="Chapter number of the stored story")
    series_id: Optional[str] = None
    series_title: Optional[str] = Field(default=None, max_length=200)
    user_prompt: Optional[str] = Field(default=None, max_length=MAX_PROMPT_LENGTH)


class ContinuationResponse(ContinuationPrompt):
    series_id: str
    chapter_number: int


class FavoriteRequest(BaseModel):
    is_favorite: bool


class TagsRequest(BaseModel):
    tags: List[str] = Field(default_factory=list, max_length=MAX_TAGS)


class CollectionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    color: Optional[str] = Field(default=None, max_length=20)


class CollectionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    color: Optional[str] = Field(default=None, max_length=20)


class MoveToCollectionRequest(BaseModel):
    collection_id: Optional[int] = None
