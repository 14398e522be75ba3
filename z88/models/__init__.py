"""
Z-88 Data Models Module
Pydantic schemas for rituals, transcripts and the HTTP API.
"""

from .schemas import (
    # Output Models
    AgentContribution,
    # Event Models
    AgentEvent,
    AgentOutput,
    # Request Models
    ApplyTemplateRequest,
    CollectionCreate,
    CollectionUpdate,
    ContinuationContext,
    ContinuationPrompt,
    ContinuationRequest,
    ContinuationResponse,
    CreativeRitualResult,
    # Ritual Configuration
    CustomAgentSpec,
    EnhancedPrompt,
    EnhancePromptRequest,
    FavoriteRequest,
    GenerateStoryRequest,
    GenerateStoryResponse,
    MoveToCollectionRequest,
    StoryContext,
    StoryMetadata,
    TagsRequest,
)

__all__ = [
    "CustomAgentSpec",
    "AgentOutput",
    "AgentContribution",
    "StoryMetadata",
    "CreativeRitualResult",
    "AgentEvent",
    "EnhancedPrompt",
    "ContinuationContext",
    "ContinuationPrompt",
    "StoryContext",
    "GenerateStoryRequest",
    "GenerateStoryResponse",
    "EnhancePromptRequest",
    "ApplyTemplateRequest",
    "ContinuationRequest",
    "ContinuationResponse",
    "FavoriteRequest",
    "TagsRequest",
    "CollectionCreate",
    "CollectionUpdate",
    "MoveToCollectionRequest",
]
