"""
Z-88 Services Module
External service integrations.
"""

from .continuation import StoryContinuationService, generate_series_id
from .model_client import LLMProviderError, ModelResponse, UnifiedModelClient
from .prompt_enhancer import PROMPT_TEMPLATES, PromptEnhancer, apply_template
from .story_persistence import PersistenceError, StoryPersistenceService

__all__ = [
    "UnifiedModelClient",
    "ModelResponse",
    "LLMProviderError",
    "StoryPersistenceService",
    "PersistenceError",
    "PromptEnhancer",
    "PROMPT_TEMPLATES",
    "apply_template",
    "StoryContinuationService",
    "generate_series_id",
]
