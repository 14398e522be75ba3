"""
Z-88 Configuration Module
LLM provider configuration and settings.
"""

from .llm_providers import (
    ANTHROPIC_MODELS,
    DEFAULT_MODELS,
    GOOGLE_MODELS,
    # Model Definitions
    OPENAI_MODELS,
    PERPLEXITY_MODELS,
    XAI_MODELS,
    AnthropicConfig,
    GoogleConfig,
    LLMConfiguration,
    # Enums
    LLMProvider,
    OpenAIConfig,
    PerplexityConfig,
    # Configuration Models
    ProviderConfig,
    XAIConfig,
    create_default_config_from_env,
    # Helper Functions
    get_all_models,
    get_models_for_agent,
)

__all__ = [
    "LLMProvider",
    "DEFAULT_MODELS",
    "OPENAI_MODELS",
    "ANTHROPIC_MODELS",
    "XAI_MODELS",
    "GOOGLE_MODELS",
    "PERPLEXITY_MODELS",
    "ProviderConfig",
    "OpenAIConfig",
    "AnthropicConfig",
    "XAIConfig",
    "GoogleConfig",
    "PerplexityConfig",
    "LLMConfiguration",
    "get_all_models",
    "get_models_for_agent",
    "create_default_config_from_env",
]
