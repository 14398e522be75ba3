"""
LLM Provider Configuration
Supports OpenAI, Anthropic, xAI (Grok), Google (Gemini), and Perplexity (Sonar)
"""

import os
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, SecretStr


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    XAI = "xai"
    GOOGLE = "google"
    PERPLEXITY = "perplexity"


# Default model per provider, used unless <PROVIDER>_MODEL is set
DEFAULT_MODELS: Dict[LLMProvider, str] = {
    LLMProvider.OPENAI: "gpt-4-turbo-preview",
    LLMProvider.ANTHROPIC: "claude-3-5-sonnet-20241022",
    LLMProvider.XAI: "grok-beta",
    LLMProvider.GOOGLE: "gemini-2.0-flash-exp",
    LLMProvider.PERPLEXITY: "sonar-pro",
}


# ============================================================================
# Model Definitions by Provider
# ============================================================================

OPENAI_MODELS: Dict[str, Dict[str, Any]] = {
    "gpt-4-turbo-preview": {
        "name": "GPT-4 Turbo",
        "description": "Structured narratives and plot architecture",
        "context_window": 128000,
        "max_output": 4096,
        "recommended_for": ["oracle", "lumina"]
    },
    "gpt-4o": {
        "name": "GPT-4o",
        "description": "Most capable GPT-4 model, multimodal",
        "context_window": 128000,
        "max_output": 16384,
        "recommended_for": ["oracle", "claude"]
    },
    "gpt-4o-mini": {
        "name": "GPT-4o Mini",
        "description": "Smaller, faster, cheaper GPT-4o variant",
        "context_window": 128000,
        "max_output": 16384,
        "recommended_for": ["agni"]
    },
}

ANTHROPIC_MODELS: Dict[str, Dict[str, Any]] = {
    "claude-3-5-sonnet-20241022": {
        "name": "Claude 3.5 Sonnet",
        "description": "Empathy, nuance and careful analysis",
        "context_window": 200000,
        "max_output": 8192,
        "recommended_for": ["lumina", "claude", "kavach"]
    },
    "claude-3-5-haiku-20241022": {
        "name": "Claude 3.5 Haiku",
        "description": "Fast, inexpensive reviews",
        "context_window": 200000,
        "max_output": 8192,
        "recommended_for": ["kavach"]
    },
}

XAI_MODELS: Dict[str, Dict[str, Any]] = {
    "grok-beta": {
        "name": "Grok Beta",
        "description": "Creative chaos and unexpected combinations",
        "context_window": 131072,
        "max_output": 4096,
        "recommended_for": ["agni", "oracle"]
    },
    "grok-2-latest": {
        "name": "Grok 2",
        "description": "Second generation Grok model",
        "context_window": 131072,
        "max_output": 8192,
        "recommended_for": ["agni"]
    },
}

GOOGLE_MODELS: Dict[str, Dict[str, Any]] = {
    "gemini-2.0-flash-exp": {
        "name": "Gemini 2.0 Flash",
        "description": "Research-heavy world-building",
        "context_window": 1000000,
        "max_output": 8192,
        "recommended_for": ["gemini"]
    },
    "gemini-1.5-pro": {
        "name": "Gemini 1.5 Pro",
        "description": "Long-context analysis",
        "context_window": 2000000,
        "max_output": 8192,
        "recommended_for": ["gemini", "claude"]
    },
}

PERPLEXITY_MODELS: Dict[str, Dict[str, Any]] = {
    "sonar-pro": {
        "name": "Sonar Pro",
        "description": "Search-grounded answers with citations",
        "context_window": 200000,
        "max_output": 8192,
        "recommended_for": ["researcher"]
    },
    "sonar": {
        "name": "Sonar",
        "description": "Lightweight search-grounded model",
        "context_window": 127072,
        "max_output": 4096,
        "recommended_for": ["researcher"]
    },
}


# ============================================================================
# Provider Configuration Models
# ============================================================================

class ProviderConfig(BaseModel):
    """Base configuration for an LLM provider."""
    provider: LLMProvider
    api_key: SecretStr
    base_url: Optional[str] = None
    default_model: str
    enabled: bool = True


class OpenAIConfig(ProviderConfig):
    """OpenAI-specific configuration."""
    provider: LLMProvider = LLMProvider.OPENAI
    base_url: str = "https://api.openai.com/v1"
    default_model: str = DEFAULT_MODELS[LLMProvider.OPENAI]
    organization_id: Optional[str] = None

    @property
    def available_models(self) -> Dict[str, Dict[str, Any]]:
        return OPENAI_MODELS


class AnthropicConfig(ProviderConfig):
    """Anthropic Claude-specific configuration."""
    provider: LLMProvider = LLMProvider.ANTHROPIC
    base_url: str = "https://api.anthropic.com"
    default_model: str = DEFAULT_MODELS[LLMProvider.ANTHROPIC]

    @property
    def available_models(self) -> Dict[str, Dict[str, Any]]:
        return ANTHROPIC_MODELS


class XAIConfig(ProviderConfig):
    """xAI Grok configuration (OpenAI-compatible API)."""
    provider: LLMProvider = LLMProvider.XAI
    base_url: str = "https://api.x.ai/v1"
    default_model: str = DEFAULT_MODELS[LLMProvider.XAI]

    @property
    def available_models(self) -> Dict[str, Dict[str, Any]]:
        return XAI_MODELS


class GoogleConfig(ProviderConfig):
    """Google Gemini-specific configuration."""
    provider: LLMProvider = LLMProvider.GOOGLE
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    default_model: str = DEFAULT_MODELS[LLMProvider.GOOGLE]

    @property
    def available_models(self) -> Dict[str, Dict[str, Any]]:
        return GOOGLE_MODELS


class PerplexityConfig(ProviderConfig):
    """Perplexity Sonar configuration (OpenAI-compatible API)."""
    provider: LLMProvider = LLMProvider.PERPLEXITY
    base_url: str = "https://api.perplexity.ai"
    default_model: str = DEFAULT_MODELS[LLMProvider.PERPLEXITY]

    @property
    def available_models(self) -> Dict[str, Dict[str, Any]]:
        return PERPLEXITY_MODELS


# ============================================================================
# Master Configuration
# ============================================================================

class LLMConfiguration(BaseModel):
    """Master LLM configuration with all providers."""

    openai: Optional[OpenAIConfig] = None
    anthropic: Optional[AnthropicConfig] = None
    xai: Optional[XAIConfig] = None
    google: Optional[GoogleConfig] = None
    perplexity: Optional[PerplexityConfig] = None

    # Provider used for prompt enhancement and continuation helpers
    utility_provider: LLMProvider = LLMProvider.OPENAI

    # Global settings
    default_max_tokens: int = Field(default=2000, ge=1, le=32768)
    timeout_seconds: int = Field(default=120, ge=30, le=600)

    def get_provider_config(self, provider: LLMProvider) -> Optional[ProviderConfig]:
        """Get configuration for a specific provider."""
        provider_map = {
            LLMProvider.OPENAI: self.openai,
            LLMProvider.ANTHROPIC: self.anthropic,
            LLMProvider.XAI: self.xai,
            LLMProvider.GOOGLE: self.google,
            LLMProvider.PERPLEXITY: self.perplexity,
        }
        return provider_map.get(provider)

    def get_model(self, provider: LLMProvider) -> str:
        """Model to call for a provider, falling back to the built-in default."""
        provider_config = self.get_provider_config(provider)
        if provider_config:
            return provider_config.default_model
        return DEFAULT_MODELS[provider]

    def get_enabled_providers(self) -> List[LLMProvider]:
        """Get list of enabled providers."""
        enabled = []
        for provider in LLMProvider:
            provider_config = self.get_provider_config(provider)
            if provider_config and provider_config.enabled:
                enabled.append(provider)
        return enabled


# ============================================================================
# Helper Functions
# ============================================================================

def get_all_models() -> Dict[str, Dict[str, Dict[str, Any]]]:
    """Get all known models grouped by provider."""
    return {
        "openai": OPENAI_MODELS,
        "anthropic": ANTHROPIC_MODELS,
        "xai": XAI_MODELS,
        "google": GOOGLE_MODELS,
        "perplexity": PERPLEXITY_MODELS,
    }


def get_models_for_agent(agent_id: str) -> Dict[str, List[str]]:
    """Get recommended models for a specific agent."""
    recommended = {}

    for provider, models in get_all_models().items():
        provider_recommended = [
            model_id
            for model_id, model_info in models.items()
            if agent_id.lower() in model_info.get("recommended_for", [])
        ]
        if provider_recommended:
            recommended[provider] = provider_recommended

    return recommended


def create_default_config_from_env() -> LLMConfiguration:
    """Create configuration from environment variables."""
    config = LLMConfiguration()

    # OpenAI
    if os.getenv("OPENAI_API_KEY"):
        config.openai = OpenAIConfig(
            api_key=SecretStr(os.getenv("OPENAI_API_KEY")),
            organization_id=os.getenv("OPENAI_ORG_ID"),
            default_model=os.getenv("OPENAI_MODEL", DEFAULT_MODELS[LLMProvider.OPENAI]),
        )

    # Anthropic
    if os.getenv("ANTHROPIC_API_KEY"):
        config.anthropic = AnthropicConfig(
            api_key=SecretStr(os.getenv("ANTHROPIC_API_KEY")),
            default_model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODELS[LLMProvider.ANTHROPIC]),
        )

    # xAI
    if os.getenv("XAI_API_KEY"):
        config.xai = XAIConfig(
            api_key=SecretStr(os.getenv("XAI_API_KEY")),
            default_model=os.getenv("XAI_MODEL", DEFAULT_MODELS[LLMProvider.XAI]),
        )

    # Google
    if os.getenv("GEMINI_API_KEY"):
        config.google = GoogleConfig(
            api_key=SecretStr(os.getenv("GEMINI_API_KEY")),
            default_model=os.getenv("GEMINI_MODEL", DEFAULT_MODELS[LLMProvider.GOOGLE]),
        )

    # Perplexity (Sonar keys are issued under either name)
    perplexity_key = os.getenv("SONAR_API_KEY") or os.getenv("PERPLEXITY_API_KEY")
    if perplexity_key:
        config.perplexity = PerplexityConfig(
            api_key=SecretStr(perplexity_key),
            default_model=os.getenv("PERPLEXITY_MODEL", DEFAULT_MODELS[LLMProvider.PERPLEXITY]),
        )

    utility_provider = os.getenv("Z88_UTILITY_PROVIDER")
    if utility_provider:
        config.utility_provider = LLMProvider(utility_provider.lower())

    return config
