"""
UnifiedModelClient - Multi-LLM Router
Supports OpenAI, Anthropic, xAI (Grok), Google (Gemini), and Perplexity (Sonar).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import google.generativeai as genai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from ..config import LLMConfiguration, LLMProvider
from ..logging_config import get_logger

logger = get_logger(__name__)

JSON_ONLY_INSTRUCTION = "\n\nYou MUST respond with valid JSON only, no other text."

# OpenAI-compatible providers share one completion path
OPENAI_COMPATIBLE = (LLMProvider.OPENAI, LLMProvider.XAI, LLMProvider.PERPLEXITY)

PROVIDER_LABELS = {
    LLMProvider.OPENAI: "OpenAI",
    LLMProvider.ANTHROPIC: "Anthropic",
    LLMProvider.XAI: "xAI",
    LLMProvider.GOOGLE: "Gemini",
    LLMProvider.PERPLEXITY: "Perplexity",
}


class LLMProviderError(Exception):
    """Raised when a provider returns an unusable response."""
    pass


@dataclass
class ModelResponse:
    """Unified response from any LLM provider."""
    content: str
    model: str
    provider: LLMProvider
    usage: Dict[str, int] = field(default_factory=lambda: {
        "prompt_tokens": 0,
        "completion_tokens": 0,
        "total_tokens": 0,
    })
    finish_reason: str = "stop"

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


class UnifiedModelClient:
    """
    Routes chat completions to the configured provider.

    SDK clients are created lazily so that a process can start with only a
    subset of provider keys configured.
    """

    def __init__(self, config: LLMConfiguration):
        self.config = config
        self._openai_clients: Dict[LLMProvider, AsyncOpenAI] = {}
        self._anthropic_client: Optional[AsyncAnthropic] = None
        self._gemini_configured = False

    def _get_openai_compatible_client(self, provider: LLMProvider) -> AsyncOpenAI:
        """Get or create an OpenAI SDK client for OpenAI, xAI or Perplexity."""
        if provider not in self._openai_clients:
            provider_config = self.config.get_provider_config(provider)
            if not provider_config:
                raise ValueError(f"{PROVIDER_LABELS[provider]} configuration not provided")
            self._openai_clients[provider] = AsyncOpenAI(
                api_key=provider_config.api_key.get_secret_value(),
                base_url=provider_config.base_url,
                organization=getattr(provider_config, "organization_id", None),
                timeout=self.config.timeout_seconds,
            )
        return self._openai_clients[provider]

    def _get_anthropic_client(self) -> AsyncAnthropic:
        """Get or create Anthropic client."""
        if self._anthropic_client is None:
            if not self.config.anthropic:
                raise ValueError("Anthropic configuration not provided")
            self._anthropic_client = AsyncAnthropic(
                api_key=self.config.anthropic.api_key.get_secret_value(),
                timeout=self.config.timeout_seconds,
            )
        return self._anthropic_client

    def _configure_gemini(self) -> None:
        """Configure Gemini API."""
        if not self._gemini_configured:
            if not self.config.google:
                raise ValueError("Gemini configuration not provided")
            genai.configure(api_key=self.config.google.api_key.get_secret_value())
            self._gemini_configured = True

    async def create_chat_completion(
        self,
        provider: LLMProvider,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict[str, str]] = None,
        model: Optional[str] = None,
    ) -> ModelResponse:
        """
        Create a chat completion using the specified provider.

        Args:
            provider: LLM provider to use
            messages: List of message dicts with 'role' and 'content'
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response (defaults to the configured limit)
            response_format: Optional format specification (e.g., {"type": "json_object"})
            model: Model identifier; defaults to the provider's configured model

        Returns:
            ModelResponse with unified response format
        """
        provider = LLMProvider(provider)
        model = model or self.config.get_model(provider)
        max_tokens = max_tokens or self.config.default_max_tokens

        try:
            if provider in OPENAI_COMPATIBLE:
                return await self._openai_compatible_completion(
                    provider, messages, model, temperature, max_tokens, response_format
                )
            elif provider == LLMProvider.ANTHROPIC:
                return await self._anthropic_completion(
                    messages, model, temperature, max_tokens, response_format
                )
            elif provider == LLMProvider.GOOGLE:
                return await self._gemini_completion(
                    messages, model, temperature, max_tokens, response_format
                )
            else:
                raise ValueError(f"Unsupported provider: {provider}")
        except Exception as e:
            logger.error(f"[create_chat_completion] Error calling {provider.value} ({model}): {e}")
            raise

    async def _openai_compatible_completion(
        self,
        provider: LLMProvider,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: Optional[Dict[str, str]],
    ) -> ModelResponse:
        """Create completion using an OpenAI-compatible API."""
        client = self._get_openai_compatible_client(provider)

        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        # Perplexity rejects json_object; the prompt itself asks for JSON
        if response_format and provider != LLMProvider.PERPLEXITY:
            kwargs["response_format"] = response_format

        response = await client.chat.completions.create(**kwargs)

        choice = response.choices[0] if response.choices else None
        if choice is None or not choice.message or not choice.message.content:
            raise LLMProviderError(f"No content in {PROVIDER_LABELS[provider]} response")

        return ModelResponse(
            content=choice.message.content,
            model=response.model or model,
            provider=provider,
            usage={
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
                "total_tokens": response.usage.total_tokens if response.usage else 0,
            },
            finish_reason=choice.finish_reason or "stop",
        )

    async def _anthropic_completion(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: Optional[Dict[str, str]],
    ) -> ModelResponse:
        """Create completion using Anthropic API."""
        client = self._get_anthropic_client()

        # Separate system message from conversation
        system_message = ""
        chat_messages = []
        for msg in messages:
            if msg["role"] == "system":
                system_message = msg["content"]
            else:
                chat_messages.append({
                    "role": "assistant" if msg["role"] == "assistant" else "user",
                    "content": msg["content"],
                })

        if response_format and response_format.get("type") == "json_object":
            system_message += JSON_ONLY_INSTRUCTION

        response = await client.messages.create(
            model=model,
            max_tokens=max_tokens,
            system=system_message,
            messages=chat_messages,
            temperature=temperature,
        )

        if not response.content:
            raise LLMProviderError("No content in Anthropic response")
        block = response.content[0]
        if block.type != "text":
            raise LLMProviderError("Unexpected content type from Anthropic")

        input_tokens = response.usage.input_tokens if response.usage else 0
        output_tokens = response.usage.output_tokens if response.usage else 0

        return ModelResponse(
            content=block.text,
            model=response.model or model,
            provider=LLMProvider.ANTHROPIC,
            usage={
                "prompt_tokens": input_tokens,
                "completion_tokens": output_tokens,
                "total_tokens": input_tokens + output_tokens,
            },
            finish_reason=response.stop_reason or "stop",
        )

    async def _gemini_completion(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: Optional[Dict[str, str]],
    ) -> ModelResponse:
        """Create completion using Google Gemini chat API."""
        self._configure_gemini()

        system_content = ""
        conversation = []
        for msg in messages:
            if msg["role"] == "system":
                system_content = msg["content"]
            else:
                conversation.append(msg)

        if not conversation:
            raise ValueError("Gemini requires at least one user message")

        generation_config: Dict[str, Any] = {
            "temperature": temperature,
            "max_output_tokens": max_tokens,
        }
        if response_format and response_format.get("type") == "json_object":
            generation_config["response_mime_type"] = "application/json"

        gemini_model = genai.GenerativeModel(
            model,
            system_instruction=system_content or None,
            generation_config=generation_config,
        )

        # All but the last message become history; the last one is sent
        chat = gemini_model.start_chat(history=[
            {
                "role": "model" if msg["role"] == "assistant" else "user",
                "parts": [msg["content"]],
            }
            for msg in conversation[:-1]
        ])
        response = await chat.send_message_async(conversation[-1]["content"])

        usage_metadata = getattr(response, "usage_metadata", None)

        return ModelResponse(
            content=response.text or "",
            model=model,
            provider=LLMProvider.GOOGLE,
            usage={
                "prompt_tokens": getattr(usage_metadata, "prompt_token_count", 0) or 0,
                "completion_tokens": getattr(usage_metadata, "candidates_token_count", 0) or 0,
                "total_tokens": getattr(usage_metadata, "total_token_count", 0) or 0,
            },
            finish_reason="stop",
        )

    async def test_all_providers(self) -> Dict[str, bool]:
        """Send a tiny prompt to every provider and report which ones answer."""
        results: Dict[str, bool] = {}
        test_messages = [
            {"role": "system", "content": "You are a helpful assistant."},
            {"role": "user", "content": "Say 'OK' if you can hear me."},
        ]

        for provider in LLMProvider:
            try:
                response = await self.create_chat_completion(
                    provider, test_messages, max_tokens=10
                )
                results[provider.value] = len(response.content) > 0
                logger.info(f"[test_all_providers] {provider.value}: ok")
            except Exception as e:
                logger.warning(f"[test_all_providers] {provider.value}: failed ({e})")
                results[provider.value] = False

        return results
