"""
Story Continuation Service
Generates next-chapter prompts and continuity notes from a previous story.
"""

import random
import string
import time
from typing import Optional

from ..config import LLMProvider
from ..core.parsing import extract_json
from ..logging_config import get_logger
from ..models import ContinuationContext, ContinuationPrompt, StoryContext
from ..prompts.continuation import (
    CONTEXT_SYSTEM_PROMPT,
    CONTEXT_USER_PROMPT_TEMPLATE,
    CONTINUATION_SYSTEM_PROMPT,
    CONTINUATION_USER_PROMPT_TEMPLATE,
)
from .model_client import LLMProviderError, UnifiedModelClient

logger = get_logger(__name__)

PREVIOUS_CHAPTER_EXCERPT = 2000
CONTEXT_EXCERPT = 3000
DEFAULT_SERIES_TITLE = "Untitled Series"


def generate_series_id() -> str:
    """``series_<epoch ms>_<7 random base36 chars>``"""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"series_{int(time.time() * 1000)}_{suffix}"


def _excerpt(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class StoryContinuationService:
    """Builds continuity-aware prompts for the next chapter of a series."""

    def __init__(self, model_client: UnifiedModelClient, provider: Optional[LLMProvider] = None):
        self.model_client = model_client
        self.provider = provider or model_client.config.utility_provider

    async def _ask_json(self, system_prompt: str, user_prompt: str) -> dict:
        response = await self.model_client.create_chat_completion(
            provider=self.provider,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.7,
            response_format={"type": "json_object"},
        )
        data = extract_json(response.content)
        if not isinstance(data, dict):
            raise LLMProviderError(f"Expected a JSON object from {self.provider.value}")
        return data

    async def generate_continuation_prompt(self, context: ContinuationContext) -> ContinuationPrompt:
        """
        Prompt for chapter ``context.chapter_number + 1``.

        Only the first 2000 characters of the previous chapter are sent.
        """
        direction_section = (
            f"User's direction for next chapter: {context.user_prompt}"
            if context.user_prompt else ""
        )
        result = await self._ask_json(
            CONTINUATION_SYSTEM_PROMPT,
            CONTINUATION_USER_PROMPT_TEMPLATE.format(
                next_chapter=context.chapter_number + 1,
                series_title=context.series_title or DEFAULT_SERIES_TITLE,
                previous_title=context.previous_title,
                previous_excerpt=_excerpt(context.previous_content, PREVIOUS_CHAPTER_EXCERPT),
                direction_section=direction_section,
            ),
        )

        prompt = result.get("prompt")
        if not prompt:
            raise LLMProviderError("Continuation response is missing a prompt")

        key_elements = result.get("key_elements") or result.get("keyElements") or []
        logger.info(f"[generate_continuation_prompt] Chapter {context.chapter_number + 1} prompt ready")
        return ContinuationPrompt(
            prompt=prompt,
            suggested_title=result.get("suggested_title") or result.get("suggestedTitle") or "",
            key_elements=[str(element) for element in key_elements],
        )

    async def extract_story_context(self, story_content: str) -> StoryContext:
        """Characters, locations, plot threads and tone of a story."""
        result = await self._ask_json(
            CONTEXT_SYSTEM_PROMPT,
            CONTEXT_USER_PROMPT_TEMPLATE.format(
                story_excerpt=_excerpt(story_content, CONTEXT_EXCERPT),
            ),
        )
        return StoryContext(
            characters=[str(c) for c in result.get("characters") or []],
            locations=[str(loc) for loc in result.get("locations") or []],
            plot_threads=[str(t) for t in result.get("plot_threads") or result.get("plotThreads") or []],
            tone=str(result.get("tone") or ""),
        )
