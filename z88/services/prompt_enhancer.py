"""
Prompt Enhancement Service
Expands short story ideas into richer cyberpunk prompts and detects
genre, tone and themes of detailed ones.
"""

import string
from typing import Dict, List, Optional

from ..config import LLMProvider
from ..core.parsing import count_words, extract_json
from ..logging_config import get_logger
from ..models import EnhancedPrompt
from ..prompts.enhancer import (
    ANALYSIS_SYSTEM_PROMPT,
    ANALYSIS_USER_PROMPT_TEMPLATE,
    EXPANSION_SYSTEM_PROMPT,
    EXPANSION_USER_PROMPT_TEMPLATE,
)
from .model_client import UnifiedModelClient

logger = get_logger(__name__)

# Prompts longer than this are analysed but not rewritten
DETAILED_PROMPT_WORDS = 100

FALLBACK_GENRE = "Cyberpunk"
FALLBACK_TONE = "Dark"

JSON_RESPONSE = {"type": "json_object"}

PROMPT_TEMPLATES: Dict[str, str] = {
    "hacker": "A skilled hacker in a neon-lit megacity discovers {secret} and must {action} before {threat}.",
    "detective": "An augmented detective investigates {mystery} in a city where {twist}.",
    "rebel": "A street samurai protects {target} from {antagonist} while navigating {conflict}.",
    "memory": "A memory trader finds {artifact} containing {revelation}, forcing them to {choice}.",
    "ai": "An AI {role} questions its existence when {trigger}, leading to {consequence}.",
}


def template_variables(template_key: str) -> List[str]:
    """Placeholder names of a template, in order."""
    template = PROMPT_TEMPLATES[template_key]
    return [name for _, name, _, _ in string.Formatter().parse(template) if name]


def apply_template(template_key: str, variables: Dict[str, str]) -> str:
    """
    Fill a prompt template.

    Placeholders without a value are left as-is so the caller can see what
    is missing; unknown variables are ignored.

    Raises:
        KeyError: If the template does not exist
    """
    template = PROMPT_TEMPLATES[template_key]
    for key, value in variables.items():
        template = template.replace(f"{{{key}}}", value)
    return template


def _string_or(value, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return fallback


def _string_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]


class PromptEnhancer:
    """Rewrites and analyses user prompts with the utility provider."""

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
            response_format=JSON_RESPONSE,
        )
        data = extract_json(response.content)
        if not isinstance(data, dict):
            logger.warning(f"[_ask_json] Non-JSON reply from {self.provider.value}, using fallbacks")
            return {}
        return data

    async def enhance_prompt(self, prompt: str) -> EnhancedPrompt:
        """Expand a short prompt, or analyse a detailed one without changing it."""
        if count_words(prompt) > DETAILED_PROMPT_WORDS:
            return await self._analyze_detailed_prompt(prompt)
        return await self._expand_short_prompt(prompt)

    async def _analyze_detailed_prompt(self, prompt: str) -> EnhancedPrompt:
        analysis = await self._ask_json(
            ANALYSIS_SYSTEM_PROMPT,
            ANALYSIS_USER_PROMPT_TEMPLATE.format(prompt=prompt),
        )
        return EnhancedPrompt(
            original=prompt,
            enhanced=prompt,
            detected_genre=_string_or(analysis.get("genre"), FALLBACK_GENRE),
            detected_tone=_string_or(analysis.get("tone"), FALLBACK_TONE),
            suggested_themes=_string_list(analysis.get("themes")),
            word_count=count_words(prompt),
        )

    async def _expand_short_prompt(self, prompt: str) -> EnhancedPrompt:
        expansion = await self._ask_json(
            EXPANSION_SYSTEM_PROMPT,
            EXPANSION_USER_PROMPT_TEMPLATE.format(prompt=prompt),
        )
        enhanced = _string_or(expansion.get("enhanced"), prompt)
        logger.info(f"[enhance_prompt] Expanded {count_words(prompt)} -> {count_words(enhanced)} words")
        return EnhancedPrompt(
            original=prompt,
            enhanced=enhanced,
            detected_genre=_string_or(expansion.get("genre"), FALLBACK_GENRE),
            detected_tone=_string_or(expansion.get("tone"), FALLBACK_TONE),
            suggested_themes=_string_list(expansion.get("themes")),
            word_count=count_words(enhanced),
        )
