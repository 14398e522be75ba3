"""
Unit tests for prompt enhancement, prompt templates and story continuation.
"""

import json
import re

import pytest

from z88.config import LLMProvider
from z88.models import ContinuationContext
from z88.services.continuation import StoryContinuationService, generate_series_id
from z88.services.model_client import LLMProviderError
from z88.services.prompt_enhancer import (
    PROMPT_TEMPLATES,
    PromptEnhancer,
    apply_template,
    template_variables,
)


class TestTemplates:
    """Tests for prompt templates."""

    def test_five_templates(self):
        assert set(PROMPT_TEMPLATES) == {"hacker", "detective", "rebel", "memory", "ai"}

    def test_template_variables(self):
        assert template_variables("hacker") == ["secret", "action", "threat"]

    def test_apply_template(self):
        prompt = apply_template("hacker", {
            "secret": "a corporate conspiracy",
            "action": "expose it",
            "threat": "the AI wakes",
        })

        assert prompt == (
            "A skilled hacker in a neon-lit megacity discovers a corporate conspiracy "
            "and must expose it before the AI wakes."
        )

    def test_missing_variables_left_in_place(self):
        prompt = apply_template("detective", {"mystery": "a vanished android", "unused": "x"})

        assert "a vanished android" in prompt
        assert "{twist}" in prompt

    def test_unknown_template(self):
        with pytest.raises(KeyError):
            apply_template("western", {})


class TestPromptEnhancer:
    """Tests for PromptEnhancer."""

    @pytest.mark.asyncio
    async def test_short_prompt_expanded(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response(json.dumps({
            "enhanced": "In rain-soaked Neo-Tokyo, a rogue netrunner uncovers a conspiracy.",
            "genre": "Cyberpunk Thriller",
            "tone": "Tense",
            "themes": ["identity", "power"],
        }))
        enhancer = PromptEnhancer(model_client)

        result = await enhancer.enhance_prompt("A hacker finds a secret")

        assert result.original == "A hacker finds a secret"
        assert result.enhanced.startswith("In rain-soaked Neo-Tokyo")
        assert result.detected_genre == "Cyberpunk Thriller"
        assert result.detected_tone == "Tense"
        assert result.suggested_themes == ["identity", "power"]
        assert result.word_count == len(result.enhanced.split())

        kwargs = model_client.create_chat_completion.call_args.kwargs
        assert kwargs["provider"] == LLMProvider.OPENAI
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "A hacker finds a secret" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_detailed_prompt_analysed_not_rewritten(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response(
            '{"genre": "Noir", "tone": "Melancholic", "themes": ["loss"]}'
        )
        prompt = " ".join(["word"] * 120)
        enhancer = PromptEnhancer(model_client)

        result = await enhancer.enhance_prompt(prompt)

        assert result.enhanced == prompt
        assert result.detected_genre == "Noir"
        assert result.word_count == 120
        assert "literary analyst" in model_client.create_chat_completion.call_args.kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_non_json_reply_uses_fallbacks(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response("Sorry, I can't do that.")
        enhancer = PromptEnhancer(model_client)

        result = await enhancer.enhance_prompt("A hacker finds a secret")

        assert result.enhanced == "A hacker finds a secret"
        assert result.detected_genre == "Cyberpunk"
        assert result.detected_tone == "Dark"
        assert result.suggested_themes == []

    @pytest.mark.asyncio
    async def test_non_string_fields_use_fallbacks(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response(json.dumps({
            "enhanced": {"text": "expanded"},
            "genre": ["Cyberpunk", "Noir"],
            "tone": 7,
            "themes": ["memory"],
        }))
        enhancer = PromptEnhancer(model_client)

        result = await enhancer.enhance_prompt("A hacker finds a secret")

        assert result.enhanced == "A hacker finds a secret"
        assert result.detected_genre == "Cyberpunk"
        assert result.detected_tone == "Dark"
        assert result.suggested_themes == ["memory"]
        assert result.word_count == 5

    @pytest.mark.asyncio
    async def test_blank_analysis_fields_use_fallbacks(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response(
            '{"genre": "   ", "tone": null, "themes": "loss"}'
        )
        prompt = " ".join(["word"] * 120)

        result = await PromptEnhancer(model_client).enhance_prompt(prompt)

        assert result.enhanced == prompt
        assert result.detected_genre == "Cyberpunk"
        assert result.detected_tone == "Dark"
        assert result.suggested_themes == []

    @pytest.mark.asyncio
    async def test_utility_provider(self, model_client, make_response):
        model_client.config.utility_provider = LLMProvider.ANTHROPIC
        model_client.create_chat_completion.return_value = make_response('{"enhanced": "x"}')

        await PromptEnhancer(model_client).enhance_prompt("short idea")

        assert model_client.create_chat_completion.call_args.kwargs["provider"] == LLMProvider.ANTHROPIC


class TestStoryContinuation:
    """Tests for StoryContinuationService."""

    def test_series_id_format(self):
        assert re.match(r"^series_\d{13}_[a-z0-9]{7}$", generate_series_id())

    @pytest.mark.asyncio
    async def test_continuation_prompt(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response(json.dumps({
            "prompt": "Kira hunts the AI that stole her memories.",
            "suggested_title": "Ghost Protocol",
            "key_elements": ["Kira", "the memory chip"],
        }))
        service = StoryContinuationService(model_client)
        context = ContinuationContext(
            previous_title="Neon Requiem",
            previous_content="x" * 2500,
            chapter_number=1,
            series_title="Chrome Saga",
            user_prompt="Introduce a rival",
        )

        result = await service.generate_continuation_prompt(context)

        assert result.prompt == "Kira hunts the AI that stole her memories."
        assert result.suggested_title == "Ghost Protocol"
        assert result.key_elements == ["Kira", "the memory chip"]

        user_prompt = model_client.create_chat_completion.call_args.kwargs["messages"][1]["content"]
        assert 'Chapter 2 of "Chrome Saga"' in user_prompt
        assert "Neon Requiem" in user_prompt
        assert "x" * 2000 + "..." in user_prompt
        assert "x" * 2001 not in user_prompt
        assert "Introduce a rival" in user_prompt

    @pytest.mark.asyncio
    async def test_camel_case_keys_accepted(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response(
            '```json\n{"prompt": "Next.", "suggestedTitle": "Part Two", "keyElements": ["a"]}\n```'
        )
        service = StoryContinuationService(model_client)

        result = await service.generate_continuation_prompt(
            ContinuationContext(previous_title="T", previous_content="body")
        )

        assert result.suggested_title == "Part Two"
        assert result.key_elements == ["a"]
        user_prompt = model_client.create_chat_completion.call_args.kwargs["messages"][1]["content"]
        assert "Untitled Series" in user_prompt

    @pytest.mark.asyncio
    async def test_non_json_raises(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response("Chapter two begins...")
        service = StoryContinuationService(model_client)

        with pytest.raises(LLMProviderError):
            await service.generate_continuation_prompt(
                ContinuationContext(previous_title="T", previous_content="body")
            )

    @pytest.mark.asyncio
    async def test_missing_prompt_raises(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response('{"suggested_title": "X"}')
        service = StoryContinuationService(model_client)

        with pytest.raises(LLMProviderError, match="missing a prompt"):
            await service.generate_continuation_prompt(
                ContinuationContext(previous_title="T", previous_content="body")
            )

    @pytest.mark.asyncio
    async def test_extract_story_context(self, model_client, make_response):
        model_client.create_chat_completion.return_value = make_response(json.dumps({
            "characters": ["Kira", "Jax"],
            "locations": ["Neo-Kyoto"],
            "plot_threads": ["the stolen chip"],
            "tone": "noir",
        }))
        service = StoryContinuationService(model_client)

        context = await service.extract_story_context("y" * 4000)

        assert context.characters == ["Kira", "Jax"]
        assert context.locations == ["Neo-Kyoto"]
        assert context.plot_threads == ["the stolen chip"]
        assert context.tone == "noir"
        user_prompt = model_client.create_chat_completion.call_args.kwargs["messages"][1]["content"]
        assert "y" * 3000 + "..." in user_prompt
