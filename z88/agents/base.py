"""
Base Agent Implementation for Z-88
A ritual agent binds a persona and its resolved provider to the shared
model client, and records an audit event for every call.
"""

import time
from typing import List, Optional, Tuple

from ..models import AgentEvent
from ..services.model_client import ModelResponse, UnifiedModelClient
from .registry import AgentSetup

SUMMARY_LIMIT = 500
DEFAULT_AGENT_MAX_TOKENS = 2000


def _summarize(text: str) -> str:
    return text[:SUMMARY_LIMIT] + "..." if len(text) > SUMMARY_LIMIT else text


class RitualAgent:
    """One agent instance participating in a ritual."""

    def __init__(
        self,
        setup: AgentSetup,
        model_client: UnifiedModelClient,
        ritual_id: str = "",
    ):
        self.setup = setup
        self.model_client = model_client
        self.ritual_id = ritual_id
        self.events: List[AgentEvent] = []

    @property
    def key(self) -> str:
        return self.setup.key

    @property
    def name(self) -> str:
        return self.setup.config.name

    @property
    def system_prompt(self) -> str:
        return self.setup.config.system_prompt

    async def invoke(
        self,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: int = DEFAULT_AGENT_MAX_TOKENS,
    ) -> ModelResponse:
        """
        Send ``[system_prompt, user_prompt]`` to the agent's provider.

        Args:
            user_prompt: Task for this call
            temperature: Overrides the setup temperature when given
            max_tokens: Completion limit

        Returns:
            The provider response
        """
        response, event = await self.invoke_with_logging(user_prompt, temperature, max_tokens)
        return response

    async def invoke_with_logging(
        self,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: int = DEFAULT_AGENT_MAX_TOKENS,
    ) -> Tuple[ModelResponse, AgentEvent]:
        """Invoke and return the response together with its audit event."""
        if temperature is None:
            temperature = self.setup.temperature

        start_time = time.time()

        response = await self.model_client.create_chat_completion(
            provider=self.setup.provider,
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        duration_ms = int((time.time() - start_time) * 1000)

        event = AgentEvent(
            ritual_id=self.ritual_id,
            agent_name=self.key,
            provider=self.setup.provider.value,
            action="invoke",
            input_summary=_summarize(user_prompt),
            output_summary=_summarize(response.content),
            token_usage=dict(response.usage),
            duration_ms=duration_ms,
        )
        self.events.append(event)

        return response, event
