"""
Z-88 Creative Ritual Orchestrator
Runs the Helix Collective agents in sequence and synthesizes their
contributions into a single cyberpunk short story.

Phases:
    1. Invocation        - resolve the agent ensemble
    2. Roll call         - announce participating agents
    3. Creative generation - oracle, lumina, gemini, agni, researcher
    4. Synthesis & review  - story synthesis, quality and ethical review
    5. Completion        - title, word count, metadata
"""

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from .agents import (
    DEFAULT_PRESET,
    AgentSetup,
    RitualAgent,
    apply_preset_mode,
    build_custom_agent_setup,
    instances_of,
)
from .core.parsing import count_words, extract_title, parse_ethical_verdict, parse_quality_score
from .core.ucf import INITIAL_UCF, TARGET_UCF, TrajectoryPoint, UCFState, modulate_ucf, trajectory_point
from .logging_config import get_logger
from .models import (
    AgentContribution,
    AgentEvent,
    AgentOutput,
    CreativeRitualResult,
    CustomAgentSpec,
    StoryMetadata,
)
from .prompts.architect import ORACLE_USER_PROMPT_TEMPLATE
from .prompts.catalyst import AGNI_USER_PROMPT_TEMPLATE
from .prompts.critic import CLAUDE_USER_PROMPT_TEMPLATE
from .prompts.guardian import KAVACH_USER_PROMPT_TEMPLATE
from .prompts.profiler import LUMINA_USER_PROMPT_TEMPLATE
from .prompts.researcher import RESEARCHER_USER_PROMPT_TEMPLATE
from .prompts.worldbuilder import GEMINI_USER_PROMPT_TEMPLATE
from .prompts.writer import (
    RESEARCH_SECTION_TEMPLATE,
    SYNTHESIS_SYSTEM_PROMPT,
    SYNTHESIS_USER_PROMPT_TEMPLATE,
)
from .services.model_client import UnifiedModelClient

logger = get_logger("z88.ritual")

EventCallback = Callable[[str, Dict[str, Any]], None]

DEFAULT_QUALITY_SCORE = 0.85
GENRE = "cyberpunk"

SYNTHESIS_TEMPERATURE = 0.8
SYNTHESIS_MAX_TOKENS = 4000
QUALITY_TEMPERATURE = 0.3
ETHICS_TEMPERATURE = 0.2

# Excerpt lengths handed to downstream agents
PLOT_EXCERPT = 500
CHARACTER_EXCERPT = 300
WORLD_EXCERPT = 300
QUALITY_EXCERPT = 2000
ETHICS_EXCERPT = 1500

INSTANCE_SEPARATOR = "\n\n---\n\n"


class RitualPhase(str, Enum):
    """Current phase of the ritual."""
    INVOCATION = "invocation"
    ROLL_CALL = "roll_call"
    CREATIVE_GENERATION = "creative_generation"
    SYNTHESIS = "synthesis"
    COMPLETION = "completion"


# (UCF modulation progress, trajectory step) recorded at the end of a phase
PHASE_CHECKPOINTS = {
    RitualPhase.INVOCATION: (0.2, 12),
    RitualPhase.ROLL_CALL: (0.3, 24),
    RitualPhase.CREATIVE_GENERATION: (0.7, 84),
    RitualPhase.SYNTHESIS: (1.0, 108),
}

# Creative agents in invocation order with their progress markers
CREATIVE_AGENT_PROGRESS = {
    "oracle": 35,
    "lumina": 45,
    "gemini": 55,
    "agni": 60,
    "researcher": 65,
}


def generate_ritual_id() -> str:
    """``ritual_<epoch ms>_<9 random base36 chars>``"""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"ritual_{int(time.time() * 1000)}_{suffix}"


@dataclass
class RitualState:
    """Mutable state of one ritual run."""
    ritual_id: str
    prompt: str
    preset: Optional[str] = None
    phase: RitualPhase = RitualPhase.INVOCATION
    ucf: UCFState = field(default_factory=lambda: INITIAL_UCF.model_copy())
    trajectory: List[TrajectoryPoint] = field(default_factory=list)
    agent_outputs: List[AgentOutput] = field(default_factory=list)
    agent_events: List[AgentEvent] = field(default_factory=list)
    token_usage: Dict[str, int] = field(default_factory=dict)


class CreativeRitualEngine:
    """
    Executes creative rituals against a UnifiedModelClient.

    Every external call is awaited in order; the first failure ends the
    ritual and is reported through a failed CreativeRitualResult.
    """

    def __init__(
        self,
        model_client: UnifiedModelClient,
        event_callback: Optional[EventCallback] = None,
    ):
        self.model_client = model_client
        self.event_callback = event_callback
        self.state: Optional[RitualState] = None

    def _emit_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Emit an event to the callback if registered."""
        if self.event_callback:
            self.event_callback(event_type, {
                "ritual_id": self.state.ritual_id if self.state else "unknown",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                **data,
            })

    def _progress(self, phase: RitualPhase, message: str, progress: int) -> None:
        self.state.phase = phase
        logger.info(f"[execute] {self.state.ritual_id} {progress}% {message}")
        self._emit_event("phase_progress", {
            "phase": phase.value,
            "message": message,
            "progress": progress,
        })

    def _checkpoint(self, phase: RitualPhase) -> None:
        """Advance the UCF state and record a trajectory point."""
        modulation, step = PHASE_CHECKPOINTS[phase]
        self.state.ucf = modulate_ucf(self.state.ucf, TARGET_UCF, modulation)
        self.state.trajectory.append(trajectory_point(self.state.ucf, step))

    def _resolve_agents(
        self,
        preset: Optional[str],
        custom_agents: Optional[Sequence[CustomAgentSpec]],
    ) -> Dict[str, AgentSetup]:
        if custom_agents:
            return build_custom_agent_setup(custom_agents)
        return apply_preset_mode(preset or DEFAULT_PRESET)

    async def _invoke_agent(
        self,
        setup: AgentSetup,
        user_prompt: str,
        temperature: Optional[float] = None,
    ) -> str:
        """Invoke one agent instance and record its transcript."""
        config = setup.config
        model = self.model_client.config.get_model(setup.provider)
        logger.info(
            f"[_invoke_agent] Agent: {setup.key}, Provider: {setup.provider.value}, "
            f"Model: '{model}', temperature: {temperature if temperature is not None else setup.temperature}"
        )
        self._emit_event("agent_start", {
            "agent": setup.key,
            "name": config.name,
            "provider": setup.provider.value,
            "phase": self.state.phase.value,
        })

        agent = RitualAgent(setup, self.model_client, ritual_id=self.state.ritual_id)
        response, event = await agent.invoke_with_logging(user_prompt, temperature=temperature)

        self.state.agent_events.append(event)
        self.state.agent_outputs.append(AgentOutput(
            agent_key=setup.key,
            agent_name=config.name,
            agent_symbol=config.emoji,
            role=config.role,
            provider=setup.provider,
            model=response.model,
            content=response.content,
            token_usage=dict(response.usage),
            ucf_state=self.state.ucf.model_copy(),
        ))
        self.state.token_usage[setup.key] = (
            self.state.token_usage.get(setup.key, 0) + response.total_tokens
        )

        self._emit_event("agent_complete", {
            "agent": setup.key,
            "provider": setup.provider.value,
            "tokens": response.total_tokens,
            "duration_ms": event.duration_ms,
        })
        return response.content

    async def _run_creative_agent(
        self,
        setups: Dict[str, AgentSetup],
        agent_id: str,
        user_prompt: str,
    ) -> str:
        """Invoke every instance of ``agent_id``; absent agents contribute ''."""
        instances = instances_of(setups, agent_id)
        if not instances:
            return ""

        outputs = []
        for setup in instances:
            config = setup.config
            self._progress(
                RitualPhase.CREATIVE_GENERATION,
                f"Phase 3: Invoking {config.name} ({config.role})",
                CREATIVE_AGENT_PROGRESS[agent_id],
            )
            outputs.append(await self._invoke_agent(setup, user_prompt))
        return INSTANCE_SEPARATOR.join(outputs)

    async def execute(
        self,
        prompt: str,
        preset: Optional[str] = None,
        custom_agents: Optional[Sequence[CustomAgentSpec]] = None,
    ) -> CreativeRitualResult:
        """
        Run a full ritual for ``prompt``.

        Args:
            prompt: The user's story idea
            preset: Preset mode id (default "balanced"); ignored with custom_agents
            custom_agents: Explicit agent ensemble

        Returns:
            CreativeRitualResult, with success=False and the error message if
            any step failed
        """
        self.state = RitualState(
            ritual_id=generate_ritual_id(),
            prompt=prompt,
            preset=None if custom_agents else (preset or DEFAULT_PRESET),
        )
        state = self.state
        logger.info(f"[execute] Starting ritual {state.ritual_id} (preset: {state.preset or 'custom'})")

        try:
            # Phase 1: Invocation
            self._progress(RitualPhase.INVOCATION, "Phase 1: Invocation & Intent Setting", 10)
            setups = self._resolve_agents(preset, custom_agents)
            self._checkpoint(RitualPhase.INVOCATION)

            # Phase 2: Agent Roll Call
            self._progress(RitualPhase.ROLL_CALL, "Phase 2: Agent Roll Call", 25)
            logger.info(f"[execute] Agents: {', '.join(setups.keys())}")
            self._checkpoint(RitualPhase.ROLL_CALL)

            # Phase 3: Creative Generation
            oracles = instances_of(setups, "oracle")
            if not oracles:
                raise ValueError("Oracle agent is required")

            plot_structure = await self._run_creative_agent(
                setups, "oracle", ORACLE_USER_PROMPT_TEMPLATE.format(prompt=prompt),
            )
            character_depth = await self._run_creative_agent(
                setups, "lumina", LUMINA_USER_PROMPT_TEMPLATE.format(plot_structure=plot_structure),
            )
            world_details = await self._run_creative_agent(
                setups, "gemini", GEMINI_USER_PROMPT_TEMPLATE.format(plot_structure=plot_structure),
            )
            creative_twists = await self._run_creative_agent(
                setups, "agni", AGNI_USER_PROMPT_TEMPLATE.format(
                    plot_excerpt=plot_structure[:PLOT_EXCERPT],
                    character_excerpt=character_depth[:CHARACTER_EXCERPT],
                ),
            )
            research_notes = await self._run_creative_agent(
                setups, "researcher", RESEARCHER_USER_PROMPT_TEMPLATE.format(
                    prompt=prompt,
                    world_excerpt=world_details[:WORLD_EXCERPT],
                ),
            )
            self._checkpoint(RitualPhase.CREATIVE_GENERATION)

            # Phase 4: Synthesis & Review
            self._progress(RitualPhase.SYNTHESIS, "Phase 4: Synthesizing story", 75)
            research_section = (
                RESEARCH_SECTION_TEMPLATE.format(research_notes=research_notes)
                if research_notes else ""
            )
            synthesis = await self.model_client.create_chat_completion(
                provider=oracles[0].provider,
                messages=[
                    {"role": "system", "content": SYNTHESIS_SYSTEM_PROMPT},
                    {"role": "user", "content": SYNTHESIS_USER_PROMPT_TEMPLATE.format(
                        prompt=prompt,
                        plot_structure=plot_structure,
                        character_depth=character_depth,
                        world_details=world_details,
                        creative_twists=creative_twists,
                        research_section=research_section,
                    )},
                ],
                temperature=SYNTHESIS_TEMPERATURE,
                max_tokens=SYNTHESIS_MAX_TOKENS,
            )
            story_text = synthesis.content
            logger.info(f"[execute] Synthesis complete ({synthesis.provider.value}, {synthesis.total_tokens} tokens)")

            quality_score = DEFAULT_QUALITY_SCORE
            assessors = instances_of(setups, "claude")
            if assessors:
                self._progress(RitualPhase.SYNTHESIS, "Phase 4: Quality assessment with Claude", 85)
                assessment = await self._invoke_agent(
                    assessors[0],
                    CLAUDE_USER_PROMPT_TEMPLATE.format(story_excerpt=story_text[:QUALITY_EXCERPT]),
                    temperature=QUALITY_TEMPERATURE,
                )
                quality_score = parse_quality_score(assessment, default=DEFAULT_QUALITY_SCORE)
                logger.info(f"[execute] Claude assessment: {quality_score}")

            ethical_approval = True
            guardians = instances_of(setups, "kavach")
            if guardians:
                self._progress(RitualPhase.SYNTHESIS, "Phase 4: Ethical scan with Kavach", 90)
                review = await self._invoke_agent(
                    guardians[0],
                    KAVACH_USER_PROMPT_TEMPLATE.format(story_excerpt=story_text[:ETHICS_EXCERPT]),
                    temperature=ETHICS_TEMPERATURE,
                )
                ethical_approval = parse_ethical_verdict(review)
                logger.info(f"[execute] Kavach review: {'APPROVED' if ethical_approval else 'REJECTED'}")

            self._checkpoint(RitualPhase.SYNTHESIS)

            # Phase 5: Completion
            self._progress(RitualPhase.COMPLETION, "Phase 5: Ritual complete!", 100)
            title = extract_title(story_text)

            metadata = StoryMetadata(
                ritual_id=state.ritual_id,
                title=title,
                prompt=prompt,
                genre=GENRE,
                preset=state.preset,
                word_count=count_words(story_text),
                quality_score=quality_score,
                ethical_approval=ethical_approval,
                agent_contributions={
                    key: AgentContribution(
                        provider=setup.provider,
                        role=setup.config.role,
                        tokens=state.token_usage.get(key, 0),
                    )
                    for key, setup in setups.items()
                },
                ucf_snapshot=state.ucf.model_copy(),
            )

            self._emit_event("ritual_complete", {
                "title": title,
                "word_count": metadata.word_count,
                "quality_score": quality_score,
                "ethical_approval": ethical_approval,
            })
            logger.info(f"[execute] Ritual {state.ritual_id} complete: '{title}' ({metadata.word_count} words)")

            return CreativeRitualResult(
                success=True,
                ritual_id=state.ritual_id,
                title=title,
                story_text=story_text,
                metadata=metadata,
                agent_outputs=list(state.agent_outputs),
                ucf_trajectory=list(state.trajectory),
            )

        except Exception as e:
            error_message = str(e) or e.__class__.__name__
            logger.error(f"[execute] Ritual {state.ritual_id} failed in {state.phase.value}: {error_message}")
            self._emit_event("ritual_failed", {
                "phase": state.phase.value,
                "error": error_message,
            })
            return CreativeRitualResult(
                success=False,
                ritual_id=state.ritual_id,
                title="Error",
                agent_outputs=list(state.agent_outputs),
                ucf_trajectory=list(state.trajectory),
                error=error_message,
            )
