"""
Agent and Preset Registry
Maps each Helix Collective agent to its preferred provider and defines the
preset ensembles a ritual can run with.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..config import LLMProvider
from ..models import CustomAgentSpec
from ..prompts.architect import ORACLE_SYSTEM_PROMPT
from ..prompts.catalyst import AGNI_SYSTEM_PROMPT
from ..prompts.critic import CLAUDE_SYSTEM_PROMPT
from ..prompts.guardian import KAVACH_SYSTEM_PROMPT
from ..prompts.profiler import LUMINA_SYSTEM_PROMPT
from ..prompts.researcher import RESEARCHER_SYSTEM_PROMPT
from ..prompts.worldbuilder import GEMINI_SYSTEM_PROMPT

DEFAULT_PRESET = "balanced"


class AgentConfig(BaseModel):
    """Static definition of an agent persona."""
    id: str
    name: str
    emoji: str
    role: str
    description: str
    default_provider: LLMProvider
    default_temperature: float = Field(..., ge=0.0, le=1.0)
    system_prompt: str


class PresetMode(BaseModel):
    """Named agent ensemble with optional provider/temperature overrides."""
    id: str
    name: str
    description: str
    agents: List[str]
    provider_overrides: Dict[str, LLMProvider] = Field(default_factory=dict)
    temperature_overrides: Dict[str, float] = Field(default_factory=dict)


@dataclass
class AgentSetup:
    """Resolved agent for one ritual: persona plus provider and temperature."""
    key: str
    config: AgentConfig
    provider: LLMProvider
    temperature: float

    @property
    def agent_id(self) -> str:
        return self.config.id


# ============================================================================
# Agent Definitions
# ============================================================================

AGENT_CONFIGS: Dict[str, AgentConfig] = {
    "oracle": AgentConfig(
        id="oracle",
        name="Oracle",
        emoji="🔮",
        role="Plot Architect",
        description="Designs three-act story structures with escalating stakes and satisfying resolutions",
        default_provider=LLMProvider.OPENAI,
        default_temperature=0.7,
        system_prompt=ORACLE_SYSTEM_PROMPT,
    ),
    "lumina": AgentConfig(
        id="lumina",
        name="Lumina",
        emoji="🌸",
        role="Character Psychologist",
        description="Develops deep emotional arcs and authentic character motivations",
        default_provider=LLMProvider.ANTHROPIC,
        default_temperature=0.8,
        system_prompt=LUMINA_SYSTEM_PROMPT,
    ),
    "gemini": AgentConfig(
        id="gemini",
        name="Gemini",
        emoji="🎭",
        role="World-Builder",
        description="Constructs rich cyberpunk settings with detailed technology and culture",
        default_provider=LLMProvider.GOOGLE,
        default_temperature=0.7,
        system_prompt=GEMINI_SYSTEM_PROMPT,
    ),
    "agni": AgentConfig(
        id="agni",
        name="Agni",
        emoji="🔥",
        role="Creative Catalyst",
        description="Injects unexpected twists and novel combinations",
        default_provider=LLMProvider.XAI,
        default_temperature=0.9,
        system_prompt=AGNI_SYSTEM_PROMPT,
    ),
    "claude": AgentConfig(
        id="claude",
        name="Claude",
        emoji="🧠",
        role="Quality Assessor",
        description="Evaluates narrative coherence and refines prose quality",
        default_provider=LLMProvider.ANTHROPIC,
        default_temperature=0.5,
        system_prompt=CLAUDE_SYSTEM_PROMPT,
    ),
    "kavach": AgentConfig(
        id="kavach",
        name="Kavach",
        emoji="🛡️",
        role="Ethical Guardian",
        description="Ensures Tony Accords compliance and ethical storytelling",
        default_provider=LLMProvider.ANTHROPIC,
        default_temperature=0.3,
        system_prompt=KAVACH_SYSTEM_PROMPT,
    ),
    "researcher": AgentConfig(
        id="researcher",
        name="Researcher",
        emoji="🔍",
        role="Fact-Checker",
        description="Grounds stories in real-world research and citations",
        default_provider=LLMProvider.PERPLEXITY,
        default_temperature=0.4,
        system_prompt=RESEARCHER_SYSTEM_PROMPT,
    ),
}


# ============================================================================
# Preset Modes
# ============================================================================

PRESET_MODES: Dict[str, PresetMode] = {
    "balanced": PresetMode(
        id="balanced",
        name="Balanced",
        description="Default configuration with all agents using their optimal LLMs",
        agents=["oracle", "lumina", "gemini", "agni", "claude", "kavach"],
    ),
    "creative": PresetMode(
        id="creative",
        name="Creative",
        description="Maximum creativity with Grok leading and higher temperatures",
        agents=["oracle", "lumina", "gemini", "agni", "claude", "kavach"],
        provider_overrides={
            "oracle": LLMProvider.XAI,
            "gemini": LLMProvider.XAI,
        },
        temperature_overrides={
            "oracle": 0.9,
            "lumina": 0.9,
            "gemini": 0.9,
            "agni": 1.0,
        },
    ),
    "structured": PresetMode(
        id="structured",
        name="Structured",
        description="Focus on plot coherence and quality with GPT-4 and Claude",
        agents=["oracle", "lumina", "claude", "kavach"],
        provider_overrides={
            "lumina": LLMProvider.OPENAI,
        },
        temperature_overrides={
            "oracle": 0.6,
            "lumina": 0.6,
            "claude": 0.4,
        },
    ),
    "experimental": PresetMode(
        id="experimental",
        name="Experimental",
        description="All agents enabled with mixed LLMs for ensemble generation",
        agents=["oracle", "lumina", "gemini", "agni", "claude", "kavach", "researcher"],
    ),
    "research": PresetMode(
        id="research",
        name="Research-Grounded",
        description="Emphasizes factual accuracy and real-world grounding",
        agents=["oracle", "gemini", "researcher", "claude", "kavach"],
        provider_overrides={
            "gemini": LLMProvider.PERPLEXITY,
        },
    ),
}


# ============================================================================
# Lookup Functions
# ============================================================================

def get_agent_config(agent_id: str) -> Optional[AgentConfig]:
    return AGENT_CONFIGS.get(agent_id)


def get_all_agent_configs() -> List[AgentConfig]:
    return list(AGENT_CONFIGS.values())


def get_preset_mode(mode_id: str) -> Optional[PresetMode]:
    return PRESET_MODES.get(mode_id)


def get_all_preset_modes() -> List[PresetMode]:
    return list(PRESET_MODES.values())


def apply_preset_mode(mode_id: str) -> Dict[str, AgentSetup]:
    """
    Resolve a preset into per-agent setups, in the preset's agent order.

    Raises:
        ValueError: If the preset is unknown
    """
    preset = get_preset_mode(mode_id)
    if preset is None:
        raise ValueError(f"Unknown preset mode: {mode_id}")

    setups: Dict[str, AgentSetup] = {}
    for agent_id in preset.agents:
        config = get_agent_config(agent_id)
        if config is None:
            continue

        provider = preset.provider_overrides.get(agent_id, config.default_provider)
        # An explicit 0.0 override is a valid temperature
        temperature = preset.temperature_overrides.get(agent_id)
        if temperature is None:
            temperature = config.default_temperature

        setups[agent_id] = AgentSetup(
            key=agent_id,
            config=config,
            provider=provider,
            temperature=temperature,
        )

    return setups


def build_custom_agent_setup(custom_agents: Sequence[CustomAgentSpec]) -> Dict[str, AgentSetup]:
    """
    Resolve a user-defined ensemble.

    Unknown agent ids are skipped. An agent with multiplicity N > 1 becomes
    N instances keyed ``<id>_1`` .. ``<id>_N``.
    """
    setups: Dict[str, AgentSetup] = {}

    for custom in custom_agents:
        if isinstance(custom, dict):
            custom = CustomAgentSpec(**custom)

        config = get_agent_config(custom.agent_id)
        if config is None:
            continue

        provider = custom.provider or config.default_provider
        temperature = custom.temperature
        if temperature is None:
            temperature = config.default_temperature

        multiplicity = custom.multiplicity
        for index in range(multiplicity):
            key = f"{custom.agent_id}_{index + 1}" if multiplicity > 1 else custom.agent_id
            setups[key] = AgentSetup(
                key=key,
                config=config,
                provider=provider,
                temperature=temperature,
            )

    return setups


def instances_of(setups: Dict[str, AgentSetup], agent_id: str) -> List[AgentSetup]:
    """All setups backed by ``agent_id``, in insertion order."""
    return [setup for setup in setups.values() if setup.agent_id == agent_id]
