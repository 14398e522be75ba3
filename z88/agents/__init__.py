"""
Z-88 Agents Module
Helix Collective agent personas, presets and the ritual agent wrapper.
"""

from .registry import (
    AGENT_CONFIGS,
    DEFAULT_PRESET,
    PRESET_MODES,
    AgentConfig,
    AgentSetup,
    PresetMode,
    apply_preset_mode,
    build_custom_agent_setup,
    get_agent_config,
    get_all_agent_configs,
    get_all_preset_modes,
    get_preset_mode,
    instances_of,
)
from .base import RitualAgent

__all__ = [
    "AgentConfig",
    "AgentSetup",
    "PresetMode",
    "AGENT_CONFIGS",
    "PRESET_MODES",
    "DEFAULT_PRESET",
    "get_agent_config",
    "get_all_agent_configs",
    "get_preset_mode",
    "get_all_preset_modes",
    "apply_preset_mode",
    "build_custom_agent_setup",
    "instances_of",
    "RitualAgent",
]
