"""
UCF (Universal Consciousness Field) state.

A cosmetic six-dimensional state that drifts from ``INITIAL_UCF`` toward
``TARGET_UCF`` as a ritual progresses. The UI animates the recorded
trajectory; nothing in story generation depends on the values.
"""

import math
from datetime import datetime, timezone
from typing import Dict

from pydantic import BaseModel, Field

# Fixed-point scales used by the storage layer
UCF_SCALE = 10000
QUALITY_SCALE = 100

UCF_FIELDS = ("harmony", "prana", "drishti", "klesha", "resilience", "zoom")

# Fraction of the remaining distance covered at progress 1.0
MODULATION_RATE = 0.15


class UCFState(BaseModel):
    """Snapshot of the six UCF dimensions."""
    harmony: float = Field(..., description="Narrative coherence")
    prana: float = Field(..., description="Creative energy")
    drishti: float = Field(..., description="Thematic clarity")
    klesha: float = Field(..., description="Friction / ethical tension")
    resilience: float
    zoom: float


class TrajectoryPoint(UCFState):
    """UCF state recorded at a ritual step."""
    step: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


INITIAL_UCF = UCFState(
    harmony=0.68,
    prana=0.5363,
    drishti=0.5023,
    klesha=0.0,
    resilience=1.1191,
    zoom=1.0228,
)

TARGET_UCF = UCFState(
    harmony=0.85,
    prana=0.75,
    drishti=0.80,
    klesha=0.05,
    resilience=1.10,
    zoom=1.15,
)


def modulate_ucf(current: UCFState, target: UCFState, progress: float) -> UCFState:
    """
    Move every field part of the way from ``current`` toward ``target``.

    The step size follows an ease-in-out curve over ``progress`` (0.0 - 1.0)
    and never exceeds ``MODULATION_RATE`` of the remaining distance, so a
    field can approach its target but never pass it.
    """
    smooth_progress = 0.5 - 0.5 * math.cos(progress * math.pi)
    factor = smooth_progress * MODULATION_RATE

    def step(name: str) -> float:
        value = getattr(current, name)
        return value + (getattr(target, name) - value) * factor

    return UCFState(
        harmony=min(1.0, step("harmony")),
        prana=min(1.0, step("prana")),
        drishti=min(1.0, step("drishti")),
        klesha=max(0.0, step("klesha")),
        resilience=step("resilience"),
        zoom=step("zoom"),
    )


def trajectory_point(state: UCFState, step: int) -> TrajectoryPoint:
    """Stamp a state with its ritual step and the current time."""
    return TrajectoryPoint(step=step, **state.model_dump())


def to_fixed(value: float, scale: int = UCF_SCALE) -> int:
    return int(round(value * scale))


def from_fixed(value: int, scale: int = UCF_SCALE) -> float:
    return value / scale


def ucf_to_fixed(state: UCFState) -> Dict[str, int]:
    """Scaled integer columns for every UCF field."""
    return {name: to_fixed(getattr(state, name)) for name in UCF_FIELDS}
