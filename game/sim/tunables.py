"""
Arena match rules — locked tunables.

Purpose:
- Provide a single, cycle-free place for the simulation, tools and tests to import the *same* numbers.
- Keep units explicit and determinism-friendly (no wall-clock; values are plain numbers).

Every value here feeds the canonical event log. Changing any of them changes match fingerprints,
so two clients only agree when they run the same rules.
"""

from __future__ import annotations

from dataclasses import dataclass

import config

# -----------------------------
# Health
# -----------------------------

PARTICIPANT_START_HEALTH: int = 3
HOSTILE_HIT_DAMAGE: int = 2
RESOURCE_HEAL: int = 1
PARTICIPANT_BUMP_DAMAGE: int = 1


# -----------------------------
# Population
# -----------------------------

MIN_HOSTILES: int = 4
HOSTILES_PER_PARTICIPANT: float = 1.0
MIN_RESOURCES: int = 4
RESOURCES_PER_PARTICIPANT: float = 0.8


# -----------------------------
# Event log
# -----------------------------

# Decimals kept for positions/velocities in logged events.
LOG_PRECISION: int = 3


# -----------------------------
# Remove reasons (wire strings)
# -----------------------------

REASON_KILLED = "killed-by-participant"
REASON_CONSUMED = "consumed"
REASON_ELIMINATED = "eliminated"

ELIMINATION_MODES = ("remove", "ghost")


@dataclass(frozen=True, slots=True)
class MatchRules:
    """
    The full set of numbers a match depends on.

    Defaults come from `config.py` (and therefore the environment); tests build their own.
    """

    step_hz: int = config.SIM_TICK_HZ
    max_minutes: float = config.MAX_MATCH_MINUTES
    spawn_span: float = config.SPAWN_SPAN
    half_extent: float = config.PLAYFIELD_HALF_EXTENT
    entity_half_extent: float = config.ENTITY_HALF_EXTENT
    participant_velocity_scale: float = config.PARTICIPANT_VELOCITY_SCALE
    hostile_velocity_scale: float = config.HOSTILE_VELOCITY_SCALE
    resource_velocity_scale: float = config.RESOURCE_VELOCITY_SCALE
    elimination: str = config.ELIMINATION_MODE
    max_ticks_override: int | None = None

    def __post_init__(self) -> None:
        if int(self.step_hz) <= 0:
            raise ValueError(f"step_hz must be positive, got {self.step_hz!r}")
        if float(self.max_minutes) <= 0:
            raise ValueError(f"max_minutes must be positive, got {self.max_minutes!r}")
        if self.elimination not in ELIMINATION_MODES:
            raise ValueError(
                f"elimination must be one of {', '.join(ELIMINATION_MODES)}; got {self.elimination!r}"
            )
        if self.max_ticks_override is not None and int(self.max_ticks_override) <= 0:
            raise ValueError(f"max_ticks_override must be positive, got {self.max_ticks_override!r}")

    @property
    def step_seconds(self) -> float:
        return 1.0 / int(self.step_hz)

    @property
    def max_ticks(self) -> int:
        """Tick cap that forces finalization (liveness bound)."""
        if self.max_ticks_override is not None:
            return int(self.max_ticks_override)
        return int(round(float(self.max_minutes) * 60.0 * int(self.step_hz)))

    @property
    def ghosts_enabled(self) -> bool:
        return self.elimination == "ghost"
