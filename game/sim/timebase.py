"""
Simulation time abstraction.

The driving loop is invoked at an irregular, platform-dependent rate. `SimulationClock` turns those
wall-clock callbacks into a whole number of fixed steps so the physics always advances in identical
increments on every client:
- accumulate `now - last_now`
- consume `step_seconds` chunks while enough time has accumulated
- carry the remainder into the next callback

Only the driver reads the wall clock (`wall_clock_seconds`); simulation code sees ticks.
"""

from __future__ import annotations

from typing import Optional

import pygame


def wall_clock_seconds() -> float:
    """Monotonic wall-clock-ish seconds from pygame's tick counter."""
    if not pygame.get_init():
        pygame.init()
    return pygame.time.get_ticks() / 1000.0


class SimulationClock:
    """Fixed-step accumulator with a monotonically increasing tick counter."""

    def __init__(self, step_seconds: float, max_ticks: Optional[int] = None):
        if step_seconds <= 0:
            raise ValueError(f"step_seconds must be positive, got {step_seconds!r}")
        self.step_seconds = float(step_seconds)
        self.max_ticks = None if max_ticks is None else int(max_ticks)
        self.accumulated = 0.0
        self.tick = 0
        self._last_now: Optional[float] = None

    def reset(self) -> None:
        self.accumulated = 0.0
        self.tick = 0
        self._last_now = None

    @property
    def capped(self) -> bool:
        return self.max_ticks is not None and self.tick >= self.max_ticks

    def advance(self, now_seconds: float) -> int:
        """
        Feed a wall-clock reading and return how many fixed steps are due.

        The first reading only anchors the clock. Readings that go backwards count as zero
        elapsed time. Never returns more steps than remain before `max_ticks`.
        """
        now = float(now_seconds)
        if self._last_now is None:
            self._last_now = now
            return 0

        elapsed = now - self._last_now
        self._last_now = now
        if elapsed > 0:
            self.accumulated += elapsed

        steps = 0
        while self.accumulated >= self.step_seconds:
            self.accumulated -= self.step_seconds
            steps += 1

        if self.max_ticks is not None:
            steps = min(steps, max(0, self.max_ticks - self.tick))
        return steps

    def consume_step(self) -> int:
        """Count one fixed step as executed and return the new tick number."""
        self.tick += 1
        return self.tick
