import os

# Headless pygame for every test (the engine imports pygame for its clock).
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pytest

from game.sim.contracts import MatchState
from game.sim.timebase import SimulationClock
from game.sim.tunables import MatchRules
from game.systems.event_log import EventLog


@pytest.fixture
def make_state():
    """Build a MatchState around hand-placed entities (no spawning)."""

    def _make(entities, *, rules=None, max_ticks=None):
        rules = rules or MatchRules(elimination="remove", max_ticks_override=max_ticks)
        return MatchState(
            room="TEST",
            seed_word="unit",
            participant_ids=sorted(e.id for e in entities if e.kind.value == "user"),
            digest="0" * 64,
            rules=rules,
            clock=SimulationClock(rules.step_seconds, max_ticks=rules.max_ticks),
            log=EventLog(),
            entities=list(entities),
        )

    return _make
