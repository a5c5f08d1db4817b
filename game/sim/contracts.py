"""
Thin, stable data contracts shared by the match systems.

`MatchState` owns everything one match mutates (entities, event log, clock). It is created fully
formed by the engine and handed by reference to each system call, so systems never reach for
module-level globals and two matches can never share an entity collection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from game.entities.arena import Entity, Ghost
from game.sim.timebase import SimulationClock
from game.sim.tunables import MatchRules
from game.systems.event_log import EventLog

if TYPE_CHECKING:
    from game.systems.proof import Proof


@dataclass(slots=True)
class MatchState:
    room: str
    seed_word: str
    participant_ids: list[str]
    digest: str
    rules: MatchRules
    clock: SimulationClock
    log: EventLog = field(default_factory=EventLog)
    entities: list[Entity] = field(default_factory=list)
    ghosts: list[Ghost] = field(default_factory=list)
    ended: bool = False
    proof: Optional["Proof"] = None

    @property
    def tick(self) -> int:
        return self.clock.tick

    @property
    def live_count(self) -> int:
        return len(self.entities)

    def summary(self) -> dict[str, Any]:
        return {
            "room": self.room,
            "seed": self.seed_word,
            "tick": int(self.tick),
            "live": self.live_count,
            "ghosts": len(self.ghosts),
            "events": len(self.log),
            "ended": bool(self.ended),
            "fingerprint": None if self.proof is None else self.proof.fingerprint,
        }
