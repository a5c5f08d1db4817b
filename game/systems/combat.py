"""
Interaction system: integration, pairwise contacts, boundaries and elimination.

One call to `step()` is one fixed simulation step. The order below is fixed because every client
must consume events in the same order:
1. integrate positions
2. scan live pairs (outer asc, inner asc) for overlaps and apply the rule table
3. reflect off the playfield edges
4. eliminate participants at zero health or below
5. report whether the match should end
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from config import DEBUG_SIM
from game.entities.arena import Hostile, Participant, Resource
from game.sim.tunables import (
    HOSTILE_HIT_DAMAGE,
    PARTICIPANT_BUMP_DAMAGE,
    REASON_CONSUMED,
    REASON_ELIMINATED,
    REASON_KILLED,
    RESOURCE_HEAL,
)

if TYPE_CHECKING:
    from game.sim.contracts import MatchState


def debug_log(msg: str) -> None:
    if DEBUG_SIM:
        print(f"[match] {msg}")


def _hit(participant: Participant, hostile: Hostile):
    participant.health -= HOSTILE_HIT_DAMAGE
    return hostile, REASON_KILLED


def _consume(participant: Participant, resource: Resource):
    participant.health += RESOURCE_HEAL
    return resource, REASON_CONSUMED


def _bump(a: Participant, b: Participant):
    a.health -= PARTICIPANT_BUMP_DAMAGE
    b.health -= PARTICIPANT_BUMP_DAMAGE
    return None


def _bounce_only(a, b):
    return None


# (kind of A, kind of B) -> rule(A, B). Every ordered pair of live kinds must be listed.
_RULES = {
    (Participant, Hostile): _hit,
    (Hostile, Participant): lambda a, b: _hit(b, a),
    (Participant, Resource): _consume,
    (Resource, Participant): lambda a, b: _consume(b, a),
    (Participant, Participant): _bump,
    (Hostile, Hostile): _bounce_only,
    (Hostile, Resource): _bounce_only,
    (Resource, Hostile): _bounce_only,
    (Resource, Resource): _bounce_only,
}


class InteractionResolver:
    """Applies the arena rules to a `MatchState`, one fixed step at a time."""

    def step(self, state: "MatchState") -> bool:
        """Advance one fixed step. Returns True when the match should be finalized."""
        tick = state.clock.consume_step()
        dt = state.rules.step_seconds

        for ent in state.entities:
            ent.integrate(dt)

        self.resolve_contacts(state, tick)

        half_extent = state.rules.half_extent
        for ent in state.entities:
            ent.reflect(half_extent)

        self.eliminate(state, tick)

        return state.live_count <= 1 or tick >= state.rules.max_ticks

    @staticmethod
    def apply_rule(a, b) -> Optional[tuple]:
        """
        Apply the rule for an overlapping pair.

        Returns `(entity_to_remove, reason)` or None when both survive.
        """
        rule = _RULES.get((type(a), type(b)))
        if rule is None:
            raise TypeError(f"no interaction rule for {type(a).__name__} x {type(b).__name__}")
        return rule(a, b)

    def resolve_contacts(self, state: "MatchState", tick: int) -> None:
        # Indices into the live list as of step start; removals are applied after the scan.
        live = list(state.entities)
        removed: set[int] = set()
        reach = state.rules.entity_half_extent

        for i in range(len(live)):
            if i in removed:
                continue
            for j in range(i + 1, len(live)):
                if i in removed:
                    break
                if j in removed:
                    continue
                a, b = live[i], live[j]
                if not a.overlaps(b, reach):
                    continue

                state.log.record_collision(tick, a, b)
                a.swap_velocity(b)

                outcome = self.apply_rule(a, b)
                if outcome is None:
                    continue
                gone, reason = outcome
                removed.add(i if gone is a else j)
                state.log.record_remove(tick, gone, reason)
                debug_log(f"tick={tick} {gone.id} removed ({reason})")

        if removed:
            state.entities = [e for k, e in enumerate(live) if k not in removed]

    def eliminate(self, state: "MatchState", tick: int) -> None:
        # Scanned back to front, so removal records list the last-spawned participant first.
        dead = [e for e in reversed(state.entities) if isinstance(e, Participant) and e.health <= 0]
        if not dead:
            return
        for ent in dead:
            state.log.record_remove(tick, ent, REASON_ELIMINATED)
            if state.rules.ghosts_enabled:
                state.ghosts.append(ent.to_ghost())
            debug_log(f"tick={tick} {ent.id} eliminated")
        gone = {id(e) for e in dead}
        state.entities = [e for e in state.entities if id(e) not in gone]
