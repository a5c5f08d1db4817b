"""
Deterministic entity spawning.

The spawn order is part of the contract: participants (in the sorted order they arrive in), then
hostiles, then resources. Each entity draws from its own generator, seeded from the match digest
plus its own label, in the fixed order x, z, vx, vz.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from game.entities.arena import Entity, Hostile, Participant, Resource
from game.sim.determinism import TAG_HOSTILE, TAG_PARTICIPANT, TAG_RESOURCE, rng_for
from game.sim.tunables import (
    HOSTILES_PER_PARTICIPANT,
    MIN_HOSTILES,
    MIN_RESOURCES,
    PARTICIPANT_START_HEALTH,
    RESOURCES_PER_PARTICIPANT,
    MatchRules,
)


@dataclass(frozen=True, slots=True)
class SpawnCounts:
    players: int
    foes: int
    food: int

    @property
    def total(self) -> int:
        return self.players + self.foes + self.food

    def to_dict(self) -> dict[str, int]:
        return {"players": self.players, "foes": self.foes, "food": self.food}


def sanitize_participants(raw: Iterable[str]) -> list[str]:
    """
    Trim, drop empties, de-duplicate and sort case-insensitively.

    This is the user-list collaborator's job; the CLI and tools use it to produce the
    precondition `generate_entities` expects.
    """
    seen: set[str] = set()
    out: list[str] = []
    for name in raw:
        name = str(name).strip()
        if not name or name in seen:
            continue
        seen.add(name)
        out.append(name)
    out.sort(key=lambda s: (s.casefold(), s))
    return out


def spawn_counts(participant_count: int) -> SpawnCounts:
    players = max(1, int(participant_count))
    return SpawnCounts(
        players=players,
        foes=max(MIN_HOSTILES, math.floor(players * HOSTILES_PER_PARTICIPANT)),
        food=max(MIN_RESOURCES, math.floor(players * RESOURCES_PER_PARTICIPANT)),
    )


def _draw(rng, span: float, velocity_scale: float) -> tuple[float, float, float, float]:
    x = (rng() - 0.5) * span
    z = (rng() - 0.5) * span
    vx = (rng() - 0.5) * velocity_scale
    vz = (rng() - 0.5) * velocity_scale
    return x, z, vx, vz


def generate_entities(
    match_digest_hex: str, participant_ids: Sequence[str], rules: MatchRules | None = None
) -> list[Entity]:
    """
    Build the initial entity set for a match.

    `participant_ids` must already be sorted (see `sanitize_participants`). An empty list spawns one
    synthetic participant, `player0`, so there is always at least one entity.
    """
    rules = rules or MatchRules()
    ids = [str(u) for u in participant_ids] or ["player0"]
    counts = spawn_counts(len(ids))
    entities: list[Entity] = []

    for uname in ids:
        rng = rng_for(match_digest_hex, TAG_PARTICIPANT, uname)
        x, z, vx, vz = _draw(rng, rules.spawn_span, rules.participant_velocity_scale)
        entities.append(Participant(id=uname, x=x, z=z, vx=vx, vz=vz, health=PARTICIPANT_START_HEALTH))

    for i in range(counts.foes):
        rng = rng_for(match_digest_hex, TAG_HOSTILE, i)
        x, z, vx, vz = _draw(rng, rules.spawn_span, rules.hostile_velocity_scale)
        entities.append(Hostile(id=f"foe{i}", x=x, z=z, vx=vx, vz=vz))

    for i in range(counts.food):
        rng = rng_for(match_digest_hex, TAG_RESOURCE, i)
        x, z, vx, vz = _draw(rng, rules.spawn_span, rules.resource_velocity_scale)
        entities.append(Resource(id=f"food{i}", x=x, z=z, vx=vx, vz=vz))

    return entities


class EntitySpawner:
    """Spawns a match's entities and logs one spawn record per entity at tick 0."""

    def __init__(self, rules: MatchRules | None = None):
        self.rules = rules or MatchRules()

    def spawn(self, match_digest_hex: str, participant_ids: Sequence[str], log) -> tuple[list[Entity], SpawnCounts]:
        entities = generate_entities(match_digest_hex, participant_ids, self.rules)
        for ent in entities:
            log.record_spawn(0, ent)
        return entities, spawn_counts(len(participant_ids))
