"""
Arena entities.

A tagged union: every entity is exactly one of `Participant`, `Hostile`, `Resource` (live kinds)
or `Ghost` (the terminal participant variant). Rules match on the class, so a new kind cannot slip
through the interaction table unnoticed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class EntityKind(str, Enum):
    """Entity kinds; values are the wire tags used in the event log."""

    PARTICIPANT = "user"
    HOSTILE = "foe"
    RESOURCE = "food"
    GHOST = "ghost"


@dataclass(slots=True)
class _Body:
    id: str
    x: float
    z: float
    vx: float = 0.0
    vz: float = 0.0

    def integrate(self, dt: float) -> None:
        self.x = self.x + self.vx * dt
        self.z = self.z + self.vz * dt

    def overlaps(self, other: "_Body", half_extent: float) -> bool:
        """Axis-aligned box overlap on the ground plane (touching counts)."""
        reach = half_extent + half_extent
        return abs(self.x - other.x) <= reach and abs(self.z - other.z) <= reach

    def swap_velocity(self, other: "_Body") -> None:
        self.vx, other.vx = other.vx, self.vx
        self.vz, other.vz = other.vz, self.vz

    def reflect(self, half_extent: float) -> None:
        """Bounce off the playfield edge: any component at or past the edge is negated once."""
        if abs(self.x) >= half_extent:
            self.vx = -self.vx
        if abs(self.z) >= half_extent:
            self.vz = -self.vz


@dataclass(slots=True)
class Participant(_Body):
    health: int = 3

    kind = EntityKind.PARTICIPANT

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def to_ghost(self) -> "Ghost":
        return Ghost(id=self.id, x=self.x, z=self.z, health=self.health)


@dataclass(slots=True)
class Hostile(_Body):
    kind = EntityKind.HOSTILE


@dataclass(slots=True)
class Resource(_Body):
    kind = EntityKind.RESOURCE


@dataclass(slots=True)
class Ghost:
    """An eliminated participant that stays on the field without physics or interactions."""

    id: str
    x: float
    z: float
    health: int

    kind = EntityKind.GHOST


Entity = Union[Participant, Hostile, Resource]


def health_of(entity) -> int | None:
    """Health for participants, None for every other kind."""
    if isinstance(entity, (Participant, Ghost)):
        return entity.health
    return None
