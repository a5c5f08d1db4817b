"""
Canonical match event log.

Every state-changing event is appended here with the tick it happened on. Numeric fields are
rounded before storage so two clients doing equivalent (but not bit-identical) float math still
log identical values. The log is the input to the match proof, so nothing wall-clock or
locale-dependent may ever be recorded.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from game.entities.arena import health_of
from game.sim.tunables import LOG_PRECISION


class EventKind(str, Enum):
    SPAWN = "spawn"
    SPAWN_META = "spawnMeta"
    COLLISION = "collision"
    REMOVE = "remove"
    FINAL_SNAPSHOT = "finalSnapshot"


def round_n(value: float, precision: int = LOG_PRECISION) -> float | int:
    """
    Round half-up to `precision` decimals and normalize for serialization.

    Half-up (`floor(v * p + 0.5) / p`) instead of Python's banker's `round()`. Integral results come
    back as `int` and negative zero becomes `0`, so the JSON text is the same as other ports emit.
    """
    p = 10 ** int(precision)
    r = math.floor(float(value) * p + 0.5) / p
    if r == int(r):
        return int(r)
    return r


@dataclass(slots=True)
class EventRecord:
    tick: int
    kind: EventKind
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"tick": int(self.tick), "type": self.kind.value, "data": self.data}


class EventLog:
    """Append-only, tick-ordered record of a single match."""

    def __init__(self):
        self._records: list[EventRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    @property
    def last_tick(self) -> int:
        return self._records[-1].tick if self._records else 0

    def clear(self) -> None:
        """Only called when a new match starts."""
        self._records.clear()

    def record(self, kind: EventKind, tick: int, data: Optional[dict[str, Any]] = None) -> EventRecord:
        tick = int(tick)
        if tick < 0:
            raise ValueError(f"tick must be non-negative, got {tick}")
        if self._records and tick < self._records[-1].tick:
            raise ValueError(f"event tick {tick} is earlier than last logged tick {self._records[-1].tick}")
        rec = EventRecord(tick=tick, kind=EventKind(kind), data=dict(data or {}))
        self._records.append(rec)
        return rec

    # -----------------------------
    # Typed helpers
    # -----------------------------

    def record_spawn(self, tick: int, entity) -> EventRecord:
        return self.record(
            EventKind.SPAWN,
            tick,
            {
                "id": str(entity.id),
                "t": entity.kind.value,
                "x": round_n(entity.x),
                "z": round_n(entity.z),
                "vx": round_n(entity.vx),
                "vz": round_n(entity.vz),
                "hp": health_of(entity),
            },
        )

    def record_spawn_meta(
        self, tick: int, *, room: str, seed_word: str, usernames: Iterable[str], counts: dict[str, int]
    ) -> EventRecord:
        return self.record(
            EventKind.SPAWN_META,
            tick,
            {
                "room": str(room),
                "seedWord": str(seed_word),
                "usernames": [str(u) for u in usernames],
                "counts": {k: int(v) for k, v in counts.items()},
            },
        )

    def record_collision(self, tick: int, a, b) -> EventRecord:
        return self.record(
            EventKind.COLLISION,
            tick,
            {
                "a": str(a.id),
                "ta": a.kind.value,
                "ahp": health_of(a),
                "b": str(b.id),
                "tb": b.kind.value,
                "bhp": health_of(b),
            },
        )

    def record_remove(self, tick: int, entity, reason: str) -> EventRecord:
        return self.record(
            EventKind.REMOVE,
            tick,
            {"id": str(entity.id), "t": entity.kind.value, "reason": str(reason)},
        )

    def record_final_snapshot(self, tick: int, entities: Iterable) -> EventRecord:
        snap = [
            {
                "id": str(e.id),
                "t": e.kind.value,
                "x": round_n(e.x),
                "z": round_n(e.z),
                "hp": health_of(e),
            }
            for e in entities
        ]
        snap.sort(key=lambda s: s["t"] + s["id"])
        return self.record(EventKind.FINAL_SNAPSHOT, tick, {"totalTicks": int(tick), "snapshot": snap})

    def to_list(self) -> list[dict[str, Any]]:
        return [r.to_dict() for r in self._records]
