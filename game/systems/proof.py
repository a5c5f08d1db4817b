"""
Match proofs.

A proof is the canonical JSON of `{meta: {room, seed, users}, events: [...]}` plus the SHA-256 of
those exact bytes. Anyone holding the proof file can recompute the fingerprint and compare it
with the one a client published (e.g. the one embedded in the file name).

Canonical encoding: UTF-8, sorted keys, no whitespace, numbers already normalized by the event log.
"""

from __future__ import annotations

import hashlib
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

import config
from game.systems.event_log import EventKind, EventLog

_FINGERPRINT_RE = re.compile(r"([0-9a-f]{64})")
_EVENT_KINDS = {k.value for k in EventKind}


class ProofFormatError(ValueError):
    """Raised when a serialized proof cannot be parsed into the `{meta, events}` shape."""


@dataclass(frozen=True, slots=True)
class Proof:
    canonical_bytes: bytes
    fingerprint: str

    @property
    def filename(self) -> str:
        return f"{config.PROOF_FILENAME_PREFIX}{self.fingerprint}.json"

    def text(self) -> str:
        return self.canonical_bytes.decode("utf-8")

    def write(self, directory: Union[str, Path]) -> Path:
        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / self.filename
        path.write_bytes(self.canonical_bytes)
        return path


@dataclass(frozen=True, slots=True)
class ProofCheck:
    """Result of `verify`: the recomputed fingerprint, or why it could not be computed."""

    ok: bool
    fingerprint: Optional[str] = None
    error: Optional[str] = None

    def matches(self, expected: Optional[str]) -> bool:
        return bool(self.ok and expected and self.fingerprint == str(expected).strip().lower())


def canonical_bytes(obj: Any) -> bytes:
    return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":"), allow_nan=False).encode(
        "utf-8"
    )


def fingerprint_of(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def build_canonical(room: str, seed_word: str, participant_ids: Iterable[str], log: EventLog) -> dict[str, Any]:
    return {
        "meta": {
            "room": str(room),
            "seed": str(seed_word),
            "users": sorted(str(u) for u in participant_ids),
        },
        "events": log.to_list(),
    }


def finalize(room: str, seed_word: str, participant_ids: Iterable[str], log: EventLog) -> Proof:
    data = canonical_bytes(build_canonical(room, seed_word, participant_ids, log))
    return Proof(canonical_bytes=data, fingerprint=fingerprint_of(data))


def parse_proof(serialized: Union[str, bytes, bytearray, Mapping[str, Any]]) -> dict[str, Any]:
    """Parse a proof (text, bytes or already-decoded mapping) and check its shape."""
    if isinstance(serialized, (bytes, bytearray)):
        try:
            serialized = bytes(serialized).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProofFormatError(f"proof is not valid UTF-8: {e}") from e
    if isinstance(serialized, str):
        try:
            obj = json.loads(serialized)
        except json.JSONDecodeError as e:
            raise ProofFormatError(f"proof is not valid JSON: {e}") from e
        except RecursionError as e:
            raise ProofFormatError("proof is nested too deeply") from e
    elif isinstance(serialized, Mapping):
        obj = serialized
    else:
        raise ProofFormatError(f"unsupported proof type: {type(serialized).__name__}")

    if not isinstance(obj, Mapping):
        raise ProofFormatError("proof must be a JSON object")
    meta = obj.get("meta")
    events = obj.get("events")
    if not isinstance(meta, Mapping):
        raise ProofFormatError("proof is missing a 'meta' object")
    for key in ("room", "seed", "users"):
        if key not in meta:
            raise ProofFormatError(f"proof meta is missing '{key}'")
    if not isinstance(meta["users"], list):
        raise ProofFormatError("proof meta 'users' must be a list")
    if not isinstance(events, list):
        raise ProofFormatError("proof is missing an 'events' list")

    last_tick = 0
    for i, ev in enumerate(events):
        if not isinstance(ev, Mapping):
            raise ProofFormatError(f"event {i} is not an object")
        tick = ev.get("tick")
        if not isinstance(tick, int) or isinstance(tick, bool) or tick < 0:
            raise ProofFormatError(f"event {i} has an invalid tick: {tick!r}")
        if tick < last_tick:
            raise ProofFormatError(f"event {i} goes back in time (tick {tick} after {last_tick})")
        last_tick = tick
        if ev.get("type") not in _EVENT_KINDS:
            raise ProofFormatError(f"event {i} has an unknown type: {ev.get('type')!r}")
        if not isinstance(ev.get("data"), Mapping):
            raise ProofFormatError(f"event {i} is missing its 'data' object")
    return dict(obj)


def verify(serialized: Union[str, bytes, bytearray, Mapping[str, Any]]) -> ProofCheck:
    """Recompute the fingerprint of a serialized proof. Never raises on malformed input."""
    try:
        obj = parse_proof(serialized)
        data = canonical_bytes(obj)
    except (ProofFormatError, ValueError, TypeError) as e:
        return ProofCheck(ok=False, error=str(e))
    except RecursionError:
        return ProofCheck(ok=False, error="proof is nested too deeply")
    return ProofCheck(ok=True, fingerprint=fingerprint_of(data))


def fingerprint_from_filename(path: Union[str, Path]) -> Optional[str]:
    """Extract the hex fingerprint embedded in a `battle-proof-<hex>.json` file name."""
    m = _FINGERPRINT_RE.search(Path(path).name)
    return m.group(1) if m else None
