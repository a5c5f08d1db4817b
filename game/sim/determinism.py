"""
Determinism helpers.

Goals:
- Turn arbitrary UTF-8 strings (room, seed word, entity labels) into stable 32-bit seeds
- Provide a small PRNG whose output is bit-identical to other ports of the arena (mulberry32)
- Give every entity its own stream so adding/removing one entity never perturbs another

Non-goals:
- Cryptographic security of the PRNG (SHA-256 is only used to spread seeds)
- Python's `random` module (Mersenne Twister is not reproducible across languages)
"""

from __future__ import annotations

import hashlib

_MASK32 = 0xFFFFFFFF
_TWO_POW_32 = 4294967296.0

# Entity seed tags (part of the wire contract; never rename).
TAG_PARTICIPANT = "user"
TAG_HOSTILE = "foe"
TAG_RESOURCE = "food"


def digest_hex(text: str) -> str:
    """SHA-256 of the UTF-8 encoding of `text`, lowercase hex."""
    return hashlib.sha256(str(text).encode("utf-8")).hexdigest()


def derive_seed(text: str) -> int:
    """
    Derive a 32-bit unsigned seed from a string.

    The first 4 bytes of SHA-256(text) read big-endian. Total: the empty string is a valid input.
    """
    # Stable hashing (NEVER Python's built-in hash(), which is randomized per process).
    digest = hashlib.sha256(str(text).encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big", signed=False)


def match_digest(room: str, seed_word: str) -> str:
    """Hex digest identifying a match: SHA-256 of `room:seed_word`."""
    return digest_hex(f"{room}:{seed_word}")


def entity_seed(match_digest_hex: str, tag: str, discriminator) -> int:
    """Per-entity seed: a pure function of the match digest and the entity's own label."""
    return derive_seed(f"{match_digest_hex}::{tag}::{discriminator}")


def _imul(a: int, b: int) -> int:
    # 32-bit wrap-on-overflow multiply (the low 32 bits are identical for signed/unsigned views).
    return (a * b) & _MASK32


class Mulberry32:
    """
    mulberry32 generator: one 32-bit word of state, uniform floats in [0, 1).

    Every call advances the state by a fixed odd constant and mixes it with two xor-shift/multiply
    rounds. All arithmetic is unsigned 32-bit with wraparound, so any port that follows the same
    steps produces the same stream.
    """

    __slots__ = ("state",)

    INCREMENT = 0x6D2B79F5

    def __init__(self, seed: int):
        self.state = int(seed) & _MASK32

    def next_u32(self) -> int:
        a = (self.state + self.INCREMENT) & _MASK32
        self.state = a
        t = _imul(a ^ (a >> 15), 1 | a)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return (t ^ (t >> 14)) & _MASK32

    def next(self) -> float:
        """Return the next float in [0, 1) and advance the state."""
        return self.next_u32() / _TWO_POW_32

    def __call__(self) -> float:
        return self.next()

    def take(self, n: int) -> list[float]:
        return [self.next() for _ in range(int(n))]


def rng_for(match_digest_hex: str, tag: str, discriminator) -> Mulberry32:
    """Create the independent generator for one entity."""
    return Mulberry32(entity_seed(match_digest_hex, tag, discriminator))
