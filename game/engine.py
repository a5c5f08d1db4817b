"""
Arena engine - owns the current match and drives it step by step.

The engine is the only place that knows about wall-clock time. Everything it hands to the
systems is tick-based, so a headless run and a realtime run of the same inputs log the same events.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Sequence

import pygame

from game.sim.contracts import MatchState
from game.sim.determinism import match_digest
from game.sim.timebase import SimulationClock, wall_clock_seconds
from game.sim.tunables import MatchRules
from game.systems import EntitySpawner, EventLog, InteractionResolver, Proof, finalize


class ArenaEngine:
    """Runs one match at a time; starting a new match discards the previous one."""

    def __init__(
        self,
        rules: Optional[MatchRules] = None,
        *,
        proof_dir: Optional[str | Path] = None,
        on_finalize: Optional[Callable[[MatchState, Proof], None]] = None,
        verbose: bool = True,
    ):
        self.rules = rules or MatchRules()
        self.proof_dir = None if proof_dir is None else Path(proof_dir)
        self.on_finalize = on_finalize
        self.verbose = verbose
        self.spawner = EntitySpawner(self.rules)
        self.resolver = InteractionResolver()
        self.state: Optional[MatchState] = None
        self.last_proof_path: Optional[Path] = None

    def _say(self, msg: str) -> None:
        if self.verbose:
            print(f"[arena] {msg}")

    # -----------------------------
    # Lifecycle
    # -----------------------------

    def start_match(self, room: str, seed_word: str, participant_ids: Sequence[str]) -> MatchState:
        """
        Build a fresh match and make it current.

        The new state is fully built before it replaces the old one, so an in-flight match is
        superseded atomically rather than sharing entities with the new one.
        """
        room = str(room)
        seed_word = "" if seed_word is None else str(seed_word)
        ids = [str(u) for u in participant_ids]

        state = MatchState(
            room=room,
            seed_word=seed_word,
            participant_ids=ids,
            digest=match_digest(room, seed_word),
            rules=self.rules,
            clock=SimulationClock(self.rules.step_seconds, max_ticks=self.rules.max_ticks),
            log=EventLog(),
        )
        entities, counts = self.spawner.spawn(state.digest, ids, state.log)
        state.entities = entities
        state.log.record_spawn_meta(
            0, room=room, seed_word=seed_word, usernames=ids, counts=counts.to_dict()
        )

        self.state = state
        self.last_proof_path = None
        self._say(
            f'start seed="{seed_word}" room="{room}" players={counts.players} '
            f"foes={counts.foes} food={counts.food} entities={len(entities)}"
        )
        return state

    def abandon(self) -> None:
        """Drop the current match without finalizing it."""
        if self.state is not None:
            self._say(f'abandoned room="{self.state.room}" at tick={self.state.tick}')
        self.state = None

    @property
    def running(self) -> bool:
        return self.state is not None and not self.state.ended

    # -----------------------------
    # Stepping
    # -----------------------------

    def step(self) -> bool:
        """Run one fixed step. Returns True once the match has ended."""
        state = self.state
        if state is None or state.ended:
            return True
        if self.resolver.step(state):
            self.finish()
        return state.ended

    def advance(self, now_seconds: float) -> int:
        """Feed a wall-clock reading; run every fixed step that is due. Returns steps executed."""
        state = self.state
        if state is None or state.ended:
            return 0
        due = state.clock.advance(now_seconds)
        done = 0
        for _ in range(due):
            done += 1
            if self.step():
                break
        return done

    def finish(self) -> Proof:
        """Log the final snapshot and compute the match proof."""
        state = self.state
        if state is None:
            raise RuntimeError("no match to finalize")
        if state.ended and state.proof is not None:
            return state.proof

        state.log.record_final_snapshot(state.tick, state.entities)
        proof = finalize(state.room, state.seed_word, state.participant_ids, state.log)
        state.proof = proof
        state.ended = True
        self._say(f"match end tick={state.tick} live={state.live_count} fingerprint={proof.fingerprint}")

        if self.proof_dir is not None:
            self.last_proof_path = proof.write(self.proof_dir)
            self._say(f"proof written to {self.last_proof_path}")
        if self.on_finalize is not None:
            self.on_finalize(state, proof)
        return proof

    # -----------------------------
    # Drivers
    # -----------------------------

    def run_headless(self, max_steps: Optional[int] = None) -> Optional[Proof]:
        """Step as fast as possible until the match ends (or `max_steps` runs out)."""
        steps = 0
        while self.running:
            if max_steps is not None and steps >= int(max_steps):
                break
            self.step()
            steps += 1
        return None if self.state is None else self.state.proof

    def run_realtime(self, fps: Optional[int] = None) -> Optional[Proof]:
        """Drive the match from pygame's clock until it ends (paced at the rules' step rate by default)."""
        if fps is None:
            fps = self.rules.step_hz
        clock = pygame.time.Clock()
        if self.state is not None:
            self.state.clock.advance(wall_clock_seconds())
        while self.running:
            clock.tick(max(1, int(fps)))
            self.advance(wall_clock_seconds())
        return None if self.state is None else self.state.proof
