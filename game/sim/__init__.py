"""
Determinism-friendly simulation primitives.

Seeds, the per-entity PRNG, the fixed-step clock and the locked match rules. Nothing in here reads
wall-clock time except `timebase.wall_clock_seconds`, which only the engine's driver loop calls.
"""
