"""
Blogus Arena - deterministic chat-triggered arena matches with verifiable proofs.

Usage:
    python main.py run --room <room> --seed <word> --users "Amy,Bob" [--realtime] [--out DIR]
    python main.py verify <proof.json> [--expect <fingerprint>]

Every client that runs the same room, seed word and user list computes the same event log and
the same fingerprint; `verify` recomputes a fingerprint from a proof file.
"""
import argparse
import sys
from pathlib import Path

from config import PROOF_DIR
from game.engine import ArenaEngine
from game.sim.tunables import MatchRules
from game.systems import fingerprint_from_filename, sanitize_participants, verify


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Blogus Arena - deterministic arena matches with verifiable proofs"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a match to completion and export its proof")
    run.add_argument("--room", type=str, required=True, help="Room identifier")
    run.add_argument("--seed", type=str, default="", help="Seed word from the /startgame command")
    run.add_argument(
        "--users",
        type=str,
        default="",
        help="Comma-separated participant names (trimmed, de-duplicated, sorted case-insensitively)",
    )
    run.add_argument("--out", type=str, default=PROOF_DIR, help=f"Directory for the proof file (default: {PROOF_DIR})")
    run.add_argument("--realtime", action="store_true", help="Pace the match with pygame's clock")
    run.add_argument("--max-ticks", type=int, default=None, help="Override the tick cap")
    run.add_argument(
        "--elimination",
        choices=["remove", "ghost"],
        default=None,
        help="Elimination rule variant (default: ARENA_ELIMINATION_MODE or remove)",
    )

    ver = sub.add_parser("verify", help="Recompute the fingerprint of a proof file")
    ver.add_argument("proof", type=str, help="Path to a battle-proof-<fingerprint>.json file")
    ver.add_argument(
        "--expect",
        type=str,
        default=None,
        help="Published fingerprint to compare with (default: the one in the file name)",
    )
    return parser.parse_args(argv)


def cmd_run(args) -> int:
    overrides = {}
    if args.max_ticks is not None:
        overrides["max_ticks_override"] = args.max_ticks
    if args.elimination is not None:
        overrides["elimination"] = args.elimination
    try:
        rules = MatchRules(**overrides)
    except ValueError as e:
        print(f"[arena] ERROR: {e}", file=sys.stderr)
        return 2

    users = sanitize_participants(args.users.split(","))
    engine = ArenaEngine(rules, proof_dir=args.out)
    engine.start_match(args.room, args.seed, users)
    proof = engine.run_realtime() if args.realtime else engine.run_headless()
    if proof is None:
        print("[arena] ERROR: match did not finish", file=sys.stderr)
        return 1

    print(proof.fingerprint)
    return 0


def cmd_verify(args) -> int:
    path = Path(args.proof)
    if not path.exists():
        print(f"[arena] ERROR: missing {path}", file=sys.stderr)
        return 2

    check = verify(path.read_bytes())
    if not check.ok:
        print(f"[arena] ERROR: not a valid proof: {check.error}", file=sys.stderr)
        return 2

    print(check.fingerprint)
    expected = args.expect or fingerprint_from_filename(path)
    if expected is None:
        print("[arena] no published fingerprint to compare with")
        return 0
    if check.matches(expected):
        print("[arena] MATCH")
        return 0
    print(f"[arena] MISMATCH: expected {expected}", file=sys.stderr)
    return 1


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    if args.command == "run":
        return cmd_run(args)
    return cmd_verify(args)


if __name__ == "__main__":
    raise SystemExit(main())
