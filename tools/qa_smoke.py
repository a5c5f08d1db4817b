"""
QA smoke runner (headless).

Runs the determinism guard, then the same match twice through `main.py run`, and checks that both
runs publish the same fingerprint and that `main.py verify` accepts the exported proof.

Examples:
  python tools/qa_smoke.py --quick
  python tools/qa_smoke.py --room BLOGUS --seed alpha --users "Amy,Bob,Cat" --max-ticks 3600
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
import tempfile
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
MAIN = PROJECT_ROOT / "main.py"
DETERMINISM_GUARD = PROJECT_ROOT / "tools" / "determinism_guard.py"


def _run(cmd: list[str], *, title: str) -> subprocess.CompletedProcess:
    env = os.environ.copy()
    # Extra safety for headless environments (Windows + CI runners).
    env.setdefault("SDL_VIDEODRIVER", "dummy")
    env.setdefault("SDL_AUDIODRIVER", "dummy")

    print(f"\n[qa_smoke] === {title} ===")
    print("[qa_smoke] cmd:", " ".join(cmd))
    completed = subprocess.run(cmd, env=env, cwd=str(PROJECT_ROOT), capture_output=True, text=True)
    if completed.stdout:
        print(completed.stdout.rstrip())
    if completed.stderr:
        print(completed.stderr.rstrip(), file=sys.stderr)
    print(f"[qa_smoke] exit_code={completed.returncode}")
    return completed


def _fingerprint(completed: subprocess.CompletedProcess) -> str:
    lines = [ln.strip() for ln in completed.stdout.splitlines() if ln.strip()]
    return lines[-1] if lines else ""


def _run_profile(*, room: str, seed: str, users: str, max_ticks: int | None, elimination: str) -> int:
    with tempfile.TemporaryDirectory(prefix="arena_qa_") as tmp:
        fingerprints: list[str] = []
        for attempt in (1, 2):
            out_dir = Path(tmp) / f"run{attempt}"
            cmd = [
                sys.executable,
                str(MAIN),
                "run",
                "--room",
                room,
                "--seed",
                seed,
                "--users",
                users,
                "--out",
                str(out_dir),
                "--elimination",
                elimination,
            ]
            if max_ticks is not None:
                cmd += ["--max-ticks", str(max_ticks)]
            completed = _run(cmd, title=f"run #{attempt} ({elimination})")
            if completed.returncode != 0:
                return int(completed.returncode)
            fingerprints.append(_fingerprint(completed))

        if fingerprints[0] != fingerprints[1]:
            print(f"[qa_smoke] FAIL: fingerprints differ: {fingerprints[0]} vs {fingerprints[1]}")
            return 1

        proofs = sorted((Path(tmp) / "run1").glob("battle-proof-*.json"))
        if not proofs:
            print("[qa_smoke] FAIL: no proof file was exported")
            return 1
        completed = _run([sys.executable, str(MAIN), "verify", str(proofs[0])], title="verify")
        return int(completed.returncode)


def main() -> int:
    ap = argparse.ArgumentParser(description="Run headless QA smoke profiles")
    ap.add_argument("--room", default="BLOGUS", help="room identifier")
    ap.add_argument("--seed", default="alpha", help="seed word")
    ap.add_argument("--users", default="Amy,Bob", help="comma-separated participant names")
    ap.add_argument("--max-ticks", type=int, default=None, help="tick cap override")
    ap.add_argument("--quick", action="store_true", help="run a small set of standard smoke profiles")
    ns = ap.parse_args()

    if not MAIN.exists():
        print(f"[qa_smoke] ERROR: missing {MAIN}")
        return 2

    # Determinism is a release gate: fail fast if someone reintroduced wall-clock/RNG into match logic.
    rc = int(_run([sys.executable, str(DETERMINISM_GUARD)], title="determinism_guard (static)").returncode)
    if rc != 0:
        print("\n[qa_smoke] DONE:", f"FAIL (rc={rc})")
        return rc

    if ns.quick:
        profiles = [
            dict(room="BLOGUS", seed="alpha", users="Amy,Bob", max_ticks=3600, elimination="remove"),
            dict(room="BLOGUS", seed="alpha", users="Amy,Bob,Cat,Dee", max_ticks=3600, elimination="ghost"),
            dict(room="lobby", seed="", users="", max_ticks=600, elimination="remove"),
        ]
    else:
        profiles = [
            dict(room=ns.room, seed=ns.seed, users=ns.users, max_ticks=ns.max_ticks, elimination="remove"),
        ]

    for p in profiles:
        rc = _run_profile(**p)
        if rc != 0:
            break

    print("\n[qa_smoke] DONE:", "PASS" if rc == 0 else f"FAIL (rc={rc})")
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
