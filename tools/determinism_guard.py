"""
Determinism guard (static check).

Purpose:
- Prevent accidental reintroduction of nondeterministic dependencies into match logic
  (every client must reach the same event log and fingerprint from the same inputs).

What we flag (in simulation code):
- Wall-clock-ish time: pygame.time.get_ticks(), time.time(), time.monotonic(), time.perf_counter(),
  datetime.now(), etc.
- Global RNG: random.random/randint/choice/shuffle/... (use game.sim.determinism.Mulberry32)
- Python's hash() (process-randomized by default)
- Builtin round() (banker's rounding; logged values go through event_log.round_n)

We intentionally DO NOT scan:
- game/sim/timebase.py (the one place the driver reads the wall clock)
"""

from __future__ import annotations

import argparse
import ast
import json
import sys
from pathlib import Path
from typing import Iterable


PROJECT_ROOT = Path(__file__).resolve().parents[1]


DEFAULT_SCAN_DIRS = [
    PROJECT_ROOT / "game" / "entities",
    PROJECT_ROOT / "game" / "systems",
    PROJECT_ROOT / "game" / "sim",
]

DEFAULT_EXCLUDE = [
    PROJECT_ROOT / "game" / "sim" / "timebase.py",
]


_RANDOM_ATTRS = {
    "random",
    "randint",
    "uniform",
    "choice",
    "choices",
    "shuffle",
    "sample",
    "seed",
    "randrange",
    "getrandbits",
}

_TIME_ATTRS_FORBIDDEN = {
    "time",
    "monotonic",
    "perf_counter",
    "time_ns",
    "monotonic_ns",
}

_DATETIME_ATTRS_FORBIDDEN = {
    "now",
    "utcnow",
    "today",
}

# Builtin round() is tolerated where no logged value depends on it.
_ROUND_ALLOWED = {
    PROJECT_ROOT / "game" / "sim" / "tunables.py",
}


def _is_under(path: Path, parent: Path) -> bool:
    try:
        path.resolve().relative_to(parent.resolve())
        return True
    except ValueError:
        return False


def _rel(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(PROJECT_ROOT))
    except ValueError:
        return str(path)


def _iter_py_files(roots: Iterable[Path], *, exclude: list[Path]) -> list[Path]:
    out: list[Path] = []
    for root in roots:
        if not root.exists():
            continue
        if root.is_file() and root.suffix.lower() == ".py":
            out.append(root)
            continue
        for p in root.rglob("*.py"):
            if any(_is_under(p, ex) for ex in exclude):
                continue
            out.append(p)
    return sorted(set(out))


def _attr_chain(node: ast.AST) -> list[str] | None:
    """
    For Attribute chains, return list like ["pygame", "time", "get_ticks"].
    For Names, return ["name"].
    """
    if isinstance(node, ast.Name):
        return [node.id]
    if isinstance(node, ast.Attribute):
        base = _attr_chain(node.value)
        if base is None:
            return None
        return [*base, node.attr]
    return None


def _violation(kind: str, file: Path, node: ast.AST, detail: str) -> dict:
    return {
        "kind": kind,
        "file": _rel(file),
        "line": int(getattr(node, "lineno", 0) or 0),
        "col": int(getattr(node, "col_offset", 0) or 0),
        "detail": detail,
    }


def _check_call(chain: list[str], file_path: Path, node: ast.Call) -> dict | None:
    if chain == ["pygame", "time", "get_ticks"]:
        return _violation(
            "wall_clock_time",
            file_path,
            node,
            "Only the engine driver may read pygame.time.get_ticks(); match logic runs on ticks.",
        )

    if len(chain) == 2 and chain[0] == "time" and chain[1] in _TIME_ATTRS_FORBIDDEN:
        return _violation(
            "wall_clock_time",
            file_path,
            node,
            f"Avoid time.{chain[1]}() in match logic; use the tick counter from SimulationClock.",
        )

    if chain[-1] in _DATETIME_ATTRS_FORBIDDEN and ("datetime" in chain or "date" in chain):
        return _violation(
            "wall_clock_time",
            file_path,
            node,
            "Avoid datetime.now()/utcnow()/today() in match logic; wall-clock time must never reach the log.",
        )

    if len(chain) == 2 and chain[0] == "random" and chain[1] in _RANDOM_ATTRS:
        return _violation(
            "global_rng",
            file_path,
            node,
            "Use game.sim.determinism.rng_for(...) (per-entity mulberry32) instead of random.*.",
        )

    if chain == ["hash"]:
        return _violation(
            "unstable_hash",
            file_path,
            node,
            "Avoid Python hash(); use game.sim.determinism.derive_seed (SHA-256) or explicit IDs.",
        )

    if chain == ["round"] and file_path.resolve() not in {p.resolve() for p in _ROUND_ALLOWED}:
        return _violation(
            "bankers_round",
            file_path,
            node,
            "Builtin round() rounds half-to-even; use game.systems.event_log.round_n for logged values.",
        )

    return None


def scan_file(file_path: Path) -> list[dict]:
    try:
        src = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        src = file_path.read_text(encoding="utf-8", errors="replace")

    try:
        tree = ast.parse(src, filename=str(file_path))
    except SyntaxError as e:
        return [
            {
                "kind": "parse_error",
                "file": _rel(file_path),
                "line": int(getattr(e, "lineno", 0) or 0),
                "col": int(getattr(e, "offset", 0) or 0),
                "detail": f"SyntaxError: {e}",
            }
        ]

    findings: list[dict] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        chain = _attr_chain(node.func)
        if not chain:
            continue
        v = _check_call(chain, file_path, node)
        if v is not None:
            findings.append(v)
    return findings


def scan_paths(roots: Iterable[Path] | None = None) -> list[dict]:
    roots = list(roots) if roots else list(DEFAULT_SCAN_DIRS)
    findings: list[dict] = []
    for f in _iter_py_files(roots, exclude=list(DEFAULT_EXCLUDE)):
        findings.extend(scan_file(f))
    return findings


def main() -> int:
    ap = argparse.ArgumentParser(description="Static determinism guard (match logic)")
    ap.add_argument(
        "--paths",
        nargs="*",
        default=[],
        help="Optional paths to scan (files or dirs). Default scans game/entities, game/systems, game/sim.",
    )
    ap.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    ns = ap.parse_args()

    all_findings = scan_paths([Path(p) for p in ns.paths])

    if ns.json:
        print(json.dumps({"findings": all_findings}, indent=2))
    else:
        if not all_findings:
            print("[determinism_guard] PASS: no violations found")
        else:
            print(f"[determinism_guard] FAIL: {len(all_findings)} violation(s)", file=sys.stderr)
            for v in all_findings:
                print(f"- {v['file']}:{v['line']}:{v['col']} [{v['kind']}] {v['detail']}", file=sys.stderr)

    return 0 if not all_findings else 1


if __name__ == "__main__":
    raise SystemExit(main())
