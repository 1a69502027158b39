#!/usr/bin/env python3
"""Run ghimg's checks locally: ruff, pytest, and pyright."""

import argparse
import subprocess
import sys
import time
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent.resolve()

_USE_COLOR = sys.stdout.isatty()


def _paint(code: str, text: str) -> str:
    return f"\033[{code}m{text}\033[0m" if _USE_COLOR else text


# (name, command); names are what --only accepts
CHECKS: list[tuple[str, list[str]]] = [
    ("format", [sys.executable, "-m", "ruff", "format", "--check", "."]),
    ("lint", [sys.executable, "-m", "ruff", "check", "."]),
    ("tests", [sys.executable, "-m", "pytest", "-q"]),
    ("types", [sys.executable, "-m", "pyright"]),
]


def run_check(cmd: list[str]) -> tuple[bool, float]:
    """Run one command from the project root, returning (passed, seconds)."""
    start = time.monotonic()
    returncode = subprocess.run(cmd, cwd=PROJECT_ROOT).returncode
    return returncode == 0, time.monotonic() - start


def main() -> None:
    parser = argparse.ArgumentParser(description="Run ghimg checks locally.")
    parser.add_argument("--fail-fast", action="store_true", help="Stop at the first failing check.")
    parser.add_argument(
        "--only",
        action="append",
        choices=[name for name, _ in CHECKS],
        help="Run only the named check (repeatable).",
    )
    args = parser.parse_args()

    selected = [(name, cmd) for name, cmd in CHECKS if not args.only or name in args.only]
    failed: list[str] = []

    for name, cmd in selected:
        print(_paint("1", f"==> {name}"), flush=True)
        passed, elapsed = run_check(cmd)
        status = _paint("32", "PASS") if passed else _paint("31", "FAIL")
        print(f"{status} {name} ({elapsed:.1f}s)\n")
        if not passed:
            failed.append(name)
            if args.fail_fast:
                break

    if failed:
        print(_paint("31", f"Failed: {', '.join(failed)}"))
        sys.exit(1)
    print(_paint("32", f"All {len(selected)} checks passed"))


if __name__ == "__main__":
    main()
