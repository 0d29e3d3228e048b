#!/usr/bin/env python3
"""
Lint and format chatstore with ruff, isort and black.

    python lint.py           # auto-fix
    python lint.py --check   # report only, non-zero exit on problems
"""

import subprocess
import sys
from pathlib import Path

TARGETS = ["chatstore", "tests", "lint.py", "main.py"]

CHECK_STEPS = [
    (["ruff", "check"], "ruff lint"),
    (["isort", "--check-only"], "isort import order"),
    (["black", "--check"], "black formatting"),
]

FIX_STEPS = [
    (["ruff", "check", "--fix"], "ruff auto-fix"),
    (["isort"], "isort"),
    (["black"], "black"),
]


def run_step(command: list[str], description: str) -> bool:
    """Run one tool over TARGETS and report whether it passed."""
    full_command = command + TARGETS
    print(f"\n{'=' * 80}\n{description}: {' '.join(full_command)}\n{'=' * 80}")

    result = subprocess.run(full_command, cwd=Path(__file__).parent)
    print(f"{'✅' if result.returncode == 0 else '❌'} {description}")
    return result.returncode == 0


def main() -> int:
    steps = CHECK_STEPS if "--check" in sys.argv else FIX_STEPS
    results = [run_step(command, description) for command, description in steps]

    if all(results):
        print("\n🎉 All checks passed\n")
        return 0

    failed = [description for (_, description), ok in zip(steps, results) if not ok]
    print(f"\n⚠️  Failed: {', '.join(failed)}\n")
    return 1


if __name__ == "__main__":
    sys.exit(main())
