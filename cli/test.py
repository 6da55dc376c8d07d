"""CLI wrapper: Run the test suite (extra arguments go to pytest)."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    run([sys.executable, "-m", "pytest", "-q", "tests", *sys.argv[1:]])
