"""Helper shared by the console scripts in this package."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence


def run(cmd: Sequence[str]) -> None:
    """Run ``cmd`` in the foreground and exit with its status code."""
    completed = subprocess.run(cmd)
    raise SystemExit(completed.returncode)
