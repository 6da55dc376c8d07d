"""CLI wrapper: Run the API locally with auto-reload on APP_PORT."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    from app.core.config import settings

    uvicorn_args = ["app.main:app", "--reload", "--host", "127.0.0.1"]
    uvicorn_args += ["--port", str(settings.app_port)]
    run([sys.executable, "-m", "uvicorn", *uvicorn_args, *sys.argv[1:]])
