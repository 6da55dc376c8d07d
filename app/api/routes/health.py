"""Liveness and readiness probes."""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.core.db import ping_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    """The process is up; storage is not consulted."""
    return {"ok": True}


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    """Ready when MongoDB answers a ping: 200 if it does, 503 otherwise."""
    try:
        await ping_database(request.app.state.database)
    except Exception as exc:
        logger.error(f"Readiness ping failed: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "db": "unavailable"},
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content={"ok": True, "db": "ok"})
