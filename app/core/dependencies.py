"""
FastAPI dependency injection utilities.

Provides reusable dependencies for the database handle and path
parameter checks shared by the resource routers.
"""

from typing import Annotated

from fastapi import Depends, Request
from pymongo.asynchronous.database import AsyncDatabase

from app.core.errors import InvalidArgumentError

# ============================================================================
# Database Dependencies
# ============================================================================


def get_app_database(request: Request) -> AsyncDatabase:
    """
    Database handle dependency for FastAPI endpoints.

    The handle is created once in the application lifespan (or injected via
    ``create_app(database=...)``) and stored on ``app.state``.

    Usage:
        @router.get("/users/{email}")
        async def get_user(email: str, db: AppDatabase):
            return await user_repo.get_user(db, email)

    Raises:
        RuntimeError: If the application has no database configured
    """
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not initialised; is the application lifespan running?")
    return database


# Type alias for the database dependency
AppDatabase = Annotated[AsyncDatabase, Depends(get_app_database)]


# ============================================================================
# Request Helpers
# ============================================================================


def require_path_param(name: str, value: str | None) -> str:
    """
    Ensure a path parameter is present and not blank.

    Args:
        name: Parameter name used in the error message
        value: Raw value taken from the path

    Returns:
        The value, unchanged

    Raises:
        InvalidArgumentError: If the value is missing or whitespace only
    """
    if value is None or not value.strip():
        raise InvalidArgumentError(f"invalid argument {name}", details={"param": name})
    return value
