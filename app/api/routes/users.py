"""
FastAPI routes for User CRUD operations.

Users are addressed by email in the path. No authentication is applied.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Path, status

from app.api.schemas.user import UserCreate, UserEnvelope, UserUpdate
from app.core.dependencies import AppDatabase, require_path_param
from app.repos import user_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

EmailParam = Annotated[str, Path(description="Email address of the user")]


@router.get(
    "/{email}",
    response_model=UserEnvelope,
    summary="Get a user by email",
    description="""
    Retrieve a single user by email.

    **Errors:**
    - 400 Bad Request: If the email is blank
    - 404 Not Found: If no user has this email
    """,
)
async def get_user(email: EmailParam, db: AppDatabase) -> UserEnvelope:
    """Get a user by email."""
    require_path_param("email", email)
    user = await user_repo.get_user(db, email)
    return UserEnvelope(user=user)


@router.post(
    "",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    description="""
    Create a new user. The identifier is assigned by storage.

    Email uniqueness is not enforced.

    **Errors:**
    - 400 Bad Request: If the body is not a valid user JSON object
    """,
)
async def create_user(user: UserCreate, db: AppDatabase) -> UserEnvelope:
    """Create a new user."""
    created = await user_repo.create_user(db, user)
    return UserEnvelope(user=created)


@router.put(
    "/{email}",
    response_model=UserEnvelope,
    summary="Update a user",
    description="""
    Partially update a user addressed by email.

    Only non-empty fields (`name`, `password`) are written; the email in the
    path always wins over anything in the body. The response reflects the
    stored user after the update.

    **Errors:**
    - 400 Bad Request: If the email is blank or the body is invalid
    - 404 Not Found: If no user has this email
    """,
)
async def update_user(email: EmailParam, updates: UserUpdate, db: AppDatabase) -> UserEnvelope:
    """Update a user (partial update)."""
    require_path_param("email", email)
    user = await user_repo.update_user(db, email, updates)
    return UserEnvelope(user=user)


@router.delete(
    "/{email}",
    summary="Delete a user",
    description="""
    Delete the user with this email.

    **Errors:**
    - 400 Bad Request: If the email is blank
    - 404 Not Found: If no user has this email
    """,
)
async def delete_user(email: EmailParam, db: AppDatabase) -> dict:
    """Delete a user by email."""
    require_path_param("email", email)
    await user_repo.delete_user(db, email)
    return {}
