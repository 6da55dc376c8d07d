"""
Repository layer for User data access.

Users are addressed by email. Email uniqueness is not enforced by storage;
lookups, updates and deletes act on the first matching document.
"""

import logging

from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from app.api.schemas.user import User, UserCreate, UserUpdate
from app.core.errors import UserNotFoundError
from app.db.models import USERS_COLLECTION, user_from_document, user_to_document
from app.repos.common import storage_operation

logger = logging.getLogger(__name__)


async def get_user(db: AsyncDatabase, email: str) -> User:
    """
    Retrieve a single user by email.

    Args:
        db: Database handle
        email: User email

    Returns:
        User

    Raises:
        UserNotFoundError: If no user has this email
        StorageError: On driver failure
    """
    async with storage_operation(USERS_COLLECTION, "find_one"):
        doc = await db[USERS_COLLECTION].find_one({"email": email})

    if doc is None:
        logger.warning(f"User not found: {email}")
        raise UserNotFoundError(details={"email": email})

    logger.debug(f"Retrieved user: {email}")
    return user_from_document(doc)


async def create_user(db: AsyncDatabase, user: UserCreate) -> User:
    """
    Insert a new user document.

    Args:
        db: Database handle
        user: UserCreate schema with user data

    Returns:
        The created User carrying its storage-assigned id

    Raises:
        StorageError: On driver failure
    """
    doc = user_to_document(user)

    async with storage_operation(USERS_COLLECTION, "insert_one"):
        result = await db[USERS_COLLECTION].insert_one(doc)

    created = user_from_document({**doc, "_id": result.inserted_id})
    logger.info(f"Created user: {created.id}", extra={"user_id": created.id})
    return created


async def update_user(db: AsyncDatabase, email: str, updates: UserUpdate) -> User:
    """
    Update an existing user (partial update).

    Only non-empty fields are written; empty fields leave the stored value
    unchanged. The merged document is read back in the same round trip.

    Args:
        db: Database handle
        email: Email of the user to update
        updates: UserUpdate schema with fields to update

    Returns:
        The User as persisted after the update

    Raises:
        UserNotFoundError: If no user has this email
        StorageError: On driver failure
    """
    fields = {key: value for key, value in updates.model_dump().items() if value}

    if not fields:
        logger.debug(f"No updates provided for user: {email}")
        return await get_user(db, email)

    async with storage_operation(USERS_COLLECTION, "find_one_and_update"):
        doc = await db[USERS_COLLECTION].find_one_and_update(
            {"email": email},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )

    if doc is None:
        logger.warning(f"User not found for update: {email}")
        raise UserNotFoundError(details={"email": email})

    logger.info(
        f"Updated user: {email}",
        extra={"updated_fields": sorted(fields)},
    )
    return user_from_document(doc)


async def delete_user(db: AsyncDatabase, email: str) -> None:
    """
    Delete a user by email.

    Raises:
        UserNotFoundError: If no document was removed
        StorageError: On driver failure
    """
    async with storage_operation(USERS_COLLECTION, "delete_one"):
        result = await db[USERS_COLLECTION].delete_one({"email": email})

    if result.deleted_count == 0:
        logger.warning(f"User not found for delete: {email}")
        raise UserNotFoundError(details={"email": email})

    logger.info(f"Deleted user: {email}")
