"""
MongoDB connection management.

Provides the async client factory used at application startup. The client
owns an internal connection pool, so one instance is created per process
and its database handle is passed explicitly to the repositories.
"""

import logging

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from app.core.config import Settings, settings

logger = logging.getLogger(__name__)


def create_mongo_client(config: Settings | None = None) -> AsyncMongoClient:
    """
    Create and configure the async MongoDB client.

    Production-ready configuration includes:
    - Server selection timeout so an unreachable server fails fast
    - Client-side operation timeout (timeoutMS) bounding every round trip
    - tz-aware datetime decoding

    The client connects lazily; no I/O happens until the first operation.

    Args:
        config: Settings to read the connection options from (defaults to
            the process settings)

    Returns:
        Configured AsyncMongoClient
    """
    config = config or settings

    client: AsyncMongoClient = AsyncMongoClient(
        config.mongodb_url,
        appname=config.app_name,
        tz_aware=True,
        timeoutMS=config.mongodb_timeout_ms,
        serverSelectionTimeoutMS=config.mongodb_server_selection_timeout_ms,
    )

    logger.info(
        "Created MongoDB client",
        extra={
            "database": config.mongodb_database,
            "timeout_ms": config.mongodb_timeout_ms,
        },
    )
    return client


def get_database(client: AsyncMongoClient, config: Settings | None = None) -> AsyncDatabase:
    """Return the application database handle from a client."""
    config = config or settings
    return client[config.mongodb_database]


async def ping_database(db: AsyncDatabase) -> None:
    """
    Verify the server behind a database handle is reachable.

    Raises:
        pymongo.errors.PyMongoError: If the server cannot be reached
    """
    await db.command("ping")
