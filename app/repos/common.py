"""
Common repository functions shared across the resource repos.

Storage calls run inside ``storage_operation`` so that driver failures
surface as ``StorageError`` and every call is timed into Prometheus.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from pymongo.errors import PyMongoError

from app.core.errors import StorageError
from app.core.observability import storage_metrics

logger = logging.getLogger(__name__)

__all__ = ["storage_operation"]


@asynccontextmanager
async def storage_operation(collection: str, operation: str) -> AsyncIterator[None]:
    """Run one storage call, translating driver errors into StorageError.

    Args:
        collection: Collection being accessed
        operation: Driver operation name, used for metrics and logs

    Raises:
        StorageError: If the driver raises any PyMongoError
    """
    try:
        with storage_metrics.track(collection, operation):
            yield
    except PyMongoError as e:
        logger.error(
            f"Storage operation failed: {collection}.{operation}",
            extra={"collection": collection, "operation": operation, "error": str(e)},
        )
        raise StorageError(
            str(e),
            details={"collection": collection, "operation": operation},
        ) from e
