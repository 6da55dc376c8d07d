"""
Repository layer for Order data access.

Orders are addressed by their storage identifier. Only the status is
updatable; the identifier itself is never written by an update.
"""

import logging

from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from app.api.schemas.order import Order, OrderCreate, OrderUpdate
from app.core.errors import OrderNotFoundError
from app.db.models import (
    ORDERS_COLLECTION,
    order_from_document,
    order_to_document,
    parse_object_id,
)
from app.repos.common import storage_operation

logger = logging.getLogger(__name__)


async def get_order(db: AsyncDatabase, order_id: str) -> Order:
    """
    Retrieve a single order by its identifier.

    Args:
        db: Database handle
        order_id: Order identifier

    Returns:
        Order

    Raises:
        OrderNotFoundError: If no order has this id (including malformed ids)
        StorageError: On driver failure
    """
    oid = parse_object_id(order_id)
    if oid is None:
        logger.warning(f"Malformed order id: {order_id}")
        raise OrderNotFoundError(details={"id": order_id})

    async with storage_operation(ORDERS_COLLECTION, "find_one"):
        doc = await db[ORDERS_COLLECTION].find_one({"_id": oid})

    if doc is None:
        logger.warning(f"Order not found: {order_id}")
        raise OrderNotFoundError(details={"id": order_id})

    logger.debug(f"Retrieved order: {order_id}")
    return order_from_document(doc)


async def create_order(db: AsyncDatabase, order: OrderCreate) -> Order:
    """
    Insert a new order document.

    The customer_id is stored as given; it is not checked against users.

    Returns:
        The created Order carrying its storage-assigned id

    Raises:
        StorageError: On driver failure
    """
    doc = order_to_document(order)

    async with storage_operation(ORDERS_COLLECTION, "insert_one"):
        result = await db[ORDERS_COLLECTION].insert_one(doc)

    created = order_from_document({**doc, "_id": result.inserted_id})
    logger.info(
        f"Created order: {created.id}",
        extra={"order_id": created.id, "order_number": created.order_number},
    )
    return created


async def update_order(db: AsyncDatabase, order_id: str, updates: OrderUpdate) -> Order:
    """
    Update an existing order's status.

    An empty status is treated as "not provided" and the stored order is
    returned unchanged. Otherwise the merged document is read back in the
    same round trip.

    Args:
        db: Database handle
        order_id: Identifier of the order to update
        updates: OrderUpdate schema

    Returns:
        The Order as persisted after the update

    Raises:
        OrderNotFoundError: If no order has this id
        StorageError: On driver failure
    """
    oid = parse_object_id(order_id)
    if oid is None:
        logger.warning(f"Malformed order id: {order_id}")
        raise OrderNotFoundError(details={"id": order_id})

    fields = {key: value for key, value in updates.model_dump().items() if value}

    if not fields:
        logger.debug(f"No updates provided for order: {order_id}")
        return await get_order(db, order_id)

    async with storage_operation(ORDERS_COLLECTION, "find_one_and_update"):
        doc = await db[ORDERS_COLLECTION].find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )

    if doc is None:
        logger.warning(f"Order not found for update: {order_id}")
        raise OrderNotFoundError(details={"id": order_id})

    logger.info(
        f"Updated order: {order_id}",
        extra={"order_id": order_id, "updated_fields": sorted(fields)},
    )
    return order_from_document(doc)
