"""
Repository layer for Product data access.

Products support create, point lookup by id, and a full collection scan.
"""

import logging

from pymongo.asynchronous.database import AsyncDatabase

from app.api.schemas.product import Product, ProductCreate
from app.core.errors import ProductNotFoundError
from app.db.models import (
    PRODUCTS_COLLECTION,
    parse_object_id,
    product_from_document,
    product_to_document,
)
from app.repos.common import storage_operation

logger = logging.getLogger(__name__)


async def get_product(db: AsyncDatabase, product_id: str) -> Product:
    """
    Retrieve a single product by its identifier.

    A malformed identifier cannot match any document and is reported as
    not found without querying storage.

    Raises:
        ProductNotFoundError: If no product has this id
        StorageError: On driver failure
    """
    oid = parse_object_id(product_id)
    if oid is None:
        logger.warning(f"Malformed product id: {product_id}")
        raise ProductNotFoundError(details={"id": product_id})

    async with storage_operation(PRODUCTS_COLLECTION, "find_one"):
        doc = await db[PRODUCTS_COLLECTION].find_one({"_id": oid})

    if doc is None:
        logger.warning(f"Product not found: {product_id}")
        raise ProductNotFoundError(details={"id": product_id})

    return product_from_document(doc)


async def list_products(db: AsyncDatabase) -> list[Product]:
    """
    Retrieve all products.

    No filter, no sort order and no pagination; the cursor is consumed to
    exhaustion.

    Returns:
        List of Product, empty when the collection is empty
    """
    products: list[Product] = []

    async with storage_operation(PRODUCTS_COLLECTION, "find"):
        async for doc in db[PRODUCTS_COLLECTION].find({}):
            products.append(product_from_document(doc))

    logger.info(f"Retrieved {len(products)} products")
    return products


async def create_product(db: AsyncDatabase, product: ProductCreate) -> Product:
    """
    Insert a new product document.

    Returns:
        The created Product carrying its storage-assigned id

    Raises:
        StorageError: On driver failure
    """
    doc = product_to_document(product)

    async with storage_operation(PRODUCTS_COLLECTION, "insert_one"):
        result = await db[PRODUCTS_COLLECTION].insert_one(doc)

    created = product_from_document({**doc, "_id": result.inserted_id})
    logger.info(f"Created product: {created.id}", extra={"product_id": created.id})
    return created
