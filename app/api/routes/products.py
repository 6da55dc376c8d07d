"""
FastAPI routes for Product operations.

Products can be created, fetched by id and listed. Paths are singular for
the keyed lookup (/product/{id}) and plural for creation (/products).
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Path, status

from app.api.schemas.product import ProductCreate, ProductEnvelope, ProductListEnvelope
from app.core.dependencies import AppDatabase, require_path_param
from app.repos import product_repo

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Products"])


@router.post(
    "/products",
    response_model=ProductEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(product: ProductCreate, db: AppDatabase) -> ProductEnvelope:
    """Create a new product."""
    created = await product_repo.create_product(db, product)
    return ProductEnvelope(product=created)


@router.get(
    "/product/{product_id}",
    response_model=ProductEnvelope,
    summary="Get a product by id",
    description="""
    Retrieve a single product.

    **Errors:**
    - 400 Bad Request: If the id is blank
    - 404 Not Found: If no product has this id
    """,
)
async def get_product(
    product_id: Annotated[str, Path(description="Product identifier")],
    db: AppDatabase,
) -> ProductEnvelope:
    """Get a product by id."""
    require_path_param("id", product_id)
    product = await product_repo.get_product(db, product_id)
    return ProductEnvelope(product=product)


@router.post(
    "/getProducts",
    response_model=ProductListEnvelope,
    summary="List all products",
    description="""
    Return every stored product. No request body is required.

    The list is unfiltered, unpaginated and has no guaranteed order. An empty
    collection yields an empty list.
    """,
)
async def list_products(db: AppDatabase) -> ProductListEnvelope:
    """List all products."""
    products = await product_repo.list_products(db)
    return ProductListEnvelope(products=products)
