"""
FastAPI routes for Order operations.

Orders are created, fetched by id, and have their status updated.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Path, status

from app.api.schemas.order import OrderCreate, OrderEnvelope, OrderUpdate
from app.core.dependencies import AppDatabase, require_path_param
from app.repos import order_repo

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Orders"])

OrderIdParam = Annotated[str, Path(description="Order identifier")]


@router.post(
    "/createOrder",
    response_model=OrderEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create an order",
    description="""
    Create a new order. `customer_id` is stored as given and is not checked
    against existing users.
    """,
)
async def create_order(order: OrderCreate, db: AppDatabase) -> OrderEnvelope:
    """Create a new order."""
    created = await order_repo.create_order(db, order)
    return OrderEnvelope(order=created)


@router.get(
    "/order/{order_id}",
    response_model=OrderEnvelope,
    summary="Get an order by id",
)
async def get_order(order_id: OrderIdParam, db: AppDatabase) -> OrderEnvelope:
    """Get an order by id."""
    require_path_param("id", order_id)
    order = await order_repo.get_order(db, order_id)
    return OrderEnvelope(order=order)


@router.put(
    "/order/{order_id}",
    response_model=OrderEnvelope,
    summary="Update an order's status",
    description="""
    Update the status of an order. Any `id` in the body is ignored; the id
    in the path selects the order. The response reflects the stored order
    after the update.

    **Errors:**
    - 400 Bad Request: If the id is blank or the body is invalid
    - 404 Not Found: If no order has this id
    """,
)
async def update_order(
    order_id: OrderIdParam, updates: OrderUpdate, db: AppDatabase
) -> OrderEnvelope:
    """Update an order's status."""
    require_path_param("id", order_id)
    order = await order_repo.update_order(db, order_id, updates)
    return OrderEnvelope(order=order)
