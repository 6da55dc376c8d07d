"""
Pydantic schemas for Order API operations.

These schemas define the request/response structure for the order endpoints.
"""

from pydantic import BaseModel, Field

from app.api.schemas.types import Int64

# ============================================================================
# Order Schemas
# ============================================================================


class OrderCreate(BaseModel):
    """
    Schema for creating a new Order.

    Any ``id`` in the request body is ignored; the identifier is assigned
    by storage.
    """

    order_number: str = Field(default="", examples=["O1"])
    price: Int64 = Field(default=0, description="Unit price", examples=[10])
    qty: Int64 = Field(default=0, description="Quantity", examples=[2])
    total: Int64 = Field(default=0, examples=[20])
    customer_id: str = Field(
        default="",
        description="Identifier of the ordering user (not checked for existence)",
        examples=["c1"],
    )
    status: str = Field(default="", description="Free-text order status", examples=["pending"])
    remark: str = Field(default="", examples=[""])


class OrderUpdate(BaseModel):
    """
    Schema for updating an existing Order.

    Only the status can change. An empty status leaves the stored value
    untouched; the order id always comes from the path.
    """

    status: str = Field(default="", description="New order status", examples=["shipped"])


class Order(OrderCreate):
    """Order as returned by the API."""

    id: str = Field(..., description="Storage-assigned identifier")


class OrderEnvelope(BaseModel):
    """Response body wrapping a single order."""

    order: Order
