"""
Pydantic schemas for Product API operations.

Products are create-and-read only: there is no update or delete schema.
"""

from pydantic import BaseModel, Field

from app.api.schemas.types import Int64


class ProductCreate(BaseModel):
    """Schema for creating a new Product."""

    name: str = Field(
        default="",
        description="Product name",
        examples=["Widget"],
    )
    price: Int64 = Field(
        default=0,
        description="Price in the smallest currency unit",
        examples=[500],
    )


class Product(ProductCreate):
    """Product as returned by the API."""

    id: str = Field(..., description="Storage-assigned identifier")


class ProductEnvelope(BaseModel):
    """Response body wrapping a single product."""

    product: Product


class ProductListEnvelope(BaseModel):
    """Response body wrapping every stored product."""

    products: list[Product]
