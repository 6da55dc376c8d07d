"""
MongoDB storage records for the commerce API.

Each entity lives in its own collection. Documents carry a storage-assigned
``_id`` (ObjectId) plus the entity's fields under their snake_case names.
Empty values are left out of inserted documents and read back as empty.

The mappers here are the only place an ObjectId is turned into the opaque
string identifier seen at the API boundary.
"""

from typing import Any

from bson import ObjectId

from app.api.schemas.order import Order, OrderCreate
from app.api.schemas.product import Product, ProductCreate
from app.api.schemas.user import User, UserCreate

USERS_COLLECTION = "users"
PRODUCTS_COLLECTION = "products"
ORDERS_COLLECTION = "orders"


def _omit_empty(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop empty strings and zero numbers, mirroring sparse documents."""
    return {key: value for key, value in fields.items() if value not in ("", 0, None)}


def document_id_to_str(value: Any) -> str:
    """Convert a stored ``_id`` to the external identifier."""
    if isinstance(value, ObjectId):
        return str(value)
    return "" if value is None else str(value)


def parse_object_id(value: str) -> ObjectId | None:
    """Parse an external identifier, returning None when it is malformed."""
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


# ============================================================================
# Users
# ============================================================================


def user_to_document(user: UserCreate) -> dict[str, Any]:
    return _omit_empty(
        {
            "name": user.name,
            "email": user.email,
            "password": user.password,
        }
    )


def user_from_document(doc: dict[str, Any]) -> User:
    return User(
        id=document_id_to_str(doc.get("_id")),
        name=doc.get("name", ""),
        email=doc.get("email", ""),
    )


# ============================================================================
# Products
# ============================================================================


def product_to_document(product: ProductCreate) -> dict[str, Any]:
    return _omit_empty({"name": product.name, "price": product.price})


def product_from_document(doc: dict[str, Any]) -> Product:
    return Product(
        id=document_id_to_str(doc.get("_id")),
        name=doc.get("name", ""),
        price=doc.get("price", 0),
    )


# ============================================================================
# Orders
# ============================================================================


def order_to_document(order: OrderCreate) -> dict[str, Any]:
    return _omit_empty(
        {
            "order_number": order.order_number,
            "price": order.price,
            "qty": order.qty,
            "total": order.total,
            "customer_id": order.customer_id,
            "status": order.status,
            "remark": order.remark,
        }
    )


def order_from_document(doc: dict[str, Any]) -> Order:
    return Order(
        id=document_id_to_str(doc.get("_id")),
        order_number=doc.get("order_number", ""),
        price=doc.get("price", 0),
        qty=doc.get("qty", 0),
        total=doc.get("total", 0),
        customer_id=doc.get("customer_id", ""),
        status=doc.get("status", ""),
        remark=doc.get("remark", ""),
    )
