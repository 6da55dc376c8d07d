"""
Pydantic schemas for API request/response validation.

This package contains schema definitions for different domain entities
used in API endpoints.
"""

# Re-export schemas for convenient imports.
from .order import Order as Order
from .order import OrderCreate as OrderCreate
from .order import OrderUpdate as OrderUpdate
from .product import Product as Product
from .product import ProductCreate as ProductCreate
from .user import User as User
from .user import UserCreate as UserCreate
from .user import UserUpdate as UserUpdate
