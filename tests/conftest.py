"""
Pytest configuration and shared fixtures.

Provides:
- Environment defaults applied before the app is imported
- An in-memory database (tests.fakes.FakeDatabase) per test
- A FastAPI TestClient wired to that database
- Helpers to seed documents directly into storage
"""

from __future__ import annotations

import os
from collections.abc import Generator
from typing import Any

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("OBSERVABILITY_STRUCTURED_LOGS", "false")
os.environ.setdefault("MONGODB_URL", "mongodb://127.0.0.1:27017")
os.environ.setdefault("MONGODB_DATABASE", "commerce_test")

import pytest  # noqa: E402 (import after env setup)
from bson import ObjectId  # noqa: E402 (import after env setup)
from fastapi.testclient import TestClient  # noqa: E402 (import after env setup)

from app.main import create_app  # noqa: E402 (import after env setup)
from tests.fakes import FakeDatabase  # noqa: E402 (import after env setup)


# Per AnyIO testing docs: https://anyio.readthedocs.io/en/stable/testing.html
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_db() -> FakeDatabase:
    """Fresh in-memory database for each test."""
    return FakeDatabase()


@pytest.fixture
def client(fake_db: FakeDatabase) -> Generator[TestClient]:
    """TestClient running the full app (lifespan included) against fake_db."""
    app = create_app(database=fake_db)
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Seeding Helpers
# =============================================================================


def seed_document(db: FakeDatabase, collection: str, **fields: Any) -> str:
    """Insert a raw document straight into storage and return its id as a string."""
    doc = {"_id": ObjectId(), **fields}
    db[collection].docs.append(doc)
    return str(doc["_id"])


def seed_user(db: FakeDatabase, **fields: Any) -> str:
    defaults = {"name": "Ann", "email": "ann@x.com", "password": "p1"}
    return seed_document(db, "users", **{**defaults, **fields})


def seed_product(db: FakeDatabase, **fields: Any) -> str:
    defaults = {"name": "Widget", "price": 500}
    return seed_document(db, "products", **{**defaults, **fields})


def seed_order(db: FakeDatabase, **fields: Any) -> str:
    defaults = {
        "order_number": "O1",
        "price": 10,
        "qty": 2,
        "total": 20,
        "customer_id": "c1",
        "status": "pending",
    }
    return seed_document(db, "orders", **{**defaults, **fields})
