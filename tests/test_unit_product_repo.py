"""Unit tests for the product repository."""

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect

from app.api.schemas.product import ProductCreate
from app.core.errors import ProductNotFoundError, StorageError
from app.repos import product_repo
from tests.conftest import seed_product


class TestGetProduct:
    @pytest.mark.anyio
    async def test_returns_product_by_id(self, fake_db):
        product_id = seed_product(fake_db, name="Widget", price=500)

        product = await product_repo.get_product(fake_db, product_id)

        assert product.id == product_id
        assert product.name == "Widget"
        assert product.price == 500

    @pytest.mark.anyio
    async def test_raises_not_found_for_unknown_id(self, fake_db):
        seed_product(fake_db)

        with pytest.raises(ProductNotFoundError):
            await product_repo.get_product(fake_db, str(ObjectId()))

    @pytest.mark.anyio
    async def test_malformed_id_is_not_found_without_query(self, fake_db):
        with pytest.raises(ProductNotFoundError) as exc_info:
            await product_repo.get_product(fake_db, "not-an-object-id")

        assert exc_info.value.message == "product not found"
        assert fake_db["products"].calls == []


class TestListProducts:
    @pytest.mark.anyio
    async def test_empty_collection_returns_empty_list(self, fake_db):
        products = await product_repo.list_products(fake_db)

        assert products == []

    @pytest.mark.anyio
    async def test_returns_every_product(self, fake_db):
        first = seed_product(fake_db, name="Widget", price=500)
        second = seed_product(fake_db, name="Gadget", price=750)

        products = await product_repo.list_products(fake_db)

        assert {p.id for p in products} == {first, second}
        assert {p.name for p in products} == {"Widget", "Gadget"}

    @pytest.mark.anyio
    async def test_missing_fields_read_back_as_empty(self, fake_db):
        seed_product(fake_db, name="Freebie", price=0)
        fake_db["products"].docs[0].pop("price")

        products = await product_repo.list_products(fake_db)

        assert products[0].price == 0


class TestCreateProduct:
    @pytest.mark.anyio
    async def test_created_product_is_readable(self, fake_db):
        created = await product_repo.create_product(
            fake_db, ProductCreate(name="Widget", price=500)
        )

        fetched = await product_repo.get_product(fake_db, created.id)

        assert fetched.name == "Widget"
        assert fetched.price == 500

    @pytest.mark.anyio
    async def test_list_failure_becomes_storage_error(self, fake_db):
        fake_db.fail_with(AutoReconnect("connection reset"))

        with pytest.raises(StorageError):
            await product_repo.list_products(fake_db)
