"""Unit tests for ProductDjangoRepository.

Covers:
- CRUD operations (get_by_id, list_active, save, soft_delete).
- Product-specific queries (get_by_sku, search on name/SKU).
- Order-engine primitives (lock_many, guarded decrement_stock).
- Edge cases (malformed ids, soft-deleted records).
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.repositories.interfaces import IProductRepository

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_product(**overrides) -> Product:
    defaults = {
        "sku": "SKU-001",
        "name": "Widget",
        "price": Decimal("19.99"),
        "quantity": 10,
    }
    defaults.update(overrides)
    product = Product(**defaults)
    product.save()
    return product


# ===========================================================================
# Instantiation
# ===========================================================================


class TestRepositoryInstantiation:
    def test_can_instantiate(self):
        repo = ProductDjangoRepository()
        assert repo is not None

    def test_is_instance_of_interface(self):
        repo = ProductDjangoRepository()
        assert isinstance(repo, IProductRepository)


# ===========================================================================
# get_by_id
# ===========================================================================


class TestGetById:
    def test_returns_product_when_found(self):
        product = _make_product()
        repo = ProductDjangoRepository()

        found = repo.get_by_id(product.id)
        assert found is not None
        assert found.id == product.id

    def test_returns_none_when_not_found(self):
        assert ProductDjangoRepository().get_by_id(999999) is None

    def test_returns_none_for_malformed_id(self):
        assert ProductDjangoRepository().get_by_id("abc") is None

    def test_returns_soft_deleted_product(self):
        product = _make_product()
        product.delete()

        found = ProductDjangoRepository().get_by_id(product.id)
        assert found is not None
        assert found.is_active is False


# ===========================================================================
# list_active
# ===========================================================================


class TestListActive:
    def test_returns_active_products_in_id_order(self):
        first = _make_product(sku="A")
        second = _make_product(sku="B")

        result = list(ProductDjangoRepository().list_active())
        assert [p.id for p in result] == [first.id, second.id]

    def test_returns_empty_when_no_products(self):
        assert list(ProductDjangoRepository().list_active()) == []

    def test_excludes_soft_deleted(self):
        _make_product(sku="KEEP")
        gone = _make_product(sku="GONE")
        gone.delete()

        result = list(ProductDjangoRepository().list_active())
        assert [p.sku for p in result] == ["KEEP"]

    def test_searches_name_case_insensitively(self):
        _make_product(sku="A", name="Blue Widget")
        _make_product(sku="B", name="Red Gadget")

        result = list(ProductDjangoRepository().list_active("widget"))
        assert [p.name for p in result] == ["Blue Widget"]

    def test_searches_sku(self):
        _make_product(sku="KB-100", name="Keyboard")
        _make_product(sku="MS-200", name="Mouse")

        result = list(ProductDjangoRepository().list_active("ms-"))
        assert [p.sku for p in result] == ["MS-200"]


# ===========================================================================
# save
# ===========================================================================


class TestSave:
    def test_creates_new_product(self):
        product = Product(sku="NEW-001", name="New", price=Decimal("5.00"), quantity=1)

        saved = ProductDjangoRepository().save(product)

        assert saved.id is not None
        assert Product.objects.filter(sku="NEW-001").exists()

    def test_updates_existing_product(self):
        product = _make_product()
        product.name = "Renamed"

        ProductDjangoRepository().save(product)

        product.refresh_from_db()
        assert product.name == "Renamed"

    def test_returns_same_entity(self):
        product = _make_product()
        assert ProductDjangoRepository().save(product) is product


# ===========================================================================
# soft_delete
# ===========================================================================


class TestSoftDelete:
    def test_soft_deletes_existing_product(self):
        product = _make_product()

        assert ProductDjangoRepository().soft_delete(product.id) is True

        product.refresh_from_db()
        assert product.is_active is False

    def test_returns_false_for_nonexistent(self):
        assert ProductDjangoRepository().soft_delete(999999) is False


# ===========================================================================
# get_by_sku
# ===========================================================================


class TestGetBySku:
    def test_returns_product_when_found(self):
        product = _make_product(sku="FIND-ME")
        assert ProductDjangoRepository().get_by_sku("FIND-ME").id == product.id

    def test_returns_none_when_not_found(self):
        assert ProductDjangoRepository().get_by_sku("NOPE") is None

    def test_strips_sku_on_lookup(self):
        product = _make_product(sku="TRIM-ME")
        assert ProductDjangoRepository().get_by_sku("  TRIM-ME ").id == product.id


# ===========================================================================
# lock_many / decrement_stock
# ===========================================================================


class TestLockMany:
    def test_returns_rows_keyed_by_id(self):
        a = _make_product(sku="A")
        b = _make_product(sku="B")

        locked = ProductDjangoRepository().lock_many([b.id, a.id, b.id])

        assert list(locked) == [a.id, b.id]
        assert locked[a.id].price == Decimal("19.99")

    def test_unknown_ids_are_absent(self):
        a = _make_product()

        locked = ProductDjangoRepository().lock_many([a.id, 999999])

        assert set(locked) == {a.id}

    def test_includes_inactive_rows(self):
        a = _make_product()
        a.delete()

        locked = ProductDjangoRepository().lock_many([a.id])

        assert locked[a.id].is_active is False


class TestDecrementStock:
    def test_sufficient_stock_decrements(self):
        product = _make_product(quantity=10)

        assert ProductDjangoRepository().decrement_stock(product.id, 4) is True

        product.refresh_from_db()
        assert product.quantity == 6

    def test_exact_stock_reaches_zero(self):
        product = _make_product(quantity=3)

        assert ProductDjangoRepository().decrement_stock(product.id, 3) is True

        product.refresh_from_db()
        assert product.quantity == 0

    def test_insufficient_stock_leaves_row_untouched(self):
        product = _make_product(quantity=2)

        assert ProductDjangoRepository().decrement_stock(product.id, 3) is False

        product.refresh_from_db()
        assert product.quantity == 2

    def test_nonexistent_product_returns_false(self):
        assert ProductDjangoRepository().decrement_stock(999999, 1) is False
