"""Unit tests for OrderDjangoRepository.

Covers:
- Step writes used by the order engine (header, items, total).
- Read with select_related (header joined with items, no N+1).
- Edge cases (non-existent orders).
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.orders.models import OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.repositories.interfaces import IOrderRepository

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def product_a(make_product):
    return make_product(sku="PROD-A", price=Decimal("10.00"), quantity=100)


@pytest.fixture()
def product_b(make_product):
    return make_product(sku="PROD-B", price=Decimal("25.50"), quantity=50)


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


@pytest.fixture()
def lines(product_a, product_b):
    return [
        {"product_id": product_a.id, "quantity": 2, "price": product_a.price},
        {"product_id": product_b.id, "quantity": 1, "price": product_b.price},
    ]


@pytest.fixture()
def placed_order(repo, lines):
    order = repo.create_header()
    repo.add_items(order, lines)
    return repo.finalize_total(order, Decimal("45.50"))


# ===========================================================================
# Instantiation
# ===========================================================================


class TestRepositoryInstantiation:
    def test_can_instantiate(self):
        repo = OrderDjangoRepository()
        assert repo is not None

    def test_is_instance_of_interface(self):
        repo = OrderDjangoRepository()
        assert isinstance(repo, IOrderRepository)


# ===========================================================================
# Writes
# ===========================================================================


class TestCreateHeader:
    def test_inserts_with_provisional_zero_total(self, repo):
        order = repo.create_header()

        assert order.id is not None
        assert order.total_price == Decimal("0.00")
        assert order.order_date is not None


class TestAddItems:
    def test_inserts_every_line(self, repo, lines):
        order = repo.create_header()

        items = repo.add_items(order, lines)

        assert len(items) == 2
        assert OrderItem.objects.filter(order=order).count() == 2

    def test_keeps_snapshot_price(self, repo, lines, product_a):
        order = repo.create_header()
        repo.add_items(order, lines)

        product_a.price = Decimal("99.99")
        product_a.save()

        item = OrderItem.objects.get(order=order, product=product_a)
        assert item.price == Decimal("10.00")


class TestFinalizeTotal:
    def test_persists_total(self, repo):
        order = repo.create_header()

        repo.finalize_total(order, Decimal("12.34"))

        order.refresh_from_db()
        assert order.total_price == Decimal("12.34")


# ===========================================================================
# Reads
# ===========================================================================


class TestListItemsWithOrder:
    def test_rows_carry_their_header(
        self, repo, placed_order, django_assert_num_queries
    ):
        with django_assert_num_queries(1):
            rows = list(repo.list_items_with_order(placed_order.id))
            totals = {row.order.total_price for row in rows}

        assert len(rows) == 2
        assert totals == {Decimal("45.50")}

    def test_unknown_order_is_empty(self, repo):
        assert list(repo.list_items_with_order(999999)) == []


class TestList:
    def test_lists_in_id_order(self, repo):
        first = repo.create_header()
        second = repo.create_header()

        assert [o.id for o in repo.list()] == [first.id, second.id]

