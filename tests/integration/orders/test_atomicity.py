"""Integration tests for order atomicity.

Whatever step of the order transaction fails, no order, no item and
no stock decrement from that attempt may remain visible.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

import pytest

from django.db import OperationalError, connections

from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import InsufficientStock, TransactionFailure
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.integration


@pytest.fixture()
def products(make_product):
    return [
        make_product(sku="ATOMIC-A", price=Decimal("10.00"), quantity=10),
        make_product(sku="ATOMIC-B", price=Decimal("20.00"), quantity=10),
        make_product(sku="ATOMIC-C", price=Decimal("5.00"), quantity=0),
    ]


@pytest.fixture()
def service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


def _basket(products, quantity=1):
    return CreateOrderDTO(
        items=[CreateOrderItemDTO(product_id=p.id, quantity=quantity) for p in products]
    )


def _assert_untouched(products):
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    for product in products:
        before = product.quantity
        product.refresh_from_db()
        assert product.quantity == before


class TestOrderAtomicity:
    def test_partial_stock_failure_rolls_back(self, api_client, products):
        payload = {
            "products": [{"productId": p.id, "quantity": 1} for p in products]
        }
        response = api_client.post("/orders", payload, format="json")

        assert response.status_code == 400
        _assert_untouched(products)

    def test_first_failing_entry_is_reported(self, service, products, make_product):
        short = make_product(sku="ATOMIC-D", quantity=0)
        with pytest.raises(InsufficientStock) as excinfo:
            service.create_order(_basket([products[0], products[2], short]))
        assert excinfo.value.product_id == products[2].id

    @pytest.mark.parametrize(
        "target, message",
        [
            ("create_header", "Failed to create order."),
            ("add_items", "Failed to add order items."),
            ("finalize_total", "Failed to update order total."),
        ],
    )
    def test_order_write_failure_rolls_back(self, service, products, target, message):
        with patch.object(
            OrderDjangoRepository, target, side_effect=OperationalError("lost")
        ):
            with pytest.raises(TransactionFailure, match=message):
                service.create_order(_basket(products[:2]))
        _assert_untouched(products)

    def test_stock_write_failure_rolls_back(self, service, products):
        with patch.object(
            ProductDjangoRepository,
            "decrement_stock",
            side_effect=OperationalError("lock wait timeout"),
        ):
            with pytest.raises(TransactionFailure, match="Failed to update stock."):
                service.create_order(_basket(products[:2]))
        _assert_untouched(products)

    def test_missed_decrement_rolls_back_earlier_decrements(self, service, products):
        real = ProductDjangoRepository.decrement_stock

        def flaky(repo, product_id, quantity):
            if product_id == products[1].id:
                return False
            return real(repo, product_id, quantity)

        with patch.object(ProductDjangoRepository, "decrement_stock", flaky):
            with pytest.raises(TransactionFailure, match="Failed to update stock."):
                service.create_order(_basket(products[:2]))
        _assert_untouched(products)

    def test_lock_failure_rolls_back(self, service, products):
        with patch.object(
            ProductDjangoRepository,
            "lock_many",
            side_effect=OperationalError("lock wait timeout"),
        ):
            with pytest.raises(
                TransactionFailure, match="Failed to lock product rows."
            ):
                service.create_order(_basket(products[:2]))
        _assert_untouched(products)


class TestOpenAndCommitFailures:
    def test_failure_opening_transaction_reports_transaction_error(
        self, service, products
    ):
        with patch(
            "modules.orders.services.bounded_transaction",
            side_effect=OperationalError("could not connect"),
        ):
            with pytest.raises(TransactionFailure, match="Transaction error."):
                service.create_order(_basket(products[:2]))
        _assert_untouched(products)

    @pytest.mark.django_db(transaction=True)
    def test_commit_failure_reports_commit_failed(self, service, products):
        wrapper = type(connections["default"])
        with patch.object(
            wrapper, "_commit", side_effect=OperationalError("disk I/O error")
        ):
            with pytest.raises(TransactionFailure, match="Commit failed."):
                service.create_order(_basket(products[:2]))
        _assert_untouched(products)
