"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  The
write methods deliberately open no transaction of their own: the
order engine calls them between its row locks and its commit, and
relies on a store error propagating out of the shared atomic block.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Sequence

import structlog
from django.db.models import QuerySet

from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Writes (called inside the order transaction)
    # ------------------------------------------------------------------

    def create_header(self) -> Order:
        order = Order.objects.create(total_price=Decimal("0.00"))
        logger.info("order.header_inserted", order_id=order.id)
        return order

    def add_items(self, order: Order, lines: Sequence[dict]) -> List[OrderItem]:
        """Insert every line in a single multi-row INSERT."""
        items = OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=line["product_id"],
                    quantity=line["quantity"],
                    price=line["price"],
                )
                for line in lines
            ]
        )
        logger.info("order.items_inserted", order_id=order.id, item_count=len(items))
        return items

    def finalize_total(self, order: Order, total: Decimal) -> Order:
        order.total_price = total
        order.save(update_fields=["total_price"])
        logger.info("order.total_finalized", order_id=order.id, total=str(total))
        return order

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_items_with_order(self, id: int) -> QuerySet[OrderItem]:
        """Order header joined with its items (single JOIN, no N+1)."""
        return (
            OrderItem.objects.select_related("order")
            .filter(order_id=id)
            .order_by("id")
        )

    def list(self) -> QuerySet[Order]:
        return Order.objects.order_by("id")
