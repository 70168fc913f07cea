"""Order repository interface.

Declares the writes the order engine performs step by step (header,
items, final total) and the read-side queries behind ``GET /orders``.
The engine never loads or saves a whole order, so this contract does
not extend ``IRepository``.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, List, Sequence

from django.db import models

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem


class IOrderRepository(ABC):
    """Repository contract for the Order aggregate root.

    The aggregate includes its OrderItem children.  Writes are expected
    to run inside the caller's transaction.
    """

    @abstractmethod
    def create_header(self) -> Order:
        """Insert an order with a provisional zero total."""

    @abstractmethod
    def add_items(self, order: Order, lines: Sequence[dict]) -> List[OrderItem]:
        """Insert the order's items.

        Each line is a dict with ``product_id``, ``quantity`` and the
        snapshot ``price``.
        """

    @abstractmethod
    def finalize_total(self, order: Order, total: Decimal) -> Order:
        """Write the computed total onto the order header."""

    @abstractmethod
    def list_items_with_order(self, id: int) -> "models.QuerySet[OrderItem]":
        """Items of one order with their header eagerly loaded."""

    @abstractmethod
    def list(self) -> "models.QuerySet[Order]":
        """All orders in id order."""
