"""Order and OrderItem models.

Business rules implemented:
- Order and its items are created together, atomically, and are never
  updated after commit.
- ``total_price`` equals the sum of ``quantity * price`` over the items,
  fixed at commit time and never recomputed.
- OrderItem snapshots the product price at lock time (``price``), so
  later price changes never alter historical orders.
- Items are owned by the order (CASCADE); the product link is a weak
  historical reference (PROTECT, and products are only soft-deleted).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Order(models.Model):
    """Order aggregate root.

    Inserted with a provisional ``total_price`` of zero which is only
    visible inside the creating transaction; the final total is written
    before commit.
    """

    total_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    order_date: models.DateTimeField = models.DateTimeField(
        auto_now_add=True, editable=False
    )

    class Meta:
        db_table = "orders"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["-order_date"], name="orders_date_idx"),
        ]

    def __str__(self) -> str:
        return f"Order #{self.id} ({self.total_price})"


class OrderItem(models.Model):
    """Line item linking an Order to a Product.

    ``price`` is a **snapshot** of the product price read under the row
    lock; it never changes even if the product price is updated later.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.price

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} @ {self.price}"
