"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (views) and the
Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: one basket entry (product id + quantity).
- ``CreateOrderDTO``: the basket.  Emptiness is *not* rejected here;
  the order engine owns that check so it can refuse before opening a
  transaction.
- ``OrderReceipt``: result of a committed order.
- ``OrderRowDTO``: one row of an order joined with one of its items.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from modules.orders.models import OrderItem


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single basket entry.

    The client sends ``productId`` and ``quantity``; the price is taken
    from the locked product row by the order engine.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    product_id: int = Field(alias="productId")
    quantity: int

    @field_validator("product_id")
    @classmethod
    def product_id_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Product ID must be a positive integer.")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests."""

    model_config = ConfigDict(frozen=True)

    items: List[CreateOrderItemDTO] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderReceipt(BaseModel):
    """Immutable result of a committed order."""

    model_config = ConfigDict(frozen=True)

    order_id: int
    total_price: Decimal


class OrderRowDTO(BaseModel):
    """Order header joined with one of its items.

    Serialised with the camelCase keys the API exposes.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    order_id: int = Field(serialization_alias="orderId")
    total_price: Decimal = Field(serialization_alias="totalPrice")
    order_date: datetime = Field(serialization_alias="orderDate")
    product_id: int = Field(serialization_alias="productId")
    quantity: int
    price: Decimal

    @classmethod
    def from_entity(cls, item: OrderItem) -> OrderRowDTO:
        """Build a row from an item whose ``order`` is already loaded."""
        order = item.order
        return cls(
            order_id=order.id,
            total_price=order.total_price,
            order_date=order.order_date,
            product_id=item.product_id,
            quantity=item.quantity,
            price=item.price,
        )
