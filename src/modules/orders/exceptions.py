"""Order domain exceptions.

Raised by the Service Layer when an order cannot be placed.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.  Every one of them is raised either
before the transaction opens or after it has been rolled back.
"""

from __future__ import annotations

from typing import Optional


class OrderError(Exception):
    """Base class for order-creation failures."""


class InvalidRequest(OrderError):
    """The basket is missing, empty or malformed.

    Raised before any transaction is opened.
    """


class ProductNotFound(OrderError):
    """A basket entry names a product that does not exist or is inactive."""

    def __init__(self, product_id: int, message: Optional[str] = None) -> None:
        self.product_id = product_id
        super().__init__(message or f"Product ID {product_id} not found.")


class InsufficientStock(OrderError):
    """A basket entry asks for more than the locked available quantity."""

    def __init__(self, product_id: int, message: Optional[str] = None) -> None:
        self.product_id = product_id
        super().__init__(message or f"Insufficient stock for product ID {product_id}")


class TransactionFailure(OrderError):
    """Lock acquisition, a write or the commit failed at the store level."""


class InvalidTransition(Exception):
    """The order transaction tried to move to a state it cannot reach."""
