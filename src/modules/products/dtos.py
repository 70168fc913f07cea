"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (views) and the
Service layer.  DTOs are immutable (``frozen=True``).

- ``ProductInputDTO``: full product payload for create and update
  (``PUT`` overwrites every field, so both share one shape).
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator


class ProductInputDTO(BaseModel):
    """Immutable DTO for product create/update requests.

    Validates:
    - ``name`` and ``sku`` are non-empty strings.
    - ``price`` is a non-negative Decimal.
    - ``quantity`` is a non-negative integer.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    sku: str
    price: Decimal
    quantity: int

    @field_validator("name", "sku")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Quantity cannot be negative.")
        return v
