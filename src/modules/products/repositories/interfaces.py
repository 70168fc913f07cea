"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups needed by the
catalogue endpoints (SKU uniqueness, active listing) and the
row-locking primitives the order engine builds on.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list_active(self, search: str = "") -> "models.QuerySet[Product]":
        """Active products whose name or SKU contains ``search``."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU."""

    @abstractmethod
    def soft_delete(self, id: int) -> bool:
        """Mark a product inactive. ``False`` when the product does not exist."""

    @abstractmethod
    def lock_many(self, ids: Iterable[int]) -> Dict[int, Product]:
        """Lock the given product rows (SELECT FOR UPDATE) in id order.

        Must be called inside a transaction.  Returns the locked rows
        keyed by id; missing ids are simply absent.
        """

    @abstractmethod
    def decrement_stock(self, id: int, quantity: int) -> bool:
        """Subtract ``quantity`` from a product's stock.

        Guarded so stock never drops below zero.  Returns ``False`` when
        no row was updated.
        """
