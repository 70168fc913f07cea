"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
or ``False`` instead of raising HTTP-level exceptions, and store errors
(``DatabaseError``) propagate untouched to the Service Layer.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from django.db import transaction
from django.db.models import F, Q, QuerySet
from django.utils import timezone

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, TypeError):
            return None

    def list_active(self, search: str = "") -> QuerySet[Product]:
        queryset = Product.objects.active()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(sku__icontains=search)
            )
        return queryset.order_by("id")

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        return entity

    @transaction.atomic
    def soft_delete(self, id: int) -> bool:
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        return True

    def get_by_sku(self, sku: str) -> Optional[Product]:
        return Product.objects.filter(sku=sku.strip()).first()

    def lock_many(self, ids: Iterable[int]) -> Dict[int, Product]:
        """Single locking read over every id, ordered to avoid deadlocks.

        Two transactions locking overlapping product sets always acquire
        the shared rows in ascending id order, so neither can hold a row
        the other is already waiting on.
        """
        locked = (
            Product.objects.select_for_update()
            .filter(id__in=sorted(set(ids)))
            .order_by("id")
        )
        return {product.id: product for product in locked}

    def decrement_stock(self, id: int, quantity: int) -> bool:
        updated = Product.objects.filter(id=id, quantity__gte=quantity).update(
            quantity=F("quantity") - quantity, updated_at=timezone.now()
        )
        return updated == 1
