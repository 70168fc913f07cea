"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- SKU must be unique.
- Price / quantity must be non-negative (validated by DTO).
- Updates overwrite every field (``PUT`` semantics).
- Listing shows active products only; deletion is a soft delete.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import structlog
from django.db import transaction

from modules.products.exceptions import ProductAlreadyExists, ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.core.pagination import PageRequest
    from modules.products.dtos import ProductInputDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: ProductInputDTO) -> Product:
        """Create a new product after enforcing SKU uniqueness.

        Raises:
            ProductAlreadyExists: if the SKU is already taken.
        """
        log = logger.bind(sku=dto.sku)

        if self._repo.get_by_sku(dto.sku):
            log.warning("product.duplicate_sku")
            raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.")

        product = Product(
            name=dto.name,
            sku=dto.sku,
            price=dto.price,
            quantity=dto.quantity,
        )
        product = self._repo.save(product)
        log.info("product.created", product_id=product.id)
        return product

    @transaction.atomic
    def update_product(self, id: int, dto: ProductInputDTO) -> Product:
        """Overwrite name, SKU, price and quantity of an existing product.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductAlreadyExists: if the new SKU belongs to another product.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        log = logger.bind(product_id=product.id)

        holder = self._repo.get_by_sku(dto.sku)
        if holder and holder.id != product.id:
            log.warning("product.duplicate_sku", sku=dto.sku)
            raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.")

        product.name = dto.name
        product.sku = dto.sku
        product.price = dto.price
        product.quantity = dto.quantity

        product = self._repo.save(product)
        log.info("product.updated")
        return product

    @transaction.atomic
    def delete_product(self, id: int) -> None:
        """Soft-delete a product.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        if not self._repo.soft_delete(id):
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.soft_deleted", product_id=id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, search: str, page: PageRequest) -> List[Product]:
        """Active products matching ``search`` on name or SKU, one page at a time."""
        return page.slice(self._repo.list_active(search))
