"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ViewSet.
Domain exceptions are caught and translated into appropriate
HTTP status codes; store failures surface as a generic 500.
"""

from __future__ import annotations

from typing import Optional

import structlog
from django.db import DatabaseError, IntegrityError
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.exceptions import error_response
from modules.core.pagination import InvalidPageRequest, PageRequest
from modules.products.dtos import ProductInputDTO
from modules.products.exceptions import ProductAlreadyExists, ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService

logger = structlog.get_logger(__name__)

PRODUCT_FIELDS = ("name", "sku", "price", "quantity")


def parse_id(pk: Optional[str]) -> Optional[int]:
    """Path ids are positive integers; anything else matches no row."""
    try:
        value = int(pk)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _build_input(data) -> ProductInputDTO:
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object.")
    missing = [field for field in PRODUCT_FIELDS if data.get(field) in (None, "")]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}.")
    return ProductInputDTO(**{field: data.get(field) for field in PRODUCT_FIELDS})


def _describe(exc: Exception) -> str:
    if isinstance(exc, PydanticValidationError):
        return "; ".join(
            f"{err['loc'][0]}: {err['msg']}" if err["loc"] else err["msg"]
            for err in exc.errors()
        )
    return str(exc)


class ProductViewSet(ViewSet):
    """ViewSet for Product CRUD operations.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /products?page=&limit=&search="""
        try:
            page = PageRequest.from_query(request.query_params)
        except InvalidPageRequest as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

        search = request.query_params.get("search", "")
        try:
            products = self._service.list_products(search, page)
        except DatabaseError as exc:
            logger.error("product.list_failed", error=str(exc))
            return error_response(
                "Failed to fetch products.", status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        return Response({"products": ProductSerializer(products, many=True).data})

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /products"""
        try:
            dto = _build_input(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return error_response(_describe(exc), status.HTTP_400_BAD_REQUEST)

        try:
            product = self._service.create_product(dto)
        except (ProductAlreadyExists, IntegrityError):
            return error_response(
                f"SKU '{dto.sku}' already registered.", status.HTTP_409_CONFLICT
            )
        except DatabaseError as exc:
            logger.error("product.create_failed", error=str(exc))
            return error_response(
                "Failed to create product.", status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(
            {"message": "Product created successfully.", "productId": product.id},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /products/{pk}"""
        try:
            dto = _build_input(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return error_response(_describe(exc), status.HTTP_400_BAD_REQUEST)

        product_id = parse_id(pk)
        if product_id is None:
            return error_response("Product not found.", status.HTTP_404_NOT_FOUND)
        try:
            self._service.update_product(product_id, dto)
        except ProductNotFound:
            return error_response("Product not found.", status.HTTP_404_NOT_FOUND)
        except (ProductAlreadyExists, IntegrityError):
            return error_response(
                f"SKU '{dto.sku}' already registered.", status.HTTP_409_CONFLICT
            )
        except DatabaseError as exc:
            logger.error("product.update_failed", product_id=product_id, error=str(exc))
            return error_response(
                "Failed to update product.", status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response({"message": "Product updated successfully."})

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /products/{pk} (soft delete)"""
        product_id = parse_id(pk)
        if product_id is None:
            return error_response("Product not found.", status.HTTP_404_NOT_FOUND)
        try:
            self._service.delete_product(product_id)
        except ProductNotFound:
            return error_response("Product not found.", status.HTTP_404_NOT_FOUND)
        except DatabaseError as exc:
            logger.error("product.delete_failed", product_id=product_id, error=str(exc))
            return error_response(
                "Failed to soft delete product.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"message": "Product soft deleted successfully."})
