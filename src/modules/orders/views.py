"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.
"""

from __future__ import annotations

import structlog
from django.db import DatabaseError
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.exceptions import error_response
from modules.core.pagination import InvalidPageRequest, PageRequest
from modules.orders.dtos import CreateOrderDTO
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidRequest,
    ProductNotFound,
    TransactionFailure,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.views import parse_id

logger = structlog.get_logger(__name__)


class OrderViewSet(ViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /orders

        Body: ``{"products": [{"productId": 1, "quantity": 2}, ...]}``.
        """
        data = request.data if isinstance(request.data, dict) else {}
        basket = data.get("products")
        if not basket:
            return error_response(
                "Products are required to create an order.",
                status.HTTP_400_BAD_REQUEST,
            )

        try:
            dto = CreateOrderDTO(items=basket)
        except PydanticValidationError as exc:
            return error_response(
                f"Invalid order request: {exc.error_count()} invalid field(s).",
                status.HTTP_400_BAD_REQUEST,
            )

        try:
            receipt = self._service.create_order(dto)
        except InvalidRequest as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)
        except InsufficientStock as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)
        except ProductNotFound as exc:
            return error_response(str(exc), status.HTTP_404_NOT_FOUND)
        except TransactionFailure as exc:
            return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(
            {
                "message": "Order created successfully.",
                "orderId": receipt.order_id,
                "totalPrice": str(receipt.total_price),
            },
            status=status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /orders?page=&limit="""
        try:
            page = PageRequest.from_query(request.query_params)
        except InvalidPageRequest as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

        try:
            orders = self._service.list_orders(page)
        except DatabaseError as exc:
            logger.error("order.list_failed", error=str(exc))
            return error_response(
                "Failed to fetch orders.", status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        return Response({"orders": OrderListSerializer(orders, many=True).data})

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /orders/{pk}

        Unknown ids yield ``{"order": []}``.
        """
        order_id = parse_id(pk)
        if order_id is None:
            return Response({"order": []})
        try:
            rows = self._service.get_order(order_id)
        except DatabaseError as exc:
            logger.error("order.fetch_failed", order_id=order_id, error=str(exc))
            return error_response(
                "Failed to fetch order details.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(
            {"order": [row.model_dump(mode="json", by_alias=True) for row in rows]}
        )
