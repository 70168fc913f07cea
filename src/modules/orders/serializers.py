"""Order DRF serializers for API output.

Basket input is validated by ``CreateOrderDTO``; order detail rows are
rendered from ``OrderRowDTO``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order


class OrderListSerializer(serializers.ModelSerializer):
    """Order header as listed by ``GET /orders``."""

    class Meta:
        model = Order
        fields = [
            "id",
            "total_price",
            "order_date",
        ]
        read_only_fields = fields
