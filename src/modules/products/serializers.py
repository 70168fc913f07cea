"""Product DRF serializers for API output.

Input is validated by ``ProductInputDTO``; these serializers only
render model instances.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "sku",
            "price",
            "quantity",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
