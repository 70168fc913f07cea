"""Integration tests for page/limit pagination."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.test import override_settings

from modules.products.models import Product

pytestmark = pytest.mark.integration


@pytest.fixture()
def product_batch():
    """Create a batch of products for pagination tests."""
    products = [
        Product(
            sku=f"SKU-{idx:03d}",
            name=f"Product {idx:03d}",
            price=Decimal("9.99"),
            quantity=10,
        )
        for idx in range(1, 26)
    ]
    Product.objects.bulk_create(products)
    return products


class TestPagination:
    def test_default_limit(self, api_client, product_batch):
        response = api_client.get("/products")
        assert response.status_code == 200
        names = [p["name"] for p in response.data["products"]]
        assert names == [f"Product {idx:03d}" for idx in range(1, 11)]

    def test_offset_is_page_minus_one_times_limit(self, api_client, product_batch):
        response = api_client.get("/products?page=3&limit=4")
        assert response.status_code == 200
        names = [p["name"] for p in response.data["products"]]
        assert names == [f"Product {idx:03d}" for idx in range(9, 13)]

    def test_page_past_the_end_is_empty(self, api_client, product_batch):
        response = api_client.get("/products?page=99&limit=10")
        assert response.status_code == 200
        assert response.data["products"] == []

    @override_settings(MAX_PAGE_LIMIT=20)
    def test_limit_is_capped(self, api_client, product_batch):
        response = api_client.get("/products?limit=1000")
        assert response.status_code == 200
        assert len(response.data["products"]) == 20

    @pytest.mark.parametrize("query", ["page=0", "limit=-5", "page=abc"])
    def test_invalid_values_rejected(self, api_client, query):
        response = api_client.get(f"/products?{query}")
        assert response.status_code == 400
        assert "error" in response.json()

    def test_orders_are_paginated(self, api_client):
        response = api_client.get("/orders?page=1&limit=5")
        assert response.status_code == 200
        assert response.data["orders"] == []
