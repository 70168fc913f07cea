from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import OrderError
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

SEED_PRODUCTS = [
    ("Mechanical Keyboard", "KB-001", "89.90", 40),
    ("Wireless Mouse", "MS-002", "24.50", 120),
    ("27in Monitor", "MN-003", "329.00", 15),
    ("USB-C Dock", "DK-004", "149.99", 25),
    ("Laptop Stand", "ST-005", "39.00", 60),
    ("Webcam 1080p", "WC-006", "59.90", 30),
    ("Noise-cancelling Headset", "HS-007", "199.00", 10),
    ("HDMI Cable 2m", "CB-008", "9.99", 300),
]


class Command(BaseCommand):
    help = "Seed database with demo products and orders."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders",
            type=int,
            default=10,
            help="Number of random orders to place through the order engine.",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        products = self._seed_products()
        placed, rejected = self._seed_orders(products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"products={len(products)}, "
                f"orders={placed}, "
                f"rejected={rejected}"
            )
        )

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        for name, sku, price, quantity in SEED_PRODUCTS:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "price": Decimal(price),
                    "quantity": quantity,
                },
            )
            products.append(product)
        return products

    def _seed_orders(self, products: list[Product], count: int) -> tuple[int, int]:
        self.stdout.write("Placing orders...")
        service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        placed = rejected = 0
        for _ in range(count):
            picks = random.sample(products, k=random.randint(1, 3))
            dto = CreateOrderDTO(
                items=[
                    CreateOrderItemDTO(product_id=p.id, quantity=random.randint(1, 4))
                    for p in picks
                ]
            )
            try:
                service.create_order(dto)
                placed += 1
            except OrderError as exc:
                rejected += 1
                self.stdout.write(self.style.WARNING(f"Order rejected: {exc}"))
        return placed, rejected
