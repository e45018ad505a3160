from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.orders.exceptions import InsufficientStock
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

SEED_PRODUCTS = [
    ("Smart TV 50in", Decimal("2499.90"), 8),
    ("Mechanical Keyboard", Decimal("389.00"), 25),
    ("Wireless Mouse", Decimal("129.90"), 40),
    ("USB-C Hub", Decimal("199.00"), 15),
    ("Noise Cancelling Headphones", Decimal("1299.00"), 6),
    ("4K Monitor 27in", Decimal("1899.00"), 10),
    ("Laptop Stand", Decimal("149.90"), 30),
    ("External SSD 1TB", Decimal("599.00"), 12),
]


class Command(BaseCommand):
    help = "Seed the database with sellers, buyers, products and a few orders."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=5)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        seller, buyers = self._seed_users()
        products = self._seed_products(seller)
        orders_created = self._seed_orders(buyers, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"buyers={len(buyers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self):
        User = get_user_model()
        seller, created = User.objects.get_or_create(
            username="seller", defaults={"email": "seller@example.com"}
        )
        if created:
            seller.set_password("seller123")
            seller.save(update_fields=["password"])

        buyers = []
        for name in ("alice", "bob", "carol"):
            buyer, created = User.objects.get_or_create(
                username=name, defaults={"email": f"{name}@example.com"}
            )
            if created:
                buyer.set_password(f"{name}123")
                buyer.save(update_fields=["password"])
            buyers.append(buyer)
        return seller, buyers

    def _seed_products(self, seller) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        for title, price, quantity in SEED_PRODUCTS:
            product, _ = Product.objects.get_or_create(
                title=title,
                seller=seller,
                defaults={"price": price, "quantity": quantity, "published": True},
            )
            products.append(product)
        return products

    def _seed_orders(self, buyers, products: list[Product], count: int) -> int:
        self.stdout.write("Placing orders...")
        service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        created = 0
        for _ in range(count):
            buyer = random.choice(buyers)
            picked = random.sample(products, k=random.randint(1, 3))
            line_items = [
                {"product_id": product.id, "quantity": random.randint(1, 2)}
                for product in picked
            ]
            try:
                service.place_order(buyer.pk, line_items)
            except InsufficientStock as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order: {exc}"))
                continue
            created += 1
        return created
