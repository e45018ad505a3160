from __future__ import annotations

from decimal import Decimal
from itertools import count

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

User = get_user_model()

_sequence = count(1)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def make_user():
    """Factory for users with unique usernames and e-mails."""

    def _make(username: str | None = None, **extra):
        n = next(_sequence)
        username = username or f"user{n}"
        extra.setdefault("email", f"{username}@example.com")
        return User.objects.create_user(username=username, password="testpass123", **extra)

    return _make


@pytest.fixture()
def make_product():
    """Factory for published products."""

    def _make(title: str | None = None, price="10.00", quantity: int = 10, **extra):
        extra.setdefault("published", True)
        return Product.objects.create(
            title=title or f"Product {next(_sequence)}",
            price=Decimal(price),
            quantity=quantity,
            **extra,
        )

    return _make


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def auth_client(api_client, user):
    """APIClient force-authenticated as ``user``."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )
