"""Unit tests for the ``seed_data`` management command."""

from __future__ import annotations

from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

from modules.core.management.commands.seed_data import SEED_PRODUCTS
from modules.orders.models import Order
from modules.products.models import Product

pytestmark = pytest.mark.unit


def test_seeds_users_products_and_orders():
    out = StringIO()

    call_command("seed_data", "--orders", "3", stdout=out)

    usernames = ["seller", "alice", "bob", "carol"]
    assert get_user_model().objects.filter(username__in=usernames).count() == 4
    assert Product.objects.count() == len(SEED_PRODUCTS)
    assert 0 < Order.objects.count() <= 3
    assert "Seed completed" in out.getvalue()


def test_is_rerunnable():
    call_command("seed_data", "--orders", "0", stdout=StringIO())
    call_command("seed_data", "--orders", "0", stdout=StringIO())

    assert Product.objects.count() == len(SEED_PRODUCTS)
    assert Order.objects.count() == 0
