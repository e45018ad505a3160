"""Integration test for order atomicity on partial stock failures.

Placement is all-or-nothing: when any line item lacks stock, no order,
no placement, no outbox row and no stock change survives the request.
"""

from __future__ import annotations

import pytest

from modules.core.models import OutboxEvent
from modules.orders.models import Order, Placement

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


@pytest.fixture()
def product_a(make_product):
    return make_product(title="Atomic A", price="10.00", quantity=10)


@pytest.fixture()
def product_b(make_product):
    return make_product(title="Atomic B", price="20.00", quantity=1)


def _payload(*lines):
    return {
        "line_items": [
            {"product_id": str(product.id), "quantity": quantity}
            for product, quantity in lines
        ]
    }


def test_partial_failure_rolls_back_everything(auth_client, product_a, product_b):
    response = auth_client.post(
        URL, _payload((product_a, 3), (product_b, 2)), format="json"
    )

    assert response.status_code == 409
    assert response.data["product_id"] == str(product_b.id)
    assert response.data["available"] == 1

    product_a.refresh_from_db()
    product_b.refresh_from_db()
    assert product_a.quantity == 10
    assert product_b.quantity == 1
    assert Order.objects.count() == 0
    assert Placement.objects.count() == 0
    assert OutboxEvent.objects.count() == 0


def test_unknown_product_after_valid_lines_rolls_back(auth_client, product_a):
    payload = _payload((product_a, 3))
    payload["line_items"].append(
        {"product_id": "0190d2c4-0000-7000-8000-000000000000", "quantity": 1}
    )

    response = auth_client.post(URL, payload, format="json")

    assert response.status_code == 404
    product_a.refresh_from_db()
    assert product_a.quantity == 10
    assert Order.objects.count() == 0


def test_success_after_failure_sees_untouched_stock(auth_client, product_a, product_b):
    auth_client.post(URL, _payload((product_a, 3), (product_b, 2)), format="json")

    response = auth_client.post(
        URL, _payload((product_a, 3), (product_b, 1)), format="json"
    )

    assert response.status_code == 201
    assert response.data["total"] == "50.00"
    product_a.refresh_from_db()
    product_b.refresh_from_db()
    assert (product_a.quantity, product_b.quantity) == (7, 0)
