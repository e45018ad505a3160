"""Unit tests for PlacementRecorder and OrderAggregate."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.orders.aggregate import OrderAggregate
from modules.orders.exceptions import InsufficientStock, InvalidOrder, ProductNotFound
from modules.orders.models import Placement
from modules.orders.placements import PlacementRecorder
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.products.ledger import ProductLedger
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def order_repo():
    return OrderDjangoRepository()


@pytest.fixture()
def aggregate(order_repo):
    return OrderAggregate(order_repo)


@pytest.fixture()
def recorder(order_repo, aggregate):
    return PlacementRecorder(order_repo, ProductLedger(ProductDjangoRepository()), aggregate)


@pytest.fixture()
def order(order_repo, user):
    return order_repo.create(user.pk)


class TestCreate:
    def test_takes_stock_and_updates_total(self, recorder, order, make_product):
        product = make_product(price="6.00", quantity=10)

        placement = recorder.create(order, product.id, 3)

        assert placement.quantity == 3
        assert placement.order_id == order.id
        product.refresh_from_db()
        assert product.quantity == 7
        assert order.total == Decimal("18.00")
        order.refresh_from_db()
        assert order.total == Decimal("18.00")

    def test_insufficient_stock_records_nothing(self, recorder, order, make_product):
        product = make_product(quantity=1)

        with pytest.raises(InsufficientStock):
            recorder.create(order, product.id, 2)

        assert not Placement.objects.filter(order=order).exists()
        assert order.total == Decimal("0.00")

    def test_unknown_product(self, recorder, order):
        with pytest.raises(ProductNotFound):
            recorder.create(order, uuid4(), 1)

    @pytest.mark.parametrize("quantity", [0, -2, 1.5, True, "3"])
    def test_rejects_invalid_quantity(self, recorder, order, make_product, quantity):
        product = make_product(quantity=10)

        with pytest.raises(InvalidOrder):
            recorder.create(order, product.id, quantity)

        product.refresh_from_db()
        assert product.quantity == 10


class TestRemove:
    def test_restores_stock_and_updates_total(
        self, recorder, order_repo, order, make_product
    ):
        kept = make_product(price="1.00", quantity=5)
        dropped = make_product(price="9.00", quantity=5)
        recorder.create(order, kept.id, 2)
        placement = recorder.create(order, dropped.id, 1)
        assert order.total == Decimal("11.00")

        placement = next(
            p for p in order_repo.list_placements(order) if p.id == placement.id
        )
        recorder.remove(placement)

        dropped.refresh_from_db()
        assert dropped.quantity == 5
        assert order.total == Decimal("2.00")
        assert not Placement.objects.filter(id=placement.id).exists()


class TestOrderAggregate:
    def test_empty_order_totals_zero(self, aggregate, order):
        assert aggregate.recompute_total(order) == Decimal("0.00")

    def test_uses_current_prices(self, aggregate, order_repo, order, make_product):
        product = make_product(price="5.00", quantity=10)
        order_repo.add_placement(order, product.id, 2)
        assert aggregate.recompute_total(order) == Decimal("10.00")

        product.price = Decimal("7.25")
        product.save()

        assert aggregate.recompute_total(order) == Decimal("14.50")
        order.refresh_from_db()
        assert order.total == Decimal("14.50")
