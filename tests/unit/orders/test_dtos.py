"""Unit tests for order DTOs."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.dtos import LineItemDTO, OrderOutputDTO, PlaceOrderDTO

pytestmark = pytest.mark.unit


class TestLineItemDTO:
    def test_coerces_string_uuid(self):
        product_id = uuid4()
        item = LineItemDTO(product_id=str(product_id), quantity=2)
        assert item.product_id == product_id

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationError, match="at least 1"):
            LineItemDTO(product_id=uuid4(), quantity=quantity)

    def test_product_is_required(self):
        with pytest.raises(ValidationError):
            LineItemDTO(quantity=1)

    def test_is_immutable(self):
        item = LineItemDTO(product_id=uuid4(), quantity=1)
        with pytest.raises(ValidationError):
            item.quantity = 5


class TestPlaceOrderDTO:
    def test_nested_line_items(self):
        dto = PlaceOrderDTO(
            user_id=1,
            line_items=[{"product_id": uuid4(), "quantity": 1}],
        )
        assert isinstance(dto.line_items[0], LineItemDTO)

    def test_line_items_must_not_be_empty(self):
        with pytest.raises(ValidationError, match="at least one line item"):
            PlaceOrderDTO(user_id=1, line_items=[])

    def test_same_product_may_repeat(self):
        product_id = uuid4()
        dto = PlaceOrderDTO(
            user_id=1,
            line_items=[
                {"product_id": product_id, "quantity": 1},
                {"product_id": product_id, "quantity": 2},
            ],
        )
        assert len(dto.line_items) == 2


class TestOrderOutputDTO:
    def test_from_entity(self, order_service, user, make_product):
        product = make_product(title="Lamp", price="12.00", quantity=5)
        order = order_service.place_order(
            user.pk, [{"product_id": product.id, "quantity": 2}]
        )

        dto = OrderOutputDTO.from_entity(order)

        assert dto.id == order.id
        assert dto.user_id == user.pk
        assert dto.status == "PLACED"
        assert dto.total == Decimal("24.00")
        assert len(dto.placements) == 1
        assert dto.placements[0].product_title == "Lamp"
        assert dto.placements[0].unit_price == Decimal("12.00")
        assert dto.placements[0].quantity == 2
