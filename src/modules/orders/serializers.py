"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
plain line items validated again by ``PlaceOrderDTO``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, Placement

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class LineItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class PlaceOrderSerializer(serializers.Serializer):
    """Validates the order placement request payload."""

    line_items = LineItemSerializer(many=True, allow_empty=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class PlacementSerializer(serializers.ModelSerializer):
    product_title = serializers.CharField(source="product.title", read_only=True)
    unit_price = serializers.DecimalField(
        source="product.price", max_digits=10, decimal_places=2, read_only=True
    )

    class Meta:
        model = Placement
        fields = ["id", "product_id", "product_title", "unit_price", "quantity"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested placements."""

    placements = PlacementSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "status",
            "total",
            "created_at",
            "updated_at",
            "placements",
        ]
        read_only_fields = fields
