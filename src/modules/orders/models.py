"""Order and Placement models.

Rules implemented here:
- ``Order.total`` is a stored, derived value: it is rewritten by
  ``OrderAggregate.recompute_total`` after every placement change and is
  never computed at read time.
- Status transitions are validated against ``VALID_TRANSITIONS``.
- ``Order.user`` uses PROTECT to preserve purchase history.
- ``Placement`` rows are owned by their order (CASCADE) and only reference
  their product (PROTECT): a placement never owns stock, it records how
  much stock the order took.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import TERMINAL_STATES, VALID_TRANSITIONS, OrderStatus
from modules.orders.exceptions import InvalidOrderStatus
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, SoftDeleteModel):
    """Order aggregate root.

    A cancelled order keeps its row (status ``CANCELLED`` and
    ``deleted_at`` set) for auditing, but it has no placements left and is
    invisible to every look-up that goes through ``alive()``.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="orders_user_created_idx"),
            models.Index(fields=["status"], name="orders_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        allowed = VALID_TRANSITIONS.get(self.status, set())
        return new_status in allowed

    def transition_to(self, new_status: str) -> str:
        """Move to *new_status* in memory and return the previous status.

        Raises:
            InvalidOrderStatus: the transition is not allowed.
        """
        if not self.can_transition_to(new_status):
            raise InvalidOrderStatus(
                f"Cannot transition order {self.id} from {self.status} to {new_status}."
            )
        old_status = self.status
        self.status = new_status
        return old_status

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status}, ${self.total})"


class Placement(BaseModel):
    """One line item of an order: *quantity* units of *product*."""

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="placements",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="placements",
    )
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )

    class Meta:
        db_table = "placements"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="placements_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity}"
