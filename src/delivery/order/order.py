"""Order aggregate (CQRS) — the core of the delivery domain.

An Order is a single customer purchase tracked from placement to delivery.
Its status only moves through the transition methods below; each method
checks the one status it may be called from, applies the change and raises
a domain event.

State Machine:
    PENDING → ACCEPTED → PREPARING → READY → PICKED_UP → DELIVERED
    {PENDING, ACCEPTED, PREPARING, READY, PICKED_UP, CANCELLED} → CANCELLED
"""

import math
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.core.aggregate import BaseAggregate
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from delivery.errors import DeliveryError
from delivery.order.events import (
    CourierAssigned,
    FoodPreparationStarted,
    FoodReady,
    OrderAccepted,
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    PREPARING = "Preparing"
    READY = "Ready"
    PICKED_UP = "Picked_Up"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_STATUS_LABELS = {
    OrderStatus.PENDING: "Waiting for the restaurant to confirm",
    OrderStatus.ACCEPTED: "Accepted by the restaurant",
    OrderStatus.PREPARING: "Being prepared",
    OrderStatus.READY: "Ready for pickup",
    OrderStatus.PICKED_UP: "Out for delivery",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}

_TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# The single status each forward transition may start from
_REQUIRED_STATUS = {
    OrderStatus.ACCEPTED: OrderStatus.PENDING,
    OrderStatus.PREPARING: OrderStatus.ACCEPTED,
    OrderStatus.READY: OrderStatus.PREPARING,
    OrderStatus.PICKED_UP: OrderStatus.READY,
    OrderStatus.DELIVERED: OrderStatus.PICKED_UP,
}

# Set once when the order is placed
_CREATION_FIELDS = frozenset(
    {"customer_id", "restaurant_id", "items", "total_amount", "delivery_address", "created_at"}
)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
class Order(BaseAggregate):
    order_id = Identifier(identifier=True)
    customer_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    items = Text(sanitize=False, default="")
    total_amount = Float(required=True)
    delivery_address = String(required=True, max_length=500, sanitize=False)
    status = String(
        max_length=50,
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    courier_id = Identifier()
    cancellation_reason = String(max_length=500, sanitize=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_amount_must_be_positive(self):
        if not (math.isfinite(self.total_amount) and self.total_amount > 0):
            raise ValidationError({"total_amount": ["Total amount must be greater than zero"]})

    @invariant.post
    def delivery_address_must_not_be_blank(self):
        if not self.delivery_address.strip():
            raise ValidationError({"delivery_address": ["Delivery address must not be empty"]})

    def __setattr__(self, name, value):
        if name in _CREATION_FIELDS and getattr(self, "_initialized", False):
            raise InvalidOperationError(f"`{name}` cannot be changed once the order is placed")
        super().__setattr__(name, value)

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id: str,
        customer_id: str,
        restaurant_id: str,
        items: str,
        total_amount: float,
        delivery_address: str,
    ) -> "Order":
        """Place a new order in PENDING status.

        Raises:
            DeliveryError: of kind INVALID_ARGUMENT when the amount is not
                positive, the address is blank, or an identifier is missing.
        """
        now = datetime.now(UTC)
        try:
            order = cls(
                order_id=order_id,
                customer_id=customer_id,
                restaurant_id=restaurant_id,
                items=items or "",
                total_amount=total_amount,
                delivery_address=delivery_address,
                status=OrderStatus.PENDING.value,
                created_at=now,
                updated_at=now,
            )
        except ValidationError as exc:
            raise DeliveryError.invalid_argument(exc.messages) from exc

        order.raise_(
            OrderPlaced(
                order_id=order.order_id,
                customer_id=order.customer_id,
                restaurant_id=order.restaurant_id,
                items=order.items,
                total_amount=order.total_amount,
                delivery_address=order.delivery_address,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def assert_can_transition(self, target_status: OrderStatus) -> None:
        """Raise INVALID_ORDER_STATUS unless ``target_status`` is reachable now."""
        current = OrderStatus(self.status)
        if target_status == OrderStatus.CANCELLED:
            allowed = current != OrderStatus.DELIVERED
        else:
            allowed = _REQUIRED_STATUS.get(target_status) == current
        if not allowed:
            raise DeliveryError.invalid_order_status(self.order_id, current, target_status)

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def accept(self, restaurant_id: str) -> None:
        """The restaurant confirms it will cook the order."""
        self.assert_can_transition(OrderStatus.ACCEPTED)
        now = datetime.now(UTC)
        self.status = OrderStatus.ACCEPTED.value
        self.updated_at = now
        self.raise_(OrderAccepted(order_id=self.order_id, restaurant_id=restaurant_id, accepted_at=now))

    def start_preparing(self) -> None:
        self.assert_can_transition(OrderStatus.PREPARING)
        now = datetime.now(UTC)
        self.status = OrderStatus.PREPARING.value
        self.updated_at = now
        self.raise_(FoodPreparationStarted(order_id=self.order_id, started_at=now))

    def mark_ready(self) -> None:
        self.assert_can_transition(OrderStatus.READY)
        now = datetime.now(UTC)
        self.status = OrderStatus.READY.value
        self.updated_at = now
        self.raise_(FoodReady(order_id=self.order_id, ready_at=now))

    def assign_courier(self, courier_id: str) -> None:
        """Hand the food to a courier. The courier id is kept for audit."""
        self.assert_can_transition(OrderStatus.PICKED_UP)
        now = datetime.now(UTC)
        self.courier_id = courier_id
        self.status = OrderStatus.PICKED_UP.value
        self.updated_at = now
        self.raise_(CourierAssigned(order_id=self.order_id, courier_id=courier_id, picked_up_at=now))

    def complete_delivery(self) -> None:
        self.assert_can_transition(OrderStatus.DELIVERED)
        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = now
        self.raise_(OrderDelivered(order_id=self.order_id, courier_id=self.courier_id, delivered_at=now))

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason: str = "") -> None:
        """Cancel the order from any status but DELIVERED.

        Cancelling an already cancelled order changes nothing: the first
        reason is kept and no event is raised.
        """
        self.assert_can_transition(OrderStatus.CANCELLED)
        previous = OrderStatus(self.status)
        if previous == OrderStatus.CANCELLED:
            return

        reason = reason or ""
        released = self.courier_id if previous == OrderStatus.PICKED_UP else None
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=self.order_id,
                reason=reason,
                previous_status=previous.value,
                released_courier_id=released,
                cancelled_at=now,
            )
        )
