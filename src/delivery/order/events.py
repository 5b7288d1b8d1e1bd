"""Order domain events — immutable facts about order state changes.

Events are past tense, versioned, and carry enough data to describe the
change on their own. The Order aggregate raises them as it transitions; the
order registry appends them to the domain's event store when the order is
persisted.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String, Text


class OrderPlaced(BaseEvent):
    """A customer placed a new order with a restaurant."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    items = Text(sanitize=False)
    total_amount = Float(required=True)
    delivery_address = String(required=True, max_length=500, sanitize=False)
    placed_at = DateTime(required=True)


class OrderAccepted(BaseEvent):
    """The restaurant accepted the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    accepted_at = DateTime(required=True)


class FoodPreparationStarted(BaseEvent):
    """The kitchen started preparing the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    started_at = DateTime(required=True)


class FoodReady(BaseEvent):
    """The food is ready and waiting for a courier."""

    __version__ = 1

    order_id = Identifier(required=True)
    ready_at = DateTime(required=True)


class CourierAssigned(BaseEvent):
    """A courier picked up the food and is on the way."""

    __version__ = 1

    order_id = Identifier(required=True)
    courier_id = Identifier(required=True)
    picked_up_at = DateTime(required=True)


class OrderDelivered(BaseEvent):
    """The courier handed the order to the customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    courier_id = Identifier()
    delivered_at = DateTime(required=True)


class OrderCancelled(BaseEvent):
    """The order was cancelled before delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(max_length=500)
    previous_status = String(required=True, max_length=50)
    released_courier_id = Identifier()
    cancelled_at = DateTime(required=True)


ORDER_EVENTS = (
    OrderPlaced,
    OrderAccepted,
    FoodPreparationStarted,
    FoodReady,
    CourierAssigned,
    OrderDelivered,
    OrderCancelled,
)
