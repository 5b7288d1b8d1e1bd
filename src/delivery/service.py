"""Delivery service — one operation per order lifecycle transition.

Every operation follows the same pattern inside a registry session:

    1. load the order                       (ORDER_NOT_FOUND)
    2. check the required current status    (INVALID_ORDER_STATUS)
    3. check restaurant/courier availability (RESTAURANT_BUSY,
                                              DELIVERY_PERSON_UNAVAILABLE)
    4. apply the transition, persist the order, flip courier availability

A failed operation leaves the order and the availability flags untouched.
Failures are logged and raised to the caller; nothing is retried here.
Orders handed back to callers are copies: changing them does not change
what the registry holds.
"""

from contextlib import contextmanager

import structlog

from delivery.acceptance import DEFAULT_FAILURE_RATE, AcceptanceGate, RandomAcceptanceGate, build_gate
from delivery.config import DeliverySettings, load_settings
from delivery.errors import DeliveryError
from delivery.order.order import Order, OrderStatus
from delivery.registry import OrderRegistry

logger = structlog.get_logger(__name__)


class DeliveryService:
    def __init__(
        self,
        registry: OrderRegistry | None = None,
        gate: AcceptanceGate | None = None,
        failure_rate: float = DEFAULT_FAILURE_RATE,
    ):
        self.registry = registry if registry is not None else OrderRegistry()
        self.gate = gate if gate is not None else RandomAcceptanceGate(failure_rate=failure_rate)

    @classmethod
    def from_settings(cls, settings: DeliverySettings | None = None) -> "DeliveryService":
        """Build a service with its own registry seeded from configuration."""
        settings = settings if settings is not None else load_settings()
        registry = OrderRegistry(restaurants=settings.restaurants, couriers=settings.couriers)
        return cls(registry, gate=build_gate(settings))

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @contextmanager
    def _transaction(self, operation: str, **context):
        with self.registry.session():
            try:
                yield
            except DeliveryError as exc:
                logger.warning("Delivery operation rejected", operation=operation, **{**context, **exc.to_dict()})
                raise

    def _commit(self, order: Order) -> None:
        events = list(order._events)
        self.registry.put(order)
        for event in events:
            logger.info("Order event recorded", event_type=event.__class__.__type__, order_id=order.order_id)

    # -------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------
    def create_order(
        self,
        customer_id: str,
        restaurant_id: str,
        items: str,
        total_amount: float,
        delivery_address: str,
    ) -> Order:
        """Place a new PENDING order and store it under a fresh id."""
        logger.info(
            "Customer placing order",
            customer_id=customer_id,
            restaurant_id=restaurant_id,
            total_amount=total_amount,
        )
        with self._transaction("create_order", customer_id=customer_id, restaurant_id=restaurant_id):
            order = Order.create(
                order_id=self.registry.next_identity(),
                customer_id=customer_id,
                restaurant_id=restaurant_id,
                items=items,
                total_amount=total_amount,
                delivery_address=delivery_address,
            )
            self._commit(order)
        logger.info("Order created", order_id=order.order_id, status=order.status)
        return order

    # -------------------------------------------------------------------
    # Restaurant side
    # -------------------------------------------------------------------
    def accept_order(self, order_id: str, restaurant_id: str) -> Order:
        """The restaurant the order was placed with takes it.

        Fails with INVALID_ARGUMENT when another restaurant tries to take the
        order, and with RESTAURANT_BUSY when the restaurant is unavailable or
        the acceptance gate rejects this attempt. Callers may retry the latter.
        """
        logger.info("Restaurant accepting order", order_id=order_id, restaurant_id=restaurant_id)
        with self._transaction("accept_order", order_id=order_id, restaurant_id=restaurant_id):
            order = self.registry.get(order_id)
            order.assert_can_transition(OrderStatus.ACCEPTED)

            if restaurant_id != order.restaurant_id:
                raise DeliveryError.invalid_argument(
                    {"restaurant_id": [f"Order {order_id} was placed with restaurant {order.restaurant_id}"]}
                )
            if not self.registry.is_restaurant_available(restaurant_id):
                raise DeliveryError.restaurant_busy(restaurant_id, "restaurant is not taking orders")
            if self.gate.should_reject(order_id, restaurant_id):
                raise DeliveryError.restaurant_busy(restaurant_id, "restaurant system is busy, try again later")

            order.accept(restaurant_id)
            self._commit(order)
        return order

    def prepare_food(self, order_id: str) -> Order:
        logger.info("Kitchen starting preparation", order_id=order_id)
        with self._transaction("prepare_food", order_id=order_id):
            order = self.registry.get(order_id)
            order.start_preparing()
            self._commit(order)
        return order

    def food_ready(self, order_id: str) -> Order:
        logger.info("Kitchen marking food ready", order_id=order_id)
        with self._transaction("food_ready", order_id=order_id):
            order = self.registry.get(order_id)
            order.mark_ready()
            self._commit(order)
        return order

    # -------------------------------------------------------------------
    # Courier side
    # -------------------------------------------------------------------
    def assign_delivery_person(self, order_id: str, courier_id: str) -> Order:
        """Hand a READY order to an available courier, who becomes busy."""
        logger.info("Courier picking up order", order_id=order_id, courier_id=courier_id)
        with self._transaction("assign_delivery_person", order_id=order_id, courier_id=courier_id):
            order = self.registry.get(order_id)
            order.assert_can_transition(OrderStatus.PICKED_UP)

            if not self.registry.is_courier_available(courier_id):
                raise DeliveryError.delivery_person_unavailable(order_id, courier_id)

            order.assign_courier(courier_id)
            self._commit(order)
            self.registry.start_delivery(courier_id, order_id)
        return order

    def complete_delivery(self, order_id: str) -> Order:
        """Mark a PICKED_UP order delivered and free its courier."""
        logger.info("Completing delivery", order_id=order_id)
        with self._transaction("complete_delivery", order_id=order_id):
            order = self.registry.get(order_id)
            order.complete_delivery()
            self._commit(order)
            if order.courier_id is not None:
                self.registry.finish_delivery(order.courier_id)
        logger.info("Order delivered", order_id=order_id, courier_id=order.courier_id)
        return order

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel_order(self, order_id: str, reason: str = "") -> Order:
        """Cancel any order that has not been delivered.

        A courier carrying the order is released. Cancelling a cancelled
        order again succeeds and keeps the original reason.
        """
        logger.warning("Order cancellation requested", order_id=order_id, reason=reason)
        with self._transaction("cancel_order", order_id=order_id):
            order = self.registry.get(order_id)
            previous = OrderStatus(order.status)

            order.cancel(reason)
            if previous == OrderStatus.CANCELLED:
                logger.info("Order already cancelled", order_id=order_id, reason=order.cancellation_reason)
                return order

            self._commit(order)
            if previous == OrderStatus.PICKED_UP and order.courier_id is not None:
                self.registry.finish_delivery(order.courier_id)
                logger.info("Courier released", order_id=order_id, courier_id=order.courier_id)
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get_order(self, order_id: str) -> Order:
        with self._transaction("get_order", order_id=order_id):
            return self.registry.get(order_id)

    def order_history(self, order_id: str) -> list:
        """Events recorded for an existing order, oldest first."""
        with self._transaction("order_history", order_id=order_id):
            self.registry.get(order_id)
            return self.registry.events_for(order_id)

    # -------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------
    def is_restaurant_available(self, restaurant_id: str) -> bool:
        return self.registry.is_restaurant_available(restaurant_id)

    def set_restaurant_availability(self, restaurant_id: str, available: bool) -> None:
        logger.info("Restaurant availability changed", restaurant_id=restaurant_id, available=available)
        self.registry.set_restaurant_available(restaurant_id, available)

    def is_courier_available(self, courier_id: str) -> bool:
        return self.registry.is_courier_available(courier_id)

    def set_courier_availability(self, courier_id: str, available: bool) -> None:
        """Put a courier on or off shift.

        A courier out on a delivery stays unavailable until that order is
        delivered or cancelled; asking to free it earlier fails with
        DELIVERY_PERSON_UNAVAILABLE.
        """
        with self._transaction("set_courier_availability", courier_id=courier_id):
            carried_order = self.registry.order_carried_by(courier_id)
            if available and carried_order is not None:
                raise DeliveryError.delivery_person_unavailable(carried_order, courier_id)

            logger.info("Courier availability changed", courier_id=courier_id, available=available)
            self.registry.set_courier_available(courier_id, available)
