"""Order registry — the state owned by a single delivery service.

Orders are persisted through protean's in-memory repository and never
deleted; the events they raise land in the domain's event store. Alongside
them the registry keeps the order-id sequence, the availability flags of
restaurants and couriers, and which order each busy courier is carrying.
Identifiers missing from an availability map count as unavailable.

All reads and writes go through ``lock``. The delivery service holds it (via
``session``) for the whole read-validate-mutate sequence of an operation, so
a status change and the courier flip it triggers are observed together.
"""

from collections.abc import Mapping
from contextlib import contextmanager
from itertools import count
from threading import RLock

from protean.domain import Domain

from delivery.domain import build_domain
from delivery.errors import DeliveryError
from delivery.order.order import Order


class OrderRegistry:
    def __init__(
        self,
        restaurants: Mapping[str, bool] | None = None,
        couriers: Mapping[str, bool] | None = None,
        id_prefix: str = "ORD",
        domain: Domain | None = None,
    ):
        self.lock = RLock()
        self.domain = domain if domain is not None else build_domain()
        self._restaurants: dict[str, bool] = dict(restaurants or {})
        self._couriers: dict[str, bool] = dict(couriers or {})
        self._deliveries: dict[str, str] = {}
        self._id_prefix = id_prefix
        self._sequence = count(1)

    @contextmanager
    def session(self):
        """Hold the lock with this registry's domain active."""
        with self.lock, self.domain.domain_context():
            yield

    @property
    def repository(self):
        return self.domain.repository_for(Order)

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def next_identity(self) -> str:
        """Allocate the next order id. Ids are strictly increasing per registry."""
        with self.lock:
            return f"{self._id_prefix}-{next(self._sequence):06d}"

    def put(self, order: Order) -> None:
        """Persist the order and append the events it raised to the event store."""
        with self.session():
            self.repository.add(order)

    def get(self, order_id: str) -> Order:
        """Load a fresh copy of the stored order."""
        with self.session():
            order = self.repository.get_or_none(order_id)
        if order is None:
            raise DeliveryError.order_not_found(order_id)
        return order

    def events_for(self, order_id: str) -> list:
        """Every event recorded for the order, oldest first."""
        with self.session():
            stream = f"{Order.meta_.stream_category}-{order_id}"
            return [message.to_domain_object() for message in self.domain.event_store.store.read(stream)]

    def contains(self, order_id: str) -> bool:
        with self.session():
            return self.repository.get_or_none(order_id) is not None

    def __len__(self) -> int:
        with self.session():
            return self.repository.query.all().total

    # -------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------
    def is_restaurant_available(self, restaurant_id: str) -> bool:
        with self.lock:
            return self._restaurants.get(restaurant_id, False)

    def set_restaurant_available(self, restaurant_id: str, available: bool) -> None:
        with self.lock:
            self._restaurants[restaurant_id] = bool(available)

    def is_courier_available(self, courier_id: str) -> bool:
        with self.lock:
            return self._couriers.get(courier_id, False)

    def set_courier_available(self, courier_id: str, available: bool) -> None:
        with self.lock:
            self._couriers[courier_id] = bool(available)

    # -------------------------------------------------------------------
    # Couriers on the road
    # -------------------------------------------------------------------
    def start_delivery(self, courier_id: str, order_id: str) -> None:
        """The courier leaves with the order and stops taking new ones."""
        with self.lock:
            self._deliveries[courier_id] = order_id
            self._couriers[courier_id] = False

    def finish_delivery(self, courier_id: str) -> None:
        """The courier is done with its order and free again."""
        with self.lock:
            self._deliveries.pop(courier_id, None)
            self._couriers[courier_id] = True

    def order_carried_by(self, courier_id: str) -> str | None:
        with self.lock:
            return self._deliveries.get(courier_id)
