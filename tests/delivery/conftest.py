import pytest
from delivery.acceptance import FakeAcceptanceGate
from delivery.config import DEFAULT_COURIERS, DEFAULT_RESTAURANTS
from delivery.registry import OrderRegistry
from delivery.service import DeliveryService


@pytest.fixture()
def gate():
    return FakeAcceptanceGate()


@pytest.fixture()
def registry():
    return OrderRegistry(restaurants=DEFAULT_RESTAURANTS, couriers=DEFAULT_COURIERS)


@pytest.fixture()
def service(registry, gate):
    return DeliveryService(registry, gate=gate)


@pytest.fixture()
def place_order(service):
    """Place an order with sensible defaults; override any field by keyword."""

    def _place(**overrides):
        data = {
            "customer_id": "C001",
            "restaurant_id": "R001",
            "items": "Bubble tea x2, chicken rice x1",
            "total_amount": 250.0,
            "delivery_address": "100 Wenhua Rd, Xitun",
        }
        data.update(overrides)
        return service.create_order(**data)

    return _place


@pytest.fixture()
def ready_order(service, place_order):
    """An order that went through the kitchen and waits for a courier."""
    order = place_order()
    service.accept_order(order.order_id, "R001")
    service.prepare_food(order.order_id)
    return service.food_ready(order.order_id)
