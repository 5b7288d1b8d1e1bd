"""Shared BDD fixtures and step definitions for delivery order journeys."""

import pytest
from delivery.errors import DeliveryError
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the delivery error a step ran into."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a customer placed an order with restaurant "{restaurant_id}"'), target_fixture="order")
def placed_order(service, restaurant_id):
    return service.create_order("C001", restaurant_id, "Bubble tea x2, chicken rice x1", 250.0, "100 Wenhua Rd")


@given("the restaurant accepted the order")
def restaurant_accepted(service, order):
    service.accept_order(order.order_id, order.restaurant_id)


@given("the food is ready")
def food_is_ready(service, order):
    service.prepare_food(order.order_id)
    service.food_ready(order.order_id)


@given(parsers.cfparse('courier "{courier_id}" picked up the order'))
def courier_picked_up(service, order, courier_id):
    service.assign_delivery_person(order.order_id, courier_id)


@given("the order was delivered")
def order_was_delivered(service, order):
    service.complete_delivery(order.order_id)


@given(parsers.cfparse('the order was cancelled because "{reason}"'))
def order_was_cancelled(service, order, reason):
    service.cancel_order(order.order_id, reason)


@given("the restaurant system is busy")
def restaurant_system_busy(gate):
    gate.configure(should_reject=True)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(service, order, status):
    assert service.get_order(order.order_id).status == status


@then(parsers.cfparse('the request fails with "{kind}"'))
def request_fails_with(error, kind):
    assert isinstance(error["exc"], DeliveryError)
    assert error["exc"].kind.value == kind


@then("the request succeeds")
def request_succeeds(error):
    assert error["exc"] is None


@then(parsers.cfparse('courier "{courier_id}" is available'))
def courier_is_available(service, courier_id):
    assert service.is_courier_available(courier_id)


@then(parsers.cfparse('courier "{courier_id}" is not available'))
def courier_is_not_available(service, courier_id):
    assert not service.is_courier_available(courier_id)


@then(parsers.cfparse('the order history reads "{names}"'))
def order_history_reads(service, order, names):
    history = [type(event).__name__ for event in service.order_history(order.order_id)]
    assert history == [name.strip() for name in names.split(",")]
