"""Delivery scenario runner.

Replays the canned order scenarios against a freshly configured delivery
service and logs how each one ends. Every scenario is an ordinary caller of
the service: it reacts to ``DeliveryError`` the way a client would, and
tries an acceptance again when the restaurant's system was only busy.

Usage:
    python -m delivery.demo                      # run every scenario
    python -m delivery.demo --scenario cancellation
    python -m delivery.demo --seed 7 --failure-rate 0.5
"""

import argparse
import sys

from delivery.config import DeliverySettings, load_settings
from delivery.errors import DeliveryError, ErrorKind
from delivery.service import DeliveryService
from delivery.utils.logging import add_context, clear_context, configure_logging, get_logger

logger = get_logger(__name__)

# Tries per acceptance before a transiently busy restaurant counts as a failure
ACCEPT_ATTEMPTS = 10


def _outcome(service, name, expected_kind=None, order=None, error=None):
    actual_kind = error.kind if error is not None else None
    current = service.get_order(order.order_id) if order is not None else None
    return {
        "scenario": name,
        "ok": actual_kind == expected_kind,
        "order_id": current.order_id if current is not None else None,
        "status": current.status if current is not None else None,
        "error": actual_kind.value if actual_kind is not None else None,
    }


def accept_with_retry(service: DeliveryService, order_id: str, restaurant_id: str, attempts: int = ACCEPT_ATTEMPTS):
    """Accept the order, trying again while the restaurant's system is busy.

    Only the transient rejection is retried: a restaurant that is not taking
    orders at all fails on the first attempt.
    """
    for attempt in range(1, attempts + 1):
        try:
            return service.accept_order(order_id, restaurant_id)
        except DeliveryError as exc:
            transient = exc.kind == ErrorKind.RESTAURANT_BUSY and service.is_restaurant_available(restaurant_id)
            if not transient or attempt == attempts:
                raise
            logger.info("Restaurant busy, trying again", order_id=order_id, attempt=attempt)


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------
def normal_flow(service: DeliveryService) -> dict:
    """An order travels the whole happy path with courier D001."""
    order = None
    try:
        order = service.create_order("C001", "R001", "Bubble tea x2, chicken rice x1", 250.0, "100 Wenhua Rd, Xitun")
        accept_with_retry(service, order.order_id, "R001")
        service.prepare_food(order.order_id)
        service.food_ready(order.order_id)
        service.assign_delivery_person(order.order_id, "D001")
        service.complete_delivery(order.order_id)
    except DeliveryError as exc:
        logger.error("Happy path interrupted", **exc.to_dict())
        return _outcome(service, "normal_flow", order=order, error=exc)

    logger.info("Order delivered end to end", order_id=order.order_id)
    return _outcome(service, "normal_flow", order=order)


def restaurant_busy(service: DeliveryService) -> dict:
    """R002 is closed, so acceptance fails and the order stays PENDING."""
    order = service.create_order("C002", "R002", "Beef noodle soup x1", 120.0, "50 Sanmin Rd, North District")
    try:
        service.accept_order(order.order_id, "R002")
    except DeliveryError as exc:
        if exc.kind == ErrorKind.RESTAURANT_BUSY:
            logger.warning("Restaurant cannot take the order", restaurant_id=exc.restaurant_id, reason=exc.reason)
            logger.info("Looking for another restaurant")
        return _outcome(service, "restaurant_busy", ErrorKind.RESTAURANT_BUSY, order, exc)
    return _outcome(service, "restaurant_busy", ErrorKind.RESTAURANT_BUSY, order)


def invalid_parameters(service: DeliveryService) -> dict:
    """A negative amount and a blank address are both rejected."""
    errors = []
    for amount, address in ((-50.0, "200 Jianguo Rd, South District"), (300.0, "")):
        try:
            service.create_order("C003", "R001", "Fried chicken combo", amount, address)
        except DeliveryError as exc:
            logger.warning("Order rejected", messages=exc.messages)
            errors.append(exc)

    rejected = [e for e in errors if e.kind == ErrorKind.INVALID_ARGUMENT]
    result = _outcome(service, "invalid_parameters", ErrorKind.INVALID_ARGUMENT, error=errors[0] if errors else None)
    result["ok"] = len(rejected) == 2
    return result


def invalid_transition(service: DeliveryService) -> dict:
    """Preparing food before the restaurant accepted is refused."""
    order = service.create_order("C005", "R001", "Sushi platter", 450.0, "88 Ziyou Rd, East District")
    try:
        service.prepare_food(order.order_id)
    except DeliveryError as exc:
        logger.warning("Transition refused, follow the order flow", **exc.to_dict())
        return _outcome(service, "invalid_transition", ErrorKind.INVALID_ORDER_STATUS, order, exc)
    return _outcome(service, "invalid_transition", ErrorKind.INVALID_ORDER_STATUS, order)


def courier_unavailable(service: DeliveryService) -> dict:
    """Courier D003 is off shift, so the READY order waits for someone else."""
    order = service.create_order("C006", "R003", "Hot pot set", 680.0, "123 Gongyi Rd, West District")
    try:
        accept_with_retry(service, order.order_id, "R003")
        service.prepare_food(order.order_id)
        service.food_ready(order.order_id)
        service.assign_delivery_person(order.order_id, "D003")
    except DeliveryError as exc:
        if exc.kind == ErrorKind.DELIVERY_PERSON_UNAVAILABLE:
            logger.warning("Courier unavailable", courier_id=exc.courier_id)
            logger.info("Looking for another courier")
        return _outcome(service, "courier_unavailable", ErrorKind.DELIVERY_PERSON_UNAVAILABLE, order, exc)
    return _outcome(service, "courier_unavailable", ErrorKind.DELIVERY_PERSON_UNAVAILABLE, order)


def cancellation(service: DeliveryService) -> dict:
    """The customer cancels after the restaurant accepted."""
    order = service.create_order("C007", "R001", "Burger combo", 180.0, "456 Wenxin Rd, Beitun")
    try:
        accept_with_retry(service, order.order_id, "R001")
        service.cancel_order(order.order_id, "Customer will pick it up instead")
    except DeliveryError as exc:
        logger.error("Cancellation scenario failed", **exc.to_dict())
        return _outcome(service, "cancellation", order=order, error=exc)
    return _outcome(service, "cancellation", order=order)


def order_not_found(service: DeliveryService) -> dict:
    """Looking up an id that was never issued fails."""
    try:
        service.get_order("ORD-NOT-EXISTS")
    except DeliveryError as exc:
        logger.warning("Lookup failed", order_id=exc.order_id)
        return _outcome(service, "order_not_found", ErrorKind.ORDER_NOT_FOUND, error=exc)
    return _outcome(service, "order_not_found", ErrorKind.ORDER_NOT_FOUND)


SCENARIOS = {
    "normal_flow": normal_flow,
    "restaurant_busy": restaurant_busy,
    "invalid_parameters": invalid_parameters,
    "invalid_transition": invalid_transition,
    "courier_unavailable": courier_unavailable,
    "cancellation": cancellation,
    "order_not_found": order_not_found,
}


def run_scenarios(service: DeliveryService, names=None) -> list[dict]:
    """Run the named scenarios (all by default) in order against ``service``."""
    results = []
    for name in names or SCENARIOS:
        add_context(scenario=name)
        try:
            logger.info("Scenario started")
            result = SCENARIOS[name](service)
            logger.info("Scenario finished", ok=result["ok"], status=result["status"], error=result["error"])
            results.append(result)
        finally:
            clear_context()
    return results


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Replay food delivery order scenarios")
    parser.add_argument("--scenario", action="append", choices=sorted(SCENARIOS), help="Scenario to run (repeatable)")
    parser.add_argument("--seed", type=int, help="Seed for the acceptance failure simulation")
    parser.add_argument("--failure-rate", type=float, help="Share of accept attempts that fail transiently")
    args = parser.parse_args(argv)

    settings = load_settings()
    overrides = {}
    if args.seed is not None:
        overrides["random_seed"] = args.seed
    if args.failure_rate is not None:
        overrides["accept_failure_rate"] = args.failure_rate
    if overrides:
        settings = DeliverySettings.model_validate({**settings.model_dump(), **overrides})

    configure_logging(settings.env)
    logger.info("Delivery platform starting")
    results = run_scenarios(DeliveryService.from_settings(settings), args.scenario)
    failed = [r["scenario"] for r in results if not r["ok"]]
    logger.info("All scenarios finished", total=len(results), unexpected=failed)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
