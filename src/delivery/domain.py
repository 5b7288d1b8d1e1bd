"""Delivery bounded context — food orders from the customer to their door.

Every order registry builds its own domain, so two delivery services never
share an order store or an event store. Orders and events live in protean's
in-memory adapters for the lifetime of the process.
"""

from pathlib import Path

from protean.domain import Domain

from delivery.order.events import ORDER_EVENTS
from delivery.order.order import Order

DOMAIN_NAME = "delivery"


def build_domain() -> Domain:
    """Create an initialized domain holding the Order aggregate and its events."""
    domain = Domain(
        root_path=str(Path(__file__).parent),
        name=DOMAIN_NAME,
        config={"event_processing": "sync", "command_processing": "sync"},
    )
    domain.register(Order)
    for event_cls in ORDER_EVENTS:
        domain.register(event_cls, part_of=Order)
    domain.init(traverse=False)
    return domain
