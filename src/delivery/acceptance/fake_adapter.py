"""Fake acceptance gate — deterministic gate for testing and development.

Never rejects unless told to. Records every attempt it was asked about.
"""

from delivery.acceptance.port import AcceptanceGate


class FakeAcceptanceGate(AcceptanceGate):
    """Fake gate that always lets acceptance through by default."""

    def __init__(self, should_reject: bool = False):
        self.reject = should_reject
        self.attempts: list[tuple[str, str]] = []

    def configure(self, should_reject: bool = False) -> None:
        """Configure the fake gate behavior for testing."""
        self.reject = should_reject

    def should_reject(self, order_id: str, restaurant_id: str) -> bool:
        self.attempts.append((order_id, restaurant_id))
        return self.reject
