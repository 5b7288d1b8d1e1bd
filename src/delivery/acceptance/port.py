"""Acceptance gate port — the source of simulated transient failures.

A structurally valid accept request can still be rejected for reasons that
have nothing to do with the order data (a flaky kitchen tablet, a dropped
connection). The delivery service asks the gate after every other check has
passed; adapters decide whether this particular attempt fails.
"""

from abc import ABC, abstractmethod


class AcceptanceGate(ABC):
    """Abstract interface for transient-failure sources."""

    @abstractmethod
    def should_reject(self, order_id: str, restaurant_id: str) -> bool:
        """Return True when this acceptance attempt must fail as transient."""
        ...
