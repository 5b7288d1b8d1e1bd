"""Random acceptance gate — rejects a fixed share of attempts.

Each gate owns its own ``random.Random`` so a seed makes a run repeatable
without touching the global generator.
"""

import random

from delivery.acceptance.port import AcceptanceGate

DEFAULT_FAILURE_RATE = 0.2


class RandomAcceptanceGate(AcceptanceGate):
    def __init__(self, failure_rate: float = DEFAULT_FAILURE_RATE, seed: int | None = None):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be between 0 and 1, got {failure_rate}")
        self.failure_rate = failure_rate
        self._random = random.Random(seed)

    def should_reject(self, order_id: str, restaurant_id: str) -> bool:  # noqa: ARG002
        return self._random.random() < self.failure_rate
