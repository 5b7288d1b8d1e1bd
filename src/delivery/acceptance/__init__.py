"""Acceptance gate abstraction — pluggable transient-failure source."""

from delivery.acceptance.fake_adapter import FakeAcceptanceGate
from delivery.acceptance.port import AcceptanceGate
from delivery.acceptance.random_adapter import DEFAULT_FAILURE_RATE, RandomAcceptanceGate


def build_gate(settings) -> AcceptanceGate:
    """Return the acceptance gate selected by ``settings.acceptance_gate``.

    Uses RandomAcceptanceGate by default, seeded and rated from settings.
    """
    adapter = settings.acceptance_gate
    if adapter == "random":
        return RandomAcceptanceGate(failure_rate=settings.accept_failure_rate, seed=settings.random_seed)
    if adapter == "fake":
        return FakeAcceptanceGate()
    raise ValueError(f"Unknown acceptance gate: {adapter}")


__all__ = [
    "DEFAULT_FAILURE_RATE",
    "AcceptanceGate",
    "FakeAcceptanceGate",
    "RandomAcceptanceGate",
    "build_gate",
]
