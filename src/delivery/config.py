"""Delivery configuration, read from the environment.

    DELIVERY_ENV                  development | test | staging | production
    DELIVERY_ACCEPTANCE_GATE      random (default) | fake
    DELIVERY_ACCEPT_FAILURE_RATE  share of accept attempts that fail (0.2)
    DELIVERY_RANDOM_SEED          seed for the random gate (unset = unseeded)
    DELIVERY_RESTAURANTS          JSON object, restaurant id -> available
    DELIVERY_COURIERS             JSON object, courier id -> available

Invalid values raise ``ValueError`` (pydantic's ValidationError is one).
"""

import json
import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field

from delivery.acceptance.random_adapter import DEFAULT_FAILURE_RATE

DEFAULT_RESTAURANTS = {
    "R001": True,
    "R002": False,  # closed
    "R003": True,
}

DEFAULT_COURIERS = {
    "D001": True,
    "D002": True,
    "D003": False,  # off shift
}


class DeliverySettings(BaseModel):
    env: str = "development"
    acceptance_gate: Literal["random", "fake"] = "random"
    accept_failure_rate: float = Field(default=DEFAULT_FAILURE_RATE, ge=0.0, le=1.0)
    random_seed: int | None = None
    restaurants: dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_RESTAURANTS))
    couriers: dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_COURIERS))


def _json_mapping(raw: str, name: str) -> dict:
    value = json.loads(raw)
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a JSON object, got {type(value).__name__}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> DeliverySettings:
    """Build settings from ``environ`` (defaults to ``os.environ``)."""
    environ = os.environ if environ is None else environ

    values: dict = {}
    if "DELIVERY_ENV" in environ:
        values["env"] = environ["DELIVERY_ENV"].lower()
    if "DELIVERY_ACCEPTANCE_GATE" in environ:
        values["acceptance_gate"] = environ["DELIVERY_ACCEPTANCE_GATE"].lower()
    if "DELIVERY_ACCEPT_FAILURE_RATE" in environ:
        values["accept_failure_rate"] = environ["DELIVERY_ACCEPT_FAILURE_RATE"]
    if environ.get("DELIVERY_RANDOM_SEED"):
        values["random_seed"] = environ["DELIVERY_RANDOM_SEED"]
    if "DELIVERY_RESTAURANTS" in environ:
        values["restaurants"] = _json_mapping(environ["DELIVERY_RESTAURANTS"], "DELIVERY_RESTAURANTS")
    if "DELIVERY_COURIERS" in environ:
        values["couriers"] = _json_mapping(environ["DELIVERY_COURIERS"], "DELIVERY_COURIERS")

    return DeliverySettings(**values)
