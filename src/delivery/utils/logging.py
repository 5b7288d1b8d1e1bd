"""Logging configuration for the delivery domain.

Builds on protean's structured logging setup and adds the delivery context
each log line carries: the service name, and a readable label next to any
order status. Library code only asks structlog for loggers; ``configure_logging``
is called by entry points such as the scenario runner.
"""

import os
from typing import Any

import structlog
from protean.utils.logging import configure_logging as configure_protean_logging

from delivery.order.order import OrderStatus

SERVICE_NAME = "delivery"

_ENV_LOG_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_JSON_ENVIRONMENTS = {"production", "staging"}

# Framework loggers that are only interesting when something breaks
_QUIET_LOGGERS = {"protean": "WARNING"}


def _resolve_env(env: str | None) -> str:
    return (env or os.getenv("DELIVERY_ENV") or "development").lower()


def get_log_level(env: str | None = None) -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the environment."""
    return os.getenv("LOG_LEVEL", _ENV_LOG_LEVELS.get(_resolve_env(env), "INFO")).upper()


def add_service_name(logger, method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def add_status_label(logger, method_name, event_dict):
    """Spell out order statuses for whoever reads the log."""
    try:
        status = OrderStatus(event_dict.get("status"))
    except ValueError:
        return event_dict
    event_dict["status_label"] = status.label
    return event_dict


def configure_logging(env: str | None = None, log_dir: str | None = None) -> None:
    """Configure stdlib and structlog logging for a delivery process.

    Console output renders with rich tracebacks in development and as JSON
    in production and staging. Rotating ``delivery.log`` and
    ``delivery_error.log`` files are written only when a log directory is
    given (argument or ``LOG_DIR``).
    """
    env = _resolve_env(env)
    configure_protean_logging(
        level=get_log_level(env),
        format="json" if env in _JSON_ENVIRONMENTS else "console",
        log_dir=log_dir or os.getenv("LOG_DIR"),
        log_file_prefix=SERVICE_NAME,
        extra_processors=[add_service_name, add_status_label],
        per_logger=_QUIET_LOGGERS,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Bind values that every following log line of this context carries."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
