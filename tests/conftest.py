import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Selects the configuration environment so that anything reading
    ``DELIVERY_ENV`` or ``PROTEAN_ENV`` (log levels, settings, domain config)
    sees the test profile. Every registry builds its own domain, so logging
    is left to pytest instead of being configured on each domain init.
    """
    os.environ["DELIVERY_ENV"] = session.config.option.env
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ["PROTEAN_NO_AUTO_LOGGING"] = "1"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
