import pytest
from delivery.domain import build_domain


@pytest.fixture(scope="session")
def delivery_domain():
    return build_domain()


@pytest.fixture(autouse=True)
def _ctx(delivery_domain):
    with delivery_domain.domain_context():
        yield
