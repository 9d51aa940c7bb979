import pytest
from fastapi.testclient import TestClient

from selection_portal.main import create_app
from selection_portal.models import RegistryConfig
from selection_portal.state import SelectionRegistry


@pytest.fixture()
def registry():
    return SelectionRegistry(RegistryConfig(capacity=20, few_slots_at=15))


@pytest.fixture()
def portal_app():
    return create_app(RegistryConfig(capacity=20, few_slots_at=15))


@pytest.fixture()
def client(portal_app):
    return TestClient(portal_app)


def fill(registry, option_id, n, prefix=None):
    """Record n selections of option_id by distinct participants."""
    prefix = prefix or option_id
    for i in range(n):
        registry.begin_session(f"{prefix}-user{i}")
        registry.select_option(option_id)
