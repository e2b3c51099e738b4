"""
Shared fixtures for the allocation service tests.
"""
import pytest

from packalloc.core.config import Settings
from packalloc.services.allocation_engine import AllocationEngine

SIZES = ["XXS", "XS", "S", "M", "L", "XL"]
LOCATIONS = ["Bogota", "Cedarhurst", "Toms River", "Teaneck Store", "Office", "Warehouse"]


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def engine(settings):
    return AllocationEngine.from_settings(settings)


@pytest.fixture
def standard_buy():
    """100 units, no XXS: exactly ten 10-unit packs."""
    return {"XS": 30, "S": 30, "M": 20, "L": 10, "XL": 10}


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as c:
        yield c
