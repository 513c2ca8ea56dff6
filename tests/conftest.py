import os

# Настройки окружения до импорта приложения
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_FORMAT"] = "text"
os.environ["PASS_CATALOG_PATH"] = ""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_today
from app.core.store import StudioStore
from app.studio.models import Membership, PassCatalog, PassDefinition, PassDuration
from app.studio.models.passes import DEFAULT_PASSES

TODAY = date(2024, 3, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def catalog():
    return PassCatalog.default()


@pytest.fixture
def store(catalog):
    return StudioStore(catalog)


@pytest.fixture
def thirty_day_store():
    """Store whose catalog also carries a plain 30-day pass"""
    passes = list(DEFAULT_PASSES) + [
        PassDefinition(id="thirty_days", name="30 days", price=100000, duration=PassDuration.days(30))
    ]
    return StudioStore(PassCatalog(passes))


@pytest.fixture
def make_membership():
    def factory(student_id="s1", start="2024-03-01", end="2024-03-31", **kwargs):
        fields = {
            "student_id": student_id,
            "pass_id": "monthly_3x",
            "start_date": date.fromisoformat(start),
            "end_date": date.fromisoformat(end),
            "payment_date": date.fromisoformat(start),
            "price": 170000,
        }
        fields.update(kwargs)
        return Membership(**fields)

    return factory


@pytest.fixture
def client(store, today):
    from app.main import app

    app.state.store = store
    app.dependency_overrides[get_today] = lambda: today
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.store = None
