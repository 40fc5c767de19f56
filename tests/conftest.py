"""
Shared fixtures.

Settings are read once (lru_cache), so the environment is fixed in
pytest_configure before any tacotrack module is imported: an in-memory
database, no LLM key, logs in a temp directory.
"""
import os
import tempfile
from datetime import date, datetime

import pytest


def pytest_configure(config):
    os.environ["DATABASE_URL"] = "sqlite://"
    os.environ["ANTHROPIC_API_KEY"] = ""
    os.environ["ENABLE_LLM_INSIGHTS"] = "false"
    os.environ["STRICT_INGREDIENT_REFERENCES"] = "false"
    os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="tacotrack-logs-")
    os.environ["LOG_LEVEL"] = "WARNING"


# ────────────────────────────────────────────
# ENTITY FACTORIES
# ────────────────────────────────────────────


NOW = datetime(2026, 3, 10, 12, 0)  # a Tuesday
TODAY = NOW.date()


def make_ingredient(**overrides):
    from tacotrack.domain import Ingredient

    values = dict(
        id="beef",
        name="Seasoned Beef",
        category="protein",
        unit="lb",
        on_hand=40.0,
        par_level=100.0,
        reorder_point=50.0,
        cost_per_unit=3.5,
        vendor="Sherwood Meats",
        lead_time_days=2,
        daily_usage=[10.0] * 14,
    )
    values.update(overrides)
    return Ingredient(**values)


def make_recipe(**overrides):
    from tacotrack.domain import Recipe, RecipeLine

    values = dict(
        id="burrito",
        name="Burrito",
        category="Burritos",
        sell_price=10.0,
        ingredients=(RecipeLine("beef", 0.25),),
        daily_sales=[10.0] * 14,
    )
    values.update(overrides)
    return Recipe(**values)


def make_waste(**overrides):
    from tacotrack.domain import WasteEntry

    values = dict(
        id="w1",
        ingredient_id="beef",
        qty=2.0,
        reason="expired",
        date=TODAY,
        cost_lost=7.0,
    )
    values.update(overrides)
    return WasteEntry(**values)


@pytest.fixture
def ingredient_factory():
    return make_ingredient


@pytest.fixture
def recipe_factory():
    return make_recipe


@pytest.fixture
def waste_factory():
    return make_waste


# ────────────────────────────────────────────
# DATABASE / API
# ────────────────────────────────────────────


@pytest.fixture
def db_session():
    """Fresh schema on the shared in-memory engine for every test."""
    from tacotrack.models.base import Base, SessionLocal, engine, init_db

    Base.metadata.drop_all(bind=engine)
    init_db(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


class OfflineLLM:
    """Stands in for LLMService with canned answers; never touches the network."""

    def __init__(self, available=False, forecast=None, answer="Order more beef."):
        self.available = available
        self.forecast = forecast
        self.answer = answer
        self.calls = []

    def is_available(self):
        return self.available

    def forecast_sales(self, daily_sales, weekday_patterns, start_date, forecast_days):
        self.calls.append(("forecast", start_date, forecast_days))
        return self.forecast

    def chat_about_inventory(self, message, ingredients, recipes, today=None):
        self.calls.append(("chat", message))
        return self.answer


@pytest.fixture
def offline_llm():
    return OfflineLLM()


@pytest.fixture
def client(db_session, offline_llm):
    from fastapi.testclient import TestClient

    from tacotrack.api.deps import get_llm_service
    from tacotrack.main import app
    from tacotrack.utils.cache import DataCache

    app.state.data_cache = DataCache(ttl=300)
    app.dependency_overrides[get_llm_service] = lambda: offline_llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
