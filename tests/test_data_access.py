"""
Tests for the row/JSON boundary, failed commits, and the forecast lookup
used by the insights endpoints.
"""
import asyncio
import time
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from conftest import make_ingredient, make_waste
from tacotrack.api import deps
from tacotrack.domain import OrderStatus
from tacotrack.exceptions import DataStoreError
from tacotrack.models import Recipe
from tacotrack.schemas import IngredientCreate, WasteCreate
from tacotrack.services.data_access import DataAccessService, to_json
from tacotrack.services.forecast_service import ForecastService
from tacotrack.services.order_service import OrderService

ITEMS = [{"ingredient_id": "beef", "qty": 10, "unit_cost": 3.49}]


# ────────────────────────────────────────────
# CAMELCASE BOUNDARY
# ────────────────────────────────────────────


class TestJsonBoundary:
    def test_entity_keys_are_camel_case(self):
        body = to_json(make_waste())
        assert set(body) == {"id", "ingredientId", "qty", "reason", "date", "costLost"}
        assert body["date"] == "2026-03-10"

    def test_nested_entities(self):
        body = to_json(make_ingredient(expiry_date=date(2026, 3, 12)))
        assert body["costPerUnit"] == 3.5
        assert body["leadTimeDays"] == 2
        assert body["expiryDate"] == "2026-03-12"
        assert len(body["dailyUsage"]) == 14

    def test_payloads_accept_both_spellings(self):
        camel = WasteCreate.model_validate({"ingredientId": "beef", "qty": 1, "costLost": 2.0})
        snake = WasteCreate.model_validate({"ingredient_id": "beef", "qty": 1, "cost_lost": 2.0})
        assert camel == snake
        assert IngredientCreate.model_validate({"id": "beef", "name": "Beef", "onHand": 4}).on_hand == 4


# ────────────────────────────────────────────
# FAILED COMMITS
# ────────────────────────────────────────────


def break_commit(monkeypatch, session):
    """Make the next commits fail; returns the list of rollbacks seen."""
    rollbacks = []
    real_rollback = session.rollback

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    def recording_rollback():
        rollbacks.append(True)
        real_rollback()

    monkeypatch.setattr(session, "commit", failing_commit)
    monkeypatch.setattr(session, "rollback", recording_rollback)
    return rollbacks


class TestFailedCommits:
    def test_order_create_rolls_back(self, db_session, monkeypatch):
        rollbacks = break_commit(monkeypatch, db_session)
        with pytest.raises(DataStoreError) as exc:
            OrderService(db_session).create_order("Sherwood Meats", ITEMS)
        assert exc.value.message == "Failed to create order"
        assert exc.value.status_code == 500
        assert rollbacks

        monkeypatch.undo()
        OrderService(db_session).create_order("Sherwood Meats", ITEMS)
        assert len(OrderService(db_session).list_orders()) == 1

    def test_order_status_change_rolls_back(self, db_session, monkeypatch):
        order = OrderService(db_session).create_order("Sherwood Meats", ITEMS)
        rollbacks = break_commit(monkeypatch, db_session)
        with pytest.raises(DataStoreError):
            OrderService(db_session).update_status(order.id, OrderStatus.CONFIRMED)
        assert rollbacks

        monkeypatch.undo()
        assert OrderService(db_session).list_orders()[0].status is OrderStatus.PENDING

    def test_recipe_forecast_rolls_back(self, db_session, monkeypatch):
        db_session.add(Recipe(id="burrito", name="Burrito", sell_price=9.0))
        db_session.commit()
        rollbacks = break_commit(monkeypatch, db_session)
        with pytest.raises(DataStoreError):
            ForecastService(db_session).generate_recipe_forecast("burrito", 2)
        assert rollbacks

    def test_inventory_forecast_rolls_back(self, db_session, monkeypatch):
        rollbacks = break_commit(monkeypatch, db_session)
        with pytest.raises(DataStoreError):
            ForecastService(db_session).generate_inventory_forecasts([make_ingredient()])
        assert rollbacks

        monkeypatch.undo()
        assert ForecastService(db_session).get_inventory_forecasts() == []

    def test_waste_write_rolls_back(self, db_session, monkeypatch):
        data = DataAccessService(db_session)
        data.create_ingredient(IngredientCreate(id="beef", name="Beef", cost_per_unit=3.5))
        rollbacks = break_commit(monkeypatch, db_session)
        with pytest.raises(DataStoreError):
            data.create_waste_entry(WasteCreate(ingredient_id="beef", qty=1))
        assert rollbacks


# ────────────────────────────────────────────
# RECENT FORECAST LOOKUP
# ────────────────────────────────────────────


class TestRecentForecastLookup:
    def test_reads_with_its_own_session(self, db_session, monkeypatch):
        db_session.add(Recipe(id="burrito", name="Burrito", sell_price=9.0))
        db_session.commit()
        ForecastService(db_session).generate_recipe_forecast("burrito", 2)

        sessions = []
        real_recent = ForecastService.recent_forecasts

        def recording_recent(self, limit=None):
            sessions.append(self.db)
            return real_recent(self, limit)

        monkeypatch.setattr(ForecastService, "recent_forecasts", recording_recent)
        records = asyncio.run(deps.fetch_recent_forecasts())

        assert len(records) == 2
        assert sessions and sessions[0] is not db_session

    def test_timeout_returns_empty(self, db_session, monkeypatch):
        monkeypatch.setattr(deps.settings, "forecast_fetch_timeout_seconds", 0.05)

        def slow_recent(self, limit=None):
            time.sleep(0.3)
            return []

        monkeypatch.setattr(ForecastService, "recent_forecasts", slow_recent)
        assert asyncio.run(deps.fetch_recent_forecasts()) == []

    def test_failure_returns_empty(self, db_session, monkeypatch):
        def broken_recent(self, limit=None):
            raise OperationalError("SELECT", {}, Exception("no such table"))

        monkeypatch.setattr(ForecastService, "recent_forecasts", broken_recent)
        assert asyncio.run(deps.fetch_recent_forecasts()) == []
