"""
Forecast Service

Recipe demand forecasts (LLM when configured, weekday baseline otherwise) and
per-ingredient stockout forecasts. Both are upserted: re-running for the same
key replaces the earlier row.
"""
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from tacotrack.config import get_settings
from tacotrack.domain import ForecastRecord, Ingredient, Urgency
from tacotrack.exceptions import NotFoundError
from tacotrack.models.forecast import Forecast, InventoryForecast
from tacotrack.models.menu import SalesEvent
from tacotrack.services.data_access import DataAccessService, commit_or_rollback, forecast_from_row
from tacotrack.services.ingredient_metrics import (
    avg_daily_usage,
    days_of_stock,
    order_by_date,
    suggested_order_qty,
    urgency_level,
)
from tacotrack.services.llm_service import LLMService
from tacotrack.services.time_window import DAY_ABBREVIATIONS, cap_window
from tacotrack.utils.helpers import round_half_up, safe_divide
from tacotrack.utils.logger import log

settings = get_settings()


def weekday_patterns(history: List[Dict]) -> List[Dict]:
    """Average units per weekday (Monday first) over days that had sales."""
    by_weekday: Dict[int, List[float]] = defaultdict(list)
    for day in history:
        by_weekday[day["date"].weekday()].append(day["quantity"])
    return [
        {
            "day": DAY_ABBREVIATIONS[i],
            "avgSales": round_half_up(safe_divide(sum(by_weekday[i]), len(by_weekday[i])), 1),
            "samples": len(by_weekday[i]),
        }
        for i in range(7)
        if by_weekday[i]
    ]


def confidence_for(samples: int) -> str:
    if samples >= 4:
        return "high"
    if samples >= 2:
        return "medium"
    return "low"


def baseline_forecast(history: List[Dict], start_date: date, forecast_days: int) -> List[Dict]:
    """
    Weekday-average forecast.

    Each day gets the mean of past sales on the same weekday, or the overall
    mean when that weekday has no samples.
    """
    by_weekday: Dict[int, List[float]] = defaultdict(list)
    for day in history:
        by_weekday[day["date"].weekday()].append(day["quantity"])
    overall = safe_divide(sum(d["quantity"] for d in history), len(history))

    forecast = []
    for offset in range(forecast_days):
        target = start_date + timedelta(days=offset)
        samples = by_weekday.get(target.weekday(), [])
        mean = safe_divide(sum(samples), len(samples)) if samples else overall
        forecast.append({
            "date": target,
            "predicted_quantity": round_half_up(mean, 0),
            "confidence": confidence_for(len(samples)),
        })
    return forecast


def inventory_forecast_to_dict(row: InventoryForecast) -> Dict:
    return {
        "id": row.id,
        "ingredientId": row.ingredient_id,
        "ingredientName": row.ingredient_name,
        "unit": row.unit,
        "currentStock": row.current_stock,
        "dailyUsage": row.daily_usage,
        "daysUntilStockout": row.days_until_stockout,
        "suggestedOrderQty": row.suggested_order_qty,
        "orderByDate": row.order_by_date.isoformat() if row.order_by_date else None,
        "urgencyLevel": row.urgency_level,
        "forecastDate": row.forecast_date.isoformat(),
        "createdAt": row.created_at.isoformat() if row.created_at else None,
    }


class ForecastService:
    def __init__(self, db: Session, llm: Optional[LLMService] = None):
        self.db = db
        self.llm = llm

    # ─────────────────────────────────────────────
    # RECIPE DEMAND
    # ─────────────────────────────────────────────

    def sales_history(self, recipe_id: str, now: Optional[datetime] = None) -> List[Dict]:
        """Units sold per calendar day over the history window, oldest first. Days without sales are omitted."""
        now = now or datetime.utcnow()
        since = now - timedelta(days=settings.forecast_history_days)
        events = (
            self.db.query(SalesEvent.sale_timestamp, SalesEvent.quantity)
            .filter(SalesEvent.recipe_id == recipe_id, SalesEvent.sale_timestamp >= since)
            .order_by(SalesEvent.sale_timestamp.asc())
            .all()
        )
        totals: Dict[date, float] = defaultdict(float)
        for event in events:
            totals[event.sale_timestamp.date()] += abs(event.quantity or 0)
        return [{"date": day, "quantity": qty} for day, qty in sorted(totals.items())]

    def generate_recipe_forecast(
        self,
        recipe_id: str,
        forecast_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Dict:
        """Forecast daily demand for a recipe starting tomorrow and store it."""
        if not DataAccessService(self.db).recipe_exists(recipe_id):
            raise NotFoundError(f"Recipe '{recipe_id}' not found")

        today = today or date.today()
        days = cap_window(forecast_days or settings.forecast_default_days)
        start = today + timedelta(days=1)

        history = self.sales_history(recipe_id)
        patterns = weekday_patterns(history)

        forecast = None
        model_type = "weekday_average"
        if self.llm is not None and self.llm.is_available() and history:
            forecast = self.llm.forecast_sales(history, patterns, start, days)
            if forecast:
                forecast = forecast[:days]
                model_type = "llm"
        if not forecast:
            forecast = baseline_forecast(history, start, days)

        self.upsert_forecasts(recipe_id, forecast, model_type)
        log.info(f"Forecast {recipe_id}: {len(forecast)} days via {model_type} ({len(history)} history days)")

        return {
            "recipeId": recipe_id,
            "forecast": [
                {
                    "date": item["date"].isoformat(),
                    "predictedQuantity": item["predicted_quantity"],
                    "confidence": item["confidence"],
                }
                for item in forecast
            ],
            "metadata": {
                "historicalDataPoints": len(history),
                "weekdayPatterns": patterns,
                "model": model_type,
                "generatedAt": datetime.utcnow().isoformat(),
            },
        }

    def upsert_forecasts(self, recipe_id: str, forecast: List[Dict], model_type: str) -> int:
        """Insert or replace one row per (recipe_id, target_date)."""
        now = datetime.utcnow()
        latest = {item["date"]: item for item in forecast}  # repeated dates: last one wins
        for item in latest.values():
            existing = self.db.query(Forecast).filter(
                Forecast.recipe_id == recipe_id,
                Forecast.target_date == item["date"],
            ).first()
            if existing:
                existing.predicted_quantity = item["predicted_quantity"]
                existing.confidence = item["confidence"]
                existing.model_type = model_type
                existing.created_at = now
            else:
                self.db.add(Forecast(
                    recipe_id=recipe_id,
                    target_date=item["date"],
                    predicted_quantity=item["predicted_quantity"],
                    confidence=item["confidence"],
                    model_type=model_type,
                    created_at=now,
                ))
        commit_or_rollback(self.db, "save forecast")
        return len(forecast)

    def get_forecasts(self, recipe_id: Optional[str] = None) -> List[ForecastRecord]:
        query = self.db.query(Forecast)
        if recipe_id:
            query = query.filter(Forecast.recipe_id == recipe_id)
        rows = query.order_by(Forecast.target_date.asc(), Forecast.recipe_id.asc()).all()
        return [forecast_from_row(row) for row in rows]

    def recent_forecasts(self, limit: Optional[int] = None) -> List[ForecastRecord]:
        rows = (
            self.db.query(Forecast)
            .order_by(Forecast.created_at.desc())
            .limit(limit or settings.forecast_recent_limit)
            .all()
        )
        return [forecast_from_row(row) for row in rows]

    # ─────────────────────────────────────────────
    # INGREDIENT STOCKOUT
    # ─────────────────────────────────────────────

    def generate_inventory_forecasts(
        self,
        ingredients: Optional[Sequence[Ingredient]] = None,
        today: Optional[date] = None,
    ) -> Dict:
        """Store one stockout projection per ingredient for today and count them by urgency."""
        today = today or date.today()
        if ingredients is None:
            ingredients = DataAccessService(self.db).fetch_ingredients()

        counts = {urgency.value: 0 for urgency in Urgency}
        now = datetime.utcnow()
        for ing in ingredients:
            urgency = urgency_level(ing)
            counts[urgency.value] += 1
            values = {
                "ingredient_id": ing.id,
                "ingredient_name": ing.name,
                "unit": ing.unit,
                "current_stock": ing.on_hand,
                "daily_usage": round_half_up(avg_daily_usage(ing.daily_usage), 2),
                "days_until_stockout": round_half_up(days_of_stock(ing), 1),
                "suggested_order_qty": suggested_order_qty(ing),
                "order_by_date": order_by_date(ing, today),
                "urgency_level": urgency.value,
                "forecast_date": today,
                "created_at": now,
            }
            forecast_id = f"{ing.id}-{today.isoformat()}"
            row = self.db.query(InventoryForecast).filter(InventoryForecast.id == forecast_id).first()
            if row:
                for column, value in values.items():
                    setattr(row, column, value)
            else:
                self.db.add(InventoryForecast(id=forecast_id, **values))
        commit_or_rollback(self.db, "save inventory forecast")

        log.info(f"Inventory forecast {today}: {len(ingredients)} ingredients, {counts}")
        return {
            "forecastDate": today.isoformat(),
            "forecastsGenerated": len(ingredients),
            "criticalCount": counts[Urgency.CRITICAL.value],
            "warningCount": counts[Urgency.WARNING.value],
            "okCount": counts[Urgency.OK.value],
        }

    def get_inventory_forecasts(
        self,
        forecast_date: Optional[date] = None,
        urgency: Optional[str] = None,
    ) -> List[Dict]:
        forecast_date = forecast_date or date.today()
        query = self.db.query(InventoryForecast).filter(InventoryForecast.forecast_date == forecast_date)
        if urgency:
            query = query.filter(InventoryForecast.urgency_level == urgency)
        rows = query.order_by(InventoryForecast.days_until_stockout.asc()).all()
        return [inventory_forecast_to_dict(row) for row in rows]
