"""
Forecast models

Recipe demand forecasts and per-ingredient stockout forecasts. Both are
upserted: a newer run replaces the row for the same key, no history is kept.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, Date, UniqueConstraint
from datetime import datetime

from tacotrack.models.base import Base


class Forecast(Base):
    """Predicted units sold for one recipe on one day"""
    __tablename__ = "forecasts"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(String, index=True, nullable=False)
    target_date = Column(Date, index=True, nullable=False)

    predicted_quantity = Column(Float, nullable=False)
    confidence = Column(String, default="low")  # high, medium, low
    model_type = Column(String, nullable=True)  # llm, weekday_average

    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    __table_args__ = (
        UniqueConstraint('recipe_id', 'target_date', name='uq_forecast_recipe_date'),
    )


class InventoryForecast(Base):
    """Stockout projection for one ingredient, keyed '<ingredient_id>-<forecast_date>'"""
    __tablename__ = "inventory_forecasts"

    id = Column(String, primary_key=True, index=True)
    ingredient_id = Column(String, index=True, nullable=False)
    ingredient_name = Column(String)
    unit = Column(String)

    current_stock = Column(Float, default=0.0)
    daily_usage = Column(Float, default=0.0)  # Trailing average
    days_until_stockout = Column(Float, index=True)
    suggested_order_qty = Column(Float, default=0.0)
    order_by_date = Column(Date, nullable=True)
    urgency_level = Column(String, index=True)  # critical, warning, ok

    forecast_date = Column(Date, index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
