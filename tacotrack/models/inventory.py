"""
Inventory models
Ingredients on hand, their stock movements, and logged waste
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, Date, ForeignKey
from datetime import datetime

from tacotrack.models.base import Base


class Ingredient(Base):
    """Ingredient master data and current stock level"""
    __tablename__ = "ingredients"

    id = Column(String, primary_key=True, index=True)  # Slug, e.g. "seasoned-beef"
    name = Column(String, nullable=False)
    category = Column(String, default="other", index=True)  # protein, dairy, produce, dry-goods, beverage, other
    unit = Column(String, default="each")

    # Stock
    on_hand = Column(Float, default=0.0)
    par_level = Column(Float, default=0.0)
    reorder_point = Column(Float, default=0.0)

    # Purchasing
    cost_per_unit = Column(Float, default=0.0)
    vendor = Column(String, nullable=True, index=True)
    lead_time_days = Column(Integer, default=0)

    # Storage
    storage_location = Column(String, nullable=True)
    expiry_date = Column(Date, nullable=True)
    last_delivery = Column(Date, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class InventoryTransaction(Base):
    """
    Stock movement for an ingredient.
    Usage rows feed the 14-day usage history; quantities may be stored negative.
    """
    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True, index=True)
    ingredient_id = Column(String, ForeignKey("ingredients.id"), index=True, nullable=False)
    transaction_type = Column(String, default="usage", index=True)  # usage, delivery, adjustment
    quantity = Column(Float, nullable=False)
    transaction_timestamp = Column(DateTime, default=datetime.utcnow, index=True)


class WasteEntry(Base):
    """Logged waste with the cost lost at time of waste"""
    __tablename__ = "waste_entries"

    id = Column(String, primary_key=True, index=True)
    # No FK: entries outlive deleted ingredients and are bucketed as "other"
    ingredient_id = Column(String, index=True, nullable=False)
    qty = Column(Float, nullable=False)
    reason = Column(String, default="other")  # expired, spoiled, over-prep, dropped, other
    date = Column(Date, index=True)
    cost_lost = Column(Float, default=0.0)  # qty * cost_per_unit at time of waste

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
