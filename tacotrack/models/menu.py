"""
Menu models
Recipes, their ingredient lines, and individual sales events
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from tacotrack.models.base import Base


class Recipe(Base):
    """A menu item"""
    __tablename__ = "recipes"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)

    sell_price = Column(Float, default=0.0)
    yield_percent = Column(Float, default=100.0)  # After trim / shrink

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    lines = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.id",
    )


class RecipeIngredient(Base):
    """Quantity of one ingredient used per unit of a recipe"""
    __tablename__ = "recipe_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(String, ForeignKey("recipes.id"), index=True, nullable=False)
    # No FK: a line may point at an ingredient that was removed
    ingredient_id = Column(String, index=True, nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=True)  # Defaults to the ingredient's unit

    recipe = relationship("Recipe", back_populates="lines")


class SalesEvent(Base):
    """One sale of a recipe (POS line)"""
    __tablename__ = "sales_events"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(String, ForeignKey("recipes.id"), index=True, nullable=False)
    quantity = Column(Integer, default=1)
    sale_timestamp = Column(DateTime, default=datetime.utcnow, index=True)
    day_of_week = Column(Integer, nullable=True)  # 0 = Monday
