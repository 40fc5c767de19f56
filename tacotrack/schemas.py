"""
Request payloads accepted by the API.

External clients send camelCase field names; the models below accept either
camelCase or snake_case and hand snake_case names to the data access layer.
"""
import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Category = Literal["protein", "dairy", "produce", "dry-goods", "beverage", "other"]
WasteReason = Literal["expired", "spoiled", "over-prep", "dropped", "other"]
Status = Literal["suggested", "pending", "confirmed", "shipped", "delivered", "cancelled"]


class CamelModel(BaseModel):
    """Base for payloads: camelCase aliases, snake_case attribute names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IngredientCreate(CamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: Category = "other"
    unit: str = "each"
    on_hand: float = Field(0.0, ge=0)
    par_level: float = Field(0.0, ge=0)
    reorder_point: float = Field(0.0, ge=0)
    cost_per_unit: float = Field(0.0, ge=0)
    vendor: Optional[str] = None
    storage_location: Optional[str] = None
    expiry_date: Optional[dt.date] = None
    last_delivery: Optional[dt.date] = None
    lead_time_days: int = Field(0, ge=0)


class IngredientUpdate(CamelModel):
    """Partial update; only fields present in the request are written."""
    id: str = Field(min_length=1)
    name: Optional[str] = None
    category: Optional[Category] = None
    unit: Optional[str] = None
    on_hand: Optional[float] = Field(None, ge=0)
    par_level: Optional[float] = Field(None, ge=0)
    reorder_point: Optional[float] = Field(None, ge=0)
    cost_per_unit: Optional[float] = Field(None, ge=0)
    vendor: Optional[str] = None
    storage_location: Optional[str] = None
    expiry_date: Optional[dt.date] = None
    last_delivery: Optional[dt.date] = None
    lead_time_days: Optional[int] = Field(None, ge=0)


class RecipeLineIn(CamelModel):
    ingredient_id: str
    qty: float = Field(gt=0)
    unit: Optional[str] = None


class RecipeCreate(CamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: Optional[str] = None
    sell_price: float = Field(0.0, ge=0)
    yield_percent: float = Field(100.0, gt=0, le=100)
    ingredients: List[RecipeLineIn] = []


class SaleCreate(CamelModel):
    recipe_id: str
    quantity: int = Field(1, ge=1)
    sale_timestamp: Optional[dt.datetime] = None


class WasteCreate(CamelModel):
    ingredient_id: str
    qty: float = Field(gt=0)
    reason: WasteReason = "other"
    date: Optional[dt.date] = None
    cost_lost: Optional[float] = Field(None, ge=0)  # Derived from unit cost when absent


class ForecastRequest(CamelModel):
    recipe_id: str
    forecast_days: int = Field(7, ge=1)


class OrderLineIn(CamelModel):
    ingredient_id: str
    qty: float = Field(gt=0)
    unit_cost: float = Field(0.0, ge=0)


class OrderCreate(CamelModel):
    vendor: str = Field(min_length=1)
    items: List[OrderLineIn] = Field(min_length=1)
    delivery_date: Optional[dt.date] = None
    status: Literal["suggested", "pending"] = "pending"


class OrderStatusUpdate(CamelModel):
    status: Status


class ChatRequest(CamelModel):
    message: str = Field(min_length=1)
