"""Typed, immutable entities the analytics core works on.

Rows from the database are mapped into these by
``tacotrack.services.data_access``; nothing else constructs them from raw
dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Sequence, Tuple

HISTORY_DAYS = 14

INGREDIENT_CATEGORIES = ("protein", "dairy", "produce", "dry-goods", "beverage", "other")
WASTE_REASONS = ("expired", "spoiled", "over-prep", "dropped", "other")
CONFIDENCE_TIERS = ("high", "medium", "low")


def fit_history(values: Optional[Sequence[float]], length: int = HISTORY_DAYS) -> Tuple[float, ...]:
    """Return exactly ``length`` entries, oldest first.

    Short sequences are left-padded with zeros (missing days are the oldest
    ones); long sequences keep their most recent ``length`` entries.
    """
    cleaned = [float(v or 0) for v in (values or [])]
    if len(cleaned) >= length:
        return tuple(cleaned[-length:])
    return tuple([0.0] * (length - len(cleaned)) + cleaned)


class Urgency(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    OK = "ok"


class OrderStatus(str, Enum):
    SUGGESTED = "suggested"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    def can_transition_to(self, target: "OrderStatus") -> bool:
        if self.is_terminal:
            return False
        if target is OrderStatus.CANCELLED:
            return True
        return target in _FORWARD_TRANSITIONS.get(self, frozenset())


_FORWARD_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.SUGGESTED: frozenset({OrderStatus.PENDING}),
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
}


@dataclass(frozen=True)
class Ingredient:
    """An inventory item with its trailing 14-day usage history."""

    id: str
    name: str
    category: str = "other"
    unit: str = "each"
    on_hand: float = 0.0
    par_level: float = 0.0
    reorder_point: float = 0.0
    cost_per_unit: float = 0.0
    vendor: str = ""
    storage_location: str = ""
    expiry_date: Optional[date] = None
    last_delivery: Optional[date] = None
    lead_time_days: int = 0
    daily_usage: Tuple[float, ...] = field(default_factory=fit_history)

    def __post_init__(self):
        object.__setattr__(self, "on_hand", max(0.0, float(self.on_hand or 0)))
        object.__setattr__(self, "daily_usage", fit_history(self.daily_usage))


@dataclass(frozen=True)
class RecipeLine:
    ingredient_id: str
    qty: float
    unit: Optional[str] = None


@dataclass(frozen=True)
class Recipe:
    """A menu item, its ingredient lines and its trailing 14-day sales."""

    id: str
    name: str
    category: str = ""
    sell_price: float = 0.0
    yield_percent: float = 100.0
    ingredients: Tuple[RecipeLine, ...] = ()
    daily_sales: Tuple[float, ...] = field(default_factory=fit_history)

    def __post_init__(self):
        object.__setattr__(self, "ingredients", tuple(self.ingredients))
        object.__setattr__(self, "daily_sales", fit_history(self.daily_sales))


@dataclass(frozen=True)
class WasteEntry:
    id: str
    ingredient_id: str
    qty: float
    reason: str
    date: date
    cost_lost: float


@dataclass(frozen=True)
class OrderLine:
    ingredient_id: str
    qty: float
    unit_cost: float

    @property
    def line_total(self) -> float:
        return self.qty * self.unit_cost


@dataclass(frozen=True)
class Order:
    id: str
    vendor: str
    items: Tuple[OrderLine, ...]
    status: OrderStatus
    delivery_date: Optional[date]
    total_cost: float


@dataclass(frozen=True)
class ForecastRecord:
    """Predicted demand for one recipe on one day. Keyed by (recipe_id, target_date)."""

    recipe_id: str
    target_date: date
    predicted_quantity: float
    confidence: str
    created_at: Optional[datetime] = None
