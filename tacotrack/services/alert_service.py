"""
Alert Service
Builds the low-stock and expiry alerts shown on the dashboard.
"""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from tacotrack.config import get_settings
from tacotrack.domain import Ingredient, Urgency
from tacotrack.services.ingredient_metrics import (
    days_of_stock,
    days_until_expiry,
    classify_urgency,
    suggested_order_qty,
)
from tacotrack.utils.helpers import format_currency, round_half_up

settings = get_settings()


@dataclass
class Alert:
    """One actionable alert for the dashboard."""
    id: str
    type: str  # low-stock, expiring
    severity: str  # critical, warning, info
    title: str
    description: str
    action: str
    ingredient_id: Optional[str] = None

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["ingredientId"] = data.pop("ingredient_id")
        return data


def _expiry_phrase(days: int) -> str:
    if days < 0:
        return "expired"
    if days == 0:
        return "expiring today"
    return f"expiring in {days} day{'s' if days > 1 else ''}"


def low_stock_alert(ingredient: Ingredient) -> Optional[Alert]:
    days = days_of_stock(ingredient)
    urgency = classify_urgency(days)
    if urgency is Urgency.OK:
        return None

    qty = suggested_order_qty(ingredient)
    cost = format_currency(qty * ingredient.cost_per_unit)
    days_text = round_half_up(days, 1)
    if urgency is Urgency.CRITICAL:
        return Alert(
            id=f"low-{ingredient.id}",
            type="low-stock",
            severity="critical",
            title=f"{ingredient.name} critically low",
            description=f"Only {ingredient.on_hand:g} {ingredient.unit} left, about {days_text} days of stock",
            action=f"Order {qty} {ingredient.unit} now ({cost})",
            ingredient_id=ingredient.id,
        )
    return Alert(
        id=f"low-{ingredient.id}",
        type="low-stock",
        severity="warning",
        title=f"{ingredient.name} running low",
        description=f"{ingredient.on_hand:g} {ingredient.unit} left, ~{days_text} days of stock",
        action=f"Order {qty} {ingredient.unit} by tomorrow ({cost})",
        ingredient_id=ingredient.id,
    )


def expiry_alert(ingredient: Ingredient, now: Optional[datetime] = None) -> Optional[Alert]:
    days = days_until_expiry(ingredient, now)
    if days is None or days > settings.expiry_alert_days:
        return None
    return Alert(
        id=f"exp-{ingredient.id}",
        type="expiring",
        severity="critical" if days <= 1 else "warning",
        title=f"{ingredient.name} {_expiry_phrase(days)}",
        description=f"{ingredient.on_hand:g} {ingredient.unit} at risk, use first or discount",
        action="Discard and log as waste" if days < 0 else "Prioritize in today's prep",
        ingredient_id=ingredient.id,
    )


def generate_alerts(ingredients: Sequence[Ingredient], now: Optional[datetime] = None) -> List[Alert]:
    """Low-stock then expiry alert for each ingredient, in ingredient order."""
    now = now or datetime.utcnow()
    alerts: List[Alert] = []
    for ingredient in ingredients:
        for alert in (low_stock_alert(ingredient), expiry_alert(ingredient, now)):
            if alert is not None:
                alerts.append(alert)
    return alerts
