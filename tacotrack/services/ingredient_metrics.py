"""
Per-ingredient metrics

Stock runway, urgency, reorder quantity and chart series for a single
ingredient. All functions are pure and never raise on numeric edge cases:
zero usage yields the "stock is fine" sentinel, empty histories yield zeros.
"""
import math
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from tacotrack.config import get_settings
from tacotrack.domain import Ingredient, Urgency
from tacotrack.services.time_window import day_labels, days_ago
from tacotrack.utils.helpers import round_half_up, safe_divide

settings = get_settings()

BURNDOWN_LABELS = ["Today", "Day 2", "Day 3", "Day 4", "Day 5", "Day 6", "Day 7"]


def avg_daily_usage(usage: Sequence[float], window: Optional[int] = None) -> float:
    """Mean of the most recent ``window`` days of usage (0.0 when empty)."""
    window = window or settings.trailing_window_days
    recent = list(usage)[-window:]
    if not recent:
        return 0.0
    return sum(recent) / len(recent)


def days_of_stock(ingredient: Ingredient, window: Optional[int] = None) -> float:
    """On-hand quantity divided by trailing average usage.

    Returns the finite sentinel (999 by default) when there is no usage, so
    callers never see a division by zero, NaN or infinity.
    """
    avg = avg_daily_usage(ingredient.daily_usage, window)
    if avg <= 0:
        return settings.days_of_stock_sentinel
    return safe_divide(ingredient.on_hand, avg, settings.days_of_stock_sentinel)


def is_sentinel(days: float) -> bool:
    return days >= settings.days_of_stock_sentinel


def classify_urgency(days: float) -> Urgency:
    """critical (<= 2 days), warning (<= 4 days), ok otherwise. Boundaries go to the more urgent tier."""
    if days <= settings.critical_days_threshold:
        return Urgency.CRITICAL
    if days <= settings.warning_days_threshold:
        return Urgency.WARNING
    return Urgency.OK


def urgency_level(ingredient: Ingredient) -> Urgency:
    return classify_urgency(days_of_stock(ingredient))


def suggested_order_qty(ingredient: Ingredient, include_lead_time: Optional[bool] = None) -> float:
    """Quantity needed to get back to par level.

    With lead time included, the usage expected while the order is in transit
    is added on top so stock does not run out before the delivery lands.
    Rounded up to whole units.
    """
    if include_lead_time is None:
        include_lead_time = settings.include_lead_time_in_orders
    needed = ingredient.par_level - ingredient.on_hand
    if include_lead_time:
        needed += avg_daily_usage(ingredient.daily_usage) * max(0, ingredient.lead_time_days)
    if needed <= 0:
        return 0
    # 75.00000000001 ceils to 75, not 76
    return math.ceil(round(needed, 6))


def stockout_date(ingredient: Ingredient, today: Optional[date] = None) -> Optional[date]:
    """Date stock runs out at the current usage rate. None when there is no usage."""
    days = days_of_stock(ingredient)
    if is_sentinel(days):
        return None
    today = today or date.today()
    return today + timedelta(days=math.floor(days))


def order_by_date(ingredient: Ingredient, today: Optional[date] = None) -> Optional[date]:
    """Last day to place an order that arrives before the stockout."""
    today = today or date.today()
    runs_out = stockout_date(ingredient, today)
    if runs_out is None:
        return None
    return max(today, runs_out - timedelta(days=max(0, ingredient.lead_time_days)))


def burndown_data(ingredient: Ingredient) -> List[Dict]:
    """Seven-day projection of on-hand stock under constant usage, floored at zero."""
    avg = avg_daily_usage(ingredient.daily_usage)
    stock = ingredient.on_hand
    points = []
    for label in BURNDOWN_LABELS:
        points.append({"day": label, "stock": max(0.0, round_half_up(stock, 1))})
        stock -= avg
    return points


def weekly_usage_data(ingredient: Ingredient, today: Optional[date] = None) -> List[Dict]:
    """Last seven days of usage, each labelled with its weekday (last entry is today)."""
    today = today or date.today()
    recent = list(ingredient.daily_usage)[-7:]
    labels = day_labels(len(recent), today)
    return [{"day": label, "usage": usage} for label, usage in zip(labels, recent)]


def days_until_expiry(ingredient: Ingredient, now: Optional[datetime] = None) -> Optional[int]:
    """Ceiling of days until the expiry date.

    Negative once expired; callers treat negative values as "expired".
    None when the ingredient has no expiry date.
    """
    if ingredient.expiry_date is None:
        return None
    now = now or datetime.utcnow()
    expires = datetime(ingredient.expiry_date.year, ingredient.expiry_date.month, ingredient.expiry_date.day)
    seconds = (expires - now).total_seconds()
    return math.ceil(seconds / 86400)


def ingredient_metrics(ingredient: Ingredient, now: Optional[datetime] = None) -> Dict:
    """All per-ingredient numbers in one dict, for API responses."""
    now = now or datetime.utcnow()
    days = days_of_stock(ingredient)
    runs_out = stockout_date(ingredient, now.date())
    order_by = order_by_date(ingredient, now.date())
    return {
        "avgDailyUsage": round_half_up(avg_daily_usage(ingredient.daily_usage), 2),
        "daysOfStock": round_half_up(days, 1),
        "urgency": urgency_level(ingredient).value,
        "suggestedOrderQty": suggested_order_qty(ingredient),
        "stockoutDate": runs_out.isoformat() if runs_out else None,
        "orderByDate": order_by.isoformat() if order_by else None,
        "daysUntilExpiry": days_until_expiry(ingredient, now),
        "daysSinceDelivery": days_since_delivery(ingredient, now.date()),
    }


def days_since_delivery(ingredient: Ingredient, today: Optional[date] = None) -> Optional[int]:
    if ingredient.last_delivery is None:
        return None
    return days_ago(ingredient.last_delivery, today or date.today())
