"""
Unit conversion and time-window utilities.

Everything here is pure: no database, no settings.
"""
import math
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple, Union

from tacotrack.domain import HISTORY_DAYS

DAY_ABBREVIATIONS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

SECONDS_PER_DAY = 86400

# Factor to the base unit of each dimension (lb, fl oz, each)
_UNIT_FACTORS = {
    "mass": {"lb": 1.0, "lbs": 1.0, "oz": 1 / 16, "g": 1 / 453.59237, "kg": 1000 / 453.59237},
    "volume": {
        "fl oz": 1.0, "floz": 1.0, "cup": 8.0, "cups": 8.0, "pt": 16.0, "pint": 16.0,
        "qt": 32.0, "quart": 32.0, "gal": 128.0, "gallon": 128.0,
        "ml": 1 / 29.5735, "l": 1000 / 29.5735,
    },
    "count": {"each": 1.0, "ea": 1.0, "count": 1.0, "pcs": 1.0, "heads": 1.0, "dozen": 12.0},
}


def _to_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def cap_window(days: Optional[int], maximum: int = HISTORY_DAYS) -> int:
    """Clamp a requested window length into [1, maximum]."""
    if days is None:
        return maximum
    return max(1, min(int(days), maximum))


def days_ago(timestamp: Union[date, datetime], now: Union[date, datetime]) -> int:
    """Whole days between an event and now (floor). Future events are negative."""
    delta = _to_datetime(now) - _to_datetime(timestamp)
    return math.floor(delta.total_seconds() / SECONDS_PER_DAY)


def calendar_days_between(timestamp: Union[date, datetime], now: Union[date, datetime]) -> int:
    """Calendar dates between an event and now, ignoring the time of day."""
    return (_to_datetime(now).date() - _to_datetime(timestamp).date()).days


def bucket_daily(
    events: Iterable[Tuple[Union[date, datetime], float]],
    now: Union[date, datetime],
    window: int = HISTORY_DAYS,
) -> List[float]:
    """Fold (timestamp, quantity) events into a per-day list, oldest first.

    Events are grouped by calendar date: index ``window - 1`` is today's date,
    whatever the time of day. Quantities are summed as absolute values
    (usage transactions are stored as negative stock movements). Events older
    than the window, or in the future, are ignored.
    """
    buckets = [0.0] * window
    for timestamp, quantity in events:
        offset = calendar_days_between(timestamp, now)
        if 0 <= offset < window:
            buckets[window - 1 - offset] += abs(float(quantity or 0))
    return buckets


def window_dates(window: int, today: date) -> List[date]:
    """Calendar dates of a trailing window, oldest first, ending today."""
    return [today - timedelta(days=window - 1 - i) for i in range(window)]


def day_labels(window: int, today: date) -> List[str]:
    """Weekday abbreviations for a trailing window ending today."""
    return [DAY_ABBREVIATIONS[d.weekday()] for d in window_dates(window, today)]


def weekday_label(index: int) -> str:
    """Monday-first weekday name for a position in a day-indexed series."""
    return DAY_NAMES[index % 7]


def unit_dimension(unit: Optional[str]) -> Optional[str]:
    key = (unit or "").strip().lower()
    for dimension, factors in _UNIT_FACTORS.items():
        if key in factors:
            return dimension
    return None


def convert_quantity(qty: float, from_unit: Optional[str], to_unit: Optional[str]) -> float:
    """Convert qty between two units of the same dimension.

    Unknown units, or units of different dimensions, leave the quantity as is:
    the line is then taken to be expressed in the target unit already.
    """
    source = (from_unit or "").strip().lower()
    target = (to_unit or "").strip().lower()
    if not source or not target or source == target:
        return qty
    dimension = unit_dimension(source)
    if dimension is None or dimension != unit_dimension(target):
        return qty
    factors = _UNIT_FACTORS[dimension]
    return qty * factors[source] / factors[target]
