"""
Focused tests for per-ingredient stock math.

Covers:
  - Trailing average usage and the no-usage sentinel
  - Urgency tier boundaries (<= 2 critical, <= 4 warning)
  - Reorder quantity with and without lead time
  - Stockout / order-by projection
  - Burndown and weekly usage chart series
  - Expiry countdown (negative once expired)
"""
import math
from datetime import date, datetime, timedelta

import pytest

from tacotrack.domain import Urgency
from tacotrack.services.ingredient_metrics import (
    BURNDOWN_LABELS,
    avg_daily_usage,
    burndown_data,
    classify_urgency,
    days_of_stock,
    days_since_delivery,
    days_until_expiry,
    ingredient_metrics,
    is_sentinel,
    order_by_date,
    stockout_date,
    suggested_order_qty,
    urgency_level,
    weekly_usage_data,
)

NOW = datetime(2026, 3, 10, 12, 0)
TODAY = NOW.date()


# ────────────────────────────────────────────
# USAGE & DAYS OF STOCK
# ────────────────────────────────────────────


class TestDaysOfStock:
    def test_average_uses_trailing_week(self):
        usage = [100.0] * 7 + [10.0] * 7
        assert avg_daily_usage(usage) == 10.0

    def test_average_of_empty_history(self):
        assert avg_daily_usage([]) == 0.0

    def test_on_hand_over_average(self, ingredient_factory):
        ing = ingredient_factory(on_hand=25, daily_usage=[10] * 14)
        assert days_of_stock(ing) == 2.5

    def test_zero_usage_gives_finite_sentinel(self, ingredient_factory):
        ing = ingredient_factory(on_hand=25, daily_usage=[0] * 14)
        days = days_of_stock(ing)
        assert days == 999
        assert math.isfinite(days)
        assert is_sentinel(days)

    def test_zero_stock_zero_usage_is_not_nan(self, ingredient_factory):
        ing = ingredient_factory(on_hand=0, daily_usage=[])
        assert days_of_stock(ing) == 999

    def test_negative_on_hand_clamped(self, ingredient_factory):
        ing = ingredient_factory(on_hand=-5)
        assert ing.on_hand == 0
        assert days_of_stock(ing) == 0


class TestUrgency:
    @pytest.mark.parametrize("days,expected", [
        (0.0, Urgency.CRITICAL),
        (2.0, Urgency.CRITICAL),
        (2.01, Urgency.WARNING),
        (4.0, Urgency.WARNING),
        (4.01, Urgency.OK),
        (999, Urgency.OK),
    ])
    def test_tier_boundaries(self, days, expected):
        assert classify_urgency(days) is expected

    def test_boundary_from_stock_level(self, ingredient_factory):
        assert urgency_level(ingredient_factory(on_hand=20)) is Urgency.CRITICAL
        assert urgency_level(ingredient_factory(on_hand=40)) is Urgency.WARNING
        assert urgency_level(ingredient_factory(on_hand=40.1)) is Urgency.OK


# ────────────────────────────────────────────
# REORDERING
# ────────────────────────────────────────────


class TestSuggestedOrderQty:
    def test_includes_usage_during_lead_time(self, ingredient_factory):
        ing = ingredient_factory(on_hand=40, par_level=100, lead_time_days=2)
        # 60 to par + 2 days x 10/day in transit
        assert suggested_order_qty(ing) == 80

    def test_without_lead_time(self, ingredient_factory):
        ing = ingredient_factory(on_hand=40, par_level=100, lead_time_days=2)
        assert suggested_order_qty(ing, include_lead_time=False) == 60

    def test_rounds_up_fractions(self, ingredient_factory):
        ing = ingredient_factory(on_hand=40.5, par_level=100, lead_time_days=0)
        assert suggested_order_qty(ing) == 60

    def test_never_negative(self, ingredient_factory):
        ing = ingredient_factory(on_hand=150, par_level=100, daily_usage=[0] * 14)
        assert suggested_order_qty(ing) == 0

    def test_float_noise_does_not_add_a_unit(self, ingredient_factory):
        ing = ingredient_factory(on_hand=0.1 + 0.2, par_level=75.3, lead_time_days=0)
        assert suggested_order_qty(ing) == 75


class TestStockoutProjection:
    def test_stockout_is_floor_of_days(self, ingredient_factory):
        ing = ingredient_factory(on_hand=25)
        assert stockout_date(ing, TODAY) == TODAY + timedelta(days=2)

    def test_order_by_subtracts_lead_time(self, ingredient_factory):
        ing = ingredient_factory(on_hand=50, lead_time_days=2)
        assert order_by_date(ing, TODAY) == TODAY + timedelta(days=3)

    def test_order_by_never_in_the_past(self, ingredient_factory):
        ing = ingredient_factory(on_hand=10, lead_time_days=5)
        assert order_by_date(ing, TODAY) == TODAY

    def test_no_usage_means_no_stockout(self, ingredient_factory):
        ing = ingredient_factory(daily_usage=[0] * 14)
        assert stockout_date(ing, TODAY) is None
        assert order_by_date(ing, TODAY) is None


# ────────────────────────────────────────────
# CHART SERIES
# ────────────────────────────────────────────


class TestBurndown:
    def test_seven_labelled_points(self, ingredient_factory):
        points = burndown_data(ingredient_factory(on_hand=100))
        assert [p["day"] for p in points] == BURNDOWN_LABELS
        assert points[0]["day"] == "Today"
        assert points[-1]["day"] == "Day 7"

    def test_floored_at_zero(self, ingredient_factory):
        points = burndown_data(ingredient_factory(on_hand=25))
        assert [p["stock"] for p in points] == [25.0, 15.0, 5.0, 0.0, 0.0, 0.0, 0.0]

    def test_rounded_to_tenths(self, ingredient_factory):
        points = burndown_data(ingredient_factory(on_hand=10, daily_usage=[1 / 3] * 14))
        assert points[1]["stock"] == 9.7


class TestWeeklyUsage:
    def test_last_seven_days_with_weekdays(self, ingredient_factory):
        usage = list(range(14))
        points = weekly_usage_data(ingredient_factory(daily_usage=usage), TODAY)
        assert len(points) == 7
        assert [p["usage"] for p in points] == [7, 8, 9, 10, 11, 12, 13]
        assert points[-1]["day"] == "Tue"


# ────────────────────────────────────────────
# EXPIRY & DELIVERY
# ────────────────────────────────────────────


class TestExpiry:
    def test_none_without_expiry_date(self, ingredient_factory):
        assert days_until_expiry(ingredient_factory(expiry_date=None), NOW) is None

    def test_ceiling_of_remaining_days(self, ingredient_factory):
        ing = ingredient_factory(expiry_date=date(2026, 3, 12))
        assert days_until_expiry(ing, NOW) == 2

    def test_negative_once_expired(self, ingredient_factory):
        ing = ingredient_factory(expiry_date=date(2026, 3, 8))
        assert days_until_expiry(ing, NOW) == -2

    def test_days_since_delivery(self, ingredient_factory):
        ing = ingredient_factory(last_delivery=date(2026, 3, 7))
        assert days_since_delivery(ing, TODAY) == 3
        assert days_since_delivery(ingredient_factory(), TODAY) is None


class TestMetricsDict:
    def test_camel_case_keys_and_rounding(self, ingredient_factory):
        ing = ingredient_factory(on_hand=25, daily_usage=[3] * 14, lead_time_days=1)
        metrics = ingredient_metrics(ing, NOW)
        assert metrics["daysOfStock"] == 8.3
        assert metrics["avgDailyUsage"] == 3.0
        assert metrics["urgency"] == "ok"
        assert metrics["stockoutDate"] == (TODAY + timedelta(days=8)).isoformat()
        assert metrics["orderByDate"] == (TODAY + timedelta(days=7)).isoformat()
        assert metrics["daysUntilExpiry"] is None

    def test_sentinel_has_no_dates(self, ingredient_factory):
        metrics = ingredient_metrics(ingredient_factory(daily_usage=[0] * 14), NOW)
        assert metrics["daysOfStock"] == 999
        assert metrics["stockoutDate"] is None
