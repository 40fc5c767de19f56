"""
Aggregate report builders

Dashboard, insights and the "Wrapped" retrospective. Each builder is a pure
function over entity snapshots; none of them touch the database.
"""
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from tacotrack.config import get_settings
from tacotrack.domain import ForecastRecord, Ingredient, Recipe, WasteEntry
from tacotrack.services.alert_service import generate_alerts
from tacotrack.services.ingredient_metrics import days_of_stock, days_until_expiry, urgency_level
from tacotrack.services.recipe_metrics import (
    daily_totals,
    food_cost_percent,
    index_ingredients,
    margin_ranking,
    sales_trend_data,
    top_selling_items,
    total_sales,
    waste_by_category,
)
from tacotrack.services.time_window import DAY_ABBREVIATIONS, weekday_label
from tacotrack.utils.helpers import round_half_up, round_percent, safe_divide

settings = get_settings()

TRENDING_GROWTH = 1.15  # Second half must beat first half by more than 15%


def average_food_cost(recipes: Sequence[Recipe], ingredients) -> int:
    """Mean food cost % across recipes (0 for an empty menu)."""
    if not recipes:
        return 0
    by_id = index_ingredients(ingredients)
    return round_percent(sum(food_cost_percent(r, by_id) for r in recipes) / len(recipes))


def waste_on(entries: Sequence[WasteEntry], day: date) -> float:
    return round_half_up(sum(w.cost_lost for w in entries if w.date == day), 2)


# ─────────────────────────────────────────────
# DASHBOARD
# ─────────────────────────────────────────────

def build_dashboard(
    ingredients: Sequence[Ingredient],
    recipes: Sequence[Recipe],
    waste_entries: Sequence[WasteEntry] = (),
    now: Optional[datetime] = None,
) -> Dict:
    """Daily overview: what is running low, what expires, and what to do about it."""
    now = now or datetime.utcnow()

    low_stock = []
    for ing in ingredients:
        days = days_of_stock(ing)
        if days <= settings.low_stock_threshold_days:
            low_stock.append({
                "id": ing.id,
                "name": ing.name,
                "onHand": ing.on_hand,
                "unit": ing.unit,
                "daysOfStock": round_half_up(days, 1),
                "urgency": urgency_level(ing).value,
                "_days": days,
            })
    low_stock.sort(key=lambda item: item["_days"])
    for item in low_stock:
        del item["_days"]

    expiring_soon = 0
    for ing in ingredients:
        left = days_until_expiry(ing, now)
        if left is not None and left <= settings.expiring_soon_days:
            expiring_soon += 1

    avg_days = 0.0
    if ingredients:
        avg_days = round_half_up(sum(days_of_stock(i) for i in ingredients) / len(ingredients), 1)

    alerts = generate_alerts(ingredients, now)
    critical = [a for a in alerts if a.severity == "critical"]

    tasks = [
        {
            "id": "order-supplies",
            "title": "Order supplies today",
            "subtitle": f"{len(low_stock)} items running low",
            "href": "/orders",
            "urgent": len(low_stock) > 3,
        },
        {
            "id": "use-expiring",
            "title": f"{expiring_soon} items expiring soon",
            "subtitle": "Use first or discount today",
            "href": "/inventory",
            "urgent": expiring_soon > 2,
        },
        {
            "id": "review-alerts",
            "title": "Review critical alerts",
            "subtitle": f"{len(critical)} critical alert{'s' if len(critical) != 1 else ''} need attention",
            "href": "/inventory",
            "urgent": len(critical) > 0,
        },
    ]

    return {
        "lowStock": low_stock,
        "lowStockCount": len(low_stock),
        "expiringSoonCount": expiring_soon,
        "avgFoodCost": average_food_cost(recipes, ingredients),
        "avgDaysOfStock": avg_days,
        "wasteToday": waste_on(waste_entries, now.date()),
        "alerts": [a.to_dict() for a in alerts],
        "criticalAlertCount": len(critical),
        "tasks": tasks,
        "salesTrend": sales_trend_data(recipes, now.date()),
    }


# ─────────────────────────────────────────────
# INSIGHTS
# ─────────────────────────────────────────────

def forecast_demand_by_weekday(forecasts: Sequence[ForecastRecord]) -> List[Dict]:
    """Average predicted units per weekday (Mon..Sun), summed across recipes per date first."""
    per_date: Dict[date, float] = defaultdict(float)
    for record in forecasts:
        per_date[record.target_date] += record.predicted_quantity or 0.0

    per_weekday: Dict[int, List[float]] = defaultdict(list)
    for target_date, units in per_date.items():
        per_weekday[target_date.weekday()].append(units)

    return [
        {
            "day": DAY_ABBREVIATIONS[i],
            "predicted": round_half_up(safe_divide(sum(per_weekday[i]), len(per_weekday[i])), 1),
            "samples": len(per_weekday[i]),
        }
        for i in range(7)
    ]


def sales_demand_by_weekday(recipes: Sequence[Recipe], today: date) -> List[Dict]:
    """Average units per weekday over the 14-day history."""
    per_weekday: Dict[str, List[float]] = defaultdict(list)
    for point in sales_trend_data(recipes, today):
        per_weekday[point["day"]].append(point["sales"])
    return [
        {
            "day": day,
            "predicted": round_half_up(safe_divide(sum(per_weekday[day]), len(per_weekday[day])), 1),
            "samples": len(per_weekday[day]),
        }
        for day in DAY_ABBREVIATIONS
    ]


def _trend_hint(week_change: int) -> str:
    direction = "up" if week_change >= 0 else "down"
    text = f"Sales {direction} {abs(week_change)}% vs last week."
    if week_change > 15:
        return f"{text} Strong growth: increase prep and stock."
    if week_change > 0:
        return f"{text} Steady climb: keep current ordering pace."
    return f"{text} Demand dropping: review specials and reduce orders."


def build_insights(
    recipes: Sequence[Recipe],
    ingredients: Sequence[Ingredient],
    waste_entries: Sequence[WasteEntry],
    forecasts: Sequence[ForecastRecord] = (),
    today: Optional[date] = None,
) -> Dict:
    """Analytics page aggregates: week over week, margins, waste hotspots, demand."""
    today = today or date.today()
    by_id = index_ingredients(ingredients)
    trend = sales_trend_data(recipes, today)

    last_week, this_week = trend[:7], trend[7:]
    last_week_total = sum(p["sales"] for p in last_week)
    this_week_total = sum(p["sales"] for p in this_week)
    week_change = 0
    if last_week_total > 0:
        week_change = round_percent((this_week_total - last_week_total) / last_week_total * 100)

    has_sales = any(total_sales(r) > 0 for r in recipes)
    if has_sales:
        demand, source = sales_demand_by_weekday(recipes, today), "sales"
    elif forecasts:
        demand, source = forecast_demand_by_weekday(forecasts), "forecast"
    else:
        demand, source = [], "none"

    top_sellers = top_selling_items(recipes, by_id)
    return {
        "weekOverWeek": {
            "thisWeek": this_week_total,
            "lastWeek": last_week_total,
            "changePercent": week_change,
            "hint": _trend_hint(week_change),
            "daily": [
                {"day": cur["day"], "thisWeek": cur["sales"], "lastWeek": prev["sales"]}
                for cur, prev in zip(this_week, last_week)
            ],
        },
        "weeklyRevenue": round_half_up(sum(p["revenue"] for p in this_week), 2),
        "avgFoodCost": average_food_cost(recipes, by_id),
        "totalWaste": round_half_up(sum(w.cost_lost for w in waste_entries), 2),
        "wasteToday": waste_on(waste_entries, today),
        "marginRanking": margin_ranking(recipes, by_id),
        "wasteHotspots": waste_by_category(waste_entries, by_id),
        "topSellers": top_sellers,
        "topSeller": top_sellers[0]["name"] if top_sellers else "N/A",
        "demandEstimates": demand,
        "dataSource": source,
        "salesTrend": trend,
    }


# ─────────────────────────────────────────────
# WRAPPED
# ─────────────────────────────────────────────

def best_day(totals: Sequence[float]) -> Dict:
    """Weekday with the most units; first maximum wins, so an all-zero series is Monday."""
    if not totals:
        return {"index": None, "day": "N/A", "units": 0}
    best = max(range(len(totals)), key=lambda i: (totals[i], -i))
    return {"index": best, "day": weekday_label(best), "units": totals[best]}


def most_used_ingredient(recipes: Sequence[Recipe], ingredients) -> Optional[Dict]:
    """Ingredient with the largest quantity consumed (line qty x recipe units sold)."""
    usage: Dict[str, float] = {}
    for recipe in recipes:
        sold = total_sales(recipe)
        for line in recipe.ingredients:
            usage[line.ingredient_id] = usage.get(line.ingredient_id, 0.0) + line.qty * sold
    if not usage or max(usage.values()) <= 0:
        return None
    # dicts keep insertion order, so max() returns the first maximum
    top_id = max(usage, key=usage.get)
    ingredient = index_ingredients(ingredients).get(top_id)
    return {
        "id": top_id,
        "name": ingredient.name if ingredient else None,
        "unit": ingredient.unit if ingredient else None,
        "quantityUsed": round_half_up(usage[top_id], 2),
    }


def trending_recipes(recipes: Sequence[Recipe], limit: int = 3) -> List[Dict]:
    """Recipes whose second-half daily average beats the first half by more than 15%."""
    rows = []
    for recipe in recipes:
        half = len(recipe.daily_sales) // 2
        first = sum(recipe.daily_sales[:half])
        second = sum(recipe.daily_sales[half:])
        first_avg = safe_divide(first, half)
        second_avg = safe_divide(second, len(recipe.daily_sales) - half)
        if second_avg > first_avg * TRENDING_GROWTH:
            growth = safe_divide(second, first)
            rows.append({
                "id": recipe.id,
                "name": recipe.name,
                "firstHalfAvg": round_half_up(first_avg, 1),
                "secondHalfAvg": round_half_up(second_avg, 1),
                "growthPercent": round_percent((growth - 1) * 100) if first > 0 else None,
                "_growth": growth,
            })
    rows.sort(key=lambda row: row["_growth"], reverse=True)
    for row in rows:
        del row["_growth"]
    return rows[:limit]


def build_wrapped(
    recipes: Sequence[Recipe],
    ingredients: Sequence[Ingredient],
    waste_entries: Sequence[WasteEntry],
) -> Dict:
    """End-of-period retrospective over the 14-day window."""
    by_id = index_ingredients(ingredients)

    dish_totals = [(recipe, total_sales(recipe)) for recipe in recipes]
    total_served = sum(units for _, units in dish_totals)

    top_dish = None
    if dish_totals:
        recipe, units = max(dish_totals, key=lambda pair: pair[1])
        top_dish = {"id": recipe.id, "name": recipe.name, "sales": units}

    ranked = sorted(dish_totals, key=lambda pair: pair[1], reverse=True)[:3]
    top_three = [
        {
            "id": recipe.id,
            "name": recipe.name,
            "sales": units,
            "revenue": round_half_up(units * recipe.sell_price, 2),
            "foodCostPercent": food_cost_percent(recipe, by_id),
        }
        for recipe, units in ranked
    ]

    top_three_revenue = round_half_up(sum(d["revenue"] for d in top_three), 2)
    total_revenue = round_half_up(sum(units * r.sell_price for r, units in dish_totals), 2)
    total_waste = round_half_up(sum(w.cost_lost for w in waste_entries), 2)
    day = best_day(daily_totals(recipes)) if recipes else best_day([])

    avg_top_food_cost = 0
    if top_three:
        avg_top_food_cost = round_percent(
            sum(dish["foodCostPercent"] for dish in top_three) / len(top_three)
        )

    return {
        "totalDishesServed": total_served,
        "topDish": top_dish,
        "topThreeDishes": top_three,
        "topThreeRevenue": top_three_revenue,
        "totalRevenue": total_revenue,
        "totalWaste": total_waste,
        "bestDay": day["day"],
        "bestDayUnits": day["units"],
        "mostUsedIngredient": most_used_ingredient(recipes, by_id),
        "trendingUp": trending_recipes(recipes),
        "wasteToRevenuePercent": round_percent(total_waste / (top_three_revenue or 1) * 100),
        "avgFoodCost": avg_top_food_cost,
    }
