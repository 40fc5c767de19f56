"""
Per-recipe metrics

Food cost, sales trend, best sellers, margins and waste by category.

Recipe lines that reference an ingredient missing from the ingredient set
contribute zero cost by default. Deployments that prefer a hard failure set
STRICT_INGREDIENT_REFERENCES=true (or pass strict=True), which raises
UnresolvedIngredientError instead.
"""
from collections import OrderedDict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from tacotrack.config import get_settings
from tacotrack.domain import HISTORY_DAYS, Ingredient, Recipe, WasteEntry
from tacotrack.exceptions import UnresolvedIngredientError
from tacotrack.services.time_window import DAY_ABBREVIATIONS, convert_quantity
from tacotrack.utils.helpers import round_half_up, round_percent, safe_divide
from tacotrack.utils.logger import log

settings = get_settings()

IngredientLookup = Union[Mapping[str, Ingredient], Iterable[Ingredient]]

OTHER_CATEGORY = "other"


def index_ingredients(ingredients: IngredientLookup) -> Dict[str, Ingredient]:
    """Accept either a list of ingredients or an id -> ingredient mapping."""
    if isinstance(ingredients, Mapping):
        return dict(ingredients)
    return {ing.id: ing for ing in ingredients}


def recipe_cost(recipe: Recipe, ingredients: IngredientLookup, strict: Optional[bool] = None) -> float:
    """Ingredient cost of one unit of the recipe."""
    if strict is None:
        strict = settings.strict_ingredient_references
    by_id = index_ingredients(ingredients)
    total = 0.0
    for line in recipe.ingredients:
        ingredient = by_id.get(line.ingredient_id)
        if ingredient is None:
            if strict:
                raise UnresolvedIngredientError(recipe.id, line.ingredient_id)
            log.debug(f"Recipe {recipe.id}: ingredient {line.ingredient_id} not found, costed at 0")
            continue
        qty = convert_quantity(line.qty, line.unit, ingredient.unit)
        total += qty * ingredient.cost_per_unit
    return total


def food_cost_percent(recipe: Recipe, ingredients: IngredientLookup, strict: Optional[bool] = None) -> int:
    """Ingredient cost as a whole-number percentage of sell price (0 for free items)."""
    if recipe.sell_price <= 0:
        return 0
    cost = recipe_cost(recipe, ingredients, strict)
    return round_percent(safe_divide(cost, recipe.sell_price) * 100)


def margin_percent(recipe: Recipe, ingredients: IngredientLookup, strict: Optional[bool] = None) -> int:
    return 100 - food_cost_percent(recipe, ingredients, strict)


def total_sales(recipe: Recipe) -> float:
    return sum(recipe.daily_sales)


def trailing_avg_sales(recipe: Recipe, window: Optional[int] = None) -> float:
    window = window or settings.trailing_window_days
    recent = list(recipe.daily_sales)[-window:]
    return safe_divide(sum(recent), len(recent))


def daily_totals(recipes: Sequence[Recipe], length: int = HISTORY_DAYS) -> List[float]:
    """Units sold per day across all recipes."""
    return [sum(r.daily_sales[i] for r in recipes) for i in range(length)]


def sales_trend_data(recipes: Sequence[Recipe], today: Optional[date] = None) -> List[Dict]:
    """Fourteen daily points of units and revenue across the menu, oldest first.

    ``lastWeek`` is the units figure seven days earlier; the first week has
    nothing to compare against and repeats its own value.
    """
    today = today or date.today()
    units = daily_totals(recipes)
    points = []
    for i in range(HISTORY_DAYS):
        day = today - timedelta(days=HISTORY_DAYS - 1 - i)
        revenue = sum(r.daily_sales[i] * r.sell_price for r in recipes)
        points.append({
            "day": DAY_ABBREVIATIONS[day.weekday()],
            "date": day.isoformat(),
            "sales": units[i],
            "revenue": round_half_up(revenue, 2),
            "lastWeek": units[i] if i < 7 else units[i - 7],
        })
    return points


def top_selling_items(
    recipes: Sequence[Recipe],
    ingredients: IngredientLookup,
    window: Optional[int] = None,
) -> List[Dict]:
    """Recipes ranked by trailing average daily sales (desc), ties by name (asc)."""
    by_id = index_ingredients(ingredients)
    items = [
        {
            "id": r.id,
            "name": r.name,
            "avgSales": round_half_up(trailing_avg_sales(r, window), 1),
            "margin": margin_percent(r, by_id),
        }
        for r in recipes
    ]
    # Stable two-pass sort: name first, then average
    items.sort(key=lambda item: item["name"])
    items.sort(key=lambda item: item["avgSales"], reverse=True)
    return items


def margin_ranking(recipes: Sequence[Recipe], ingredients: IngredientLookup) -> List[Dict]:
    """Recipes by margin (100 - food cost %), highest first, ties by name."""
    by_id = index_ingredients(ingredients)
    rows = []
    for r in recipes:
        cost_pct = food_cost_percent(r, by_id)
        rows.append({"id": r.id, "name": r.name, "margin": 100 - cost_pct, "cost": cost_pct})
    rows.sort(key=lambda row: (-row["margin"], row["name"]))
    return rows


def waste_by_category(entries: Sequence[WasteEntry], ingredients: IngredientLookup) -> List[Dict]:
    """Cost lost per ingredient category, highest first.

    Entries whose ingredient cannot be resolved land in "other" rather than
    being dropped.
    """
    by_id = index_ingredients(ingredients)
    totals: "OrderedDict[str, float]" = OrderedDict()
    for entry in entries:
        ingredient = by_id.get(entry.ingredient_id)
        category = ingredient.category if ingredient and ingredient.category else OTHER_CATEGORY
        totals[category] = totals.get(category, 0.0) + (entry.cost_lost or 0.0)
    rows = [
        {
            "category": category,
            "label": category.replace("-", " ").capitalize(),
            "cost": round_half_up(cost, 2),
        }
        for category, cost in totals.items()
    ]
    rows.sort(key=lambda row: (-row["cost"], row["category"]))
    return rows
