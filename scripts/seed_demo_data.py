#!/usr/bin/env python3
"""
Demo Data Seeder

Loads the demo restaurant (ingredients, recipes, recipe lines) and backfills
randomized sales events and usage transactions so every dashboard has data.
Existing ingredients and recipes are left alone; history is appended.

Usage:
    python scripts/seed_demo_data.py
    python scripts/seed_demo_data.py --days 28 --seed 7
    python scripts/seed_demo_data.py --reset
"""
import sys
import random
import uuid
import argparse
from pathlib import Path
from datetime import date, datetime, timedelta

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tacotrack.models.base import SessionLocal, init_db
from tacotrack.models import (
    Ingredient,
    InventoryTransaction,
    Recipe,
    RecipeIngredient,
    SalesEvent,
    WasteEntry,
)
from tacotrack.utils.logger import log


SEED_INGREDIENTS = [
    # id, name, category, unit, on_hand, par, reorder, cost, vendor, storage, lead days, shelf life days
    ("seasoned-beef", "Enchanted Seasoned Beef", "protein", "lb", 45, 120, 70, 3.49, "Sherwood Meats", "Walk-in Cooler", 2, 5),
    ("grilled-chicken", "Sherwood Grilled Chicken", "protein", "lb", 62, 80, 50, 4.29, "Sherwood Meats", "Walk-in Cooler", 2, 4),
    ("steak-strips", "Nottingham Steak Strips", "protein", "lb", 18, 40, 25, 8.99, "Sherwood Meats", "Walk-in Cooler", 1, 3),
    ("nacho-cheese", "Mystic Nacho Cheese", "dairy", "lb", 35, 50, 30, 2.99, "Friar Tuck Dairy", "Walk-in Cooler", 2, 10),
    ("sour-cream", "Forest Sour Cream", "dairy", "qt", 8, 20, 12, 3.99, "Friar Tuck Dairy", "Walk-in Cooler", 2, 2),
    ("shredded-lettuce", "Merry Shredded Lettuce", "produce", "lb", 12, 30, 18, 1.99, "Greenwood Farms", "Walk-in Cooler", 1, 1),
    ("diced-tomatoes", "Robin's Diced Tomatoes", "produce", "lb", 22, 40, 25, 1.79, "Greenwood Farms", "Walk-in Cooler", 1, 3),
    ("guacamole", "Locksley Guacamole", "produce", "lb", 15, 40, 24, 4.49, "Greenwood Farms", "Walk-in Cooler", 1, 2),
    ("golden-potato-gems", "Golden Potato Gems", "produce", "lb", 60, 100, 60, 0.89, "Greenwood Farms", "Walk-in Cooler", 1, 30),
    ("flour-tortillas", "Spell-Pressed Flour Tortillas", "dry-goods", "dozen", 40, 60, 36, 2.49, "Greenwood Bakery", "Dry Storage", 3, 14),
]

SEED_RECIPES = [
    # id, name, category, yield %, sell price
    ("spell-burrito", "Spell-Bound Burrito", "Burritos", 92, 8.99),
    ("sherwood-crunch", "Sherwood Crunchwrap", "Specialties", 90, 7.49),
    ("outlaw-steak-taco", "Outlaw Steak Taco", "Tacos", 88, 4.99),
    ("forest-quesadilla", "Enchanted Forest Quesadilla", "Specialties", 95, 6.99),
    ("merry-nachos", "Merry Men's Nachos", "Sides", 90, 5.99),
]

SEED_RECIPE_LINES = {
    "spell-burrito": [("seasoned-beef", 0.25), ("flour-tortillas", 0.083), ("nacho-cheese", 0.1), ("shredded-lettuce", 0.05)],
    "sherwood-crunch": [("seasoned-beef", 0.2), ("flour-tortillas", 0.083), ("nacho-cheese", 0.08), ("diced-tomatoes", 0.05)],
    "outlaw-steak-taco": [("steak-strips", 0.15), ("shredded-lettuce", 0.03)],
    "forest-quesadilla": [("grilled-chicken", 0.2), ("flour-tortillas", 0.083), ("nacho-cheese", 0.05)],
    "merry-nachos": [("golden-potato-gems", 0.5), ("nacho-cheese", 0.2)],
}

WASTE_REASONS = ["expired", "spoiled", "over-prep", "dropped"]


def seed_catalog(db, today: date) -> dict:
    """Insert demo ingredients and recipes that are not already present"""
    created = {"ingredients": 0, "recipes": 0}

    existing = {row.id for row in db.query(Ingredient.id).all()}
    for (ing_id, name, category, unit, on_hand, par, reorder, cost,
         vendor, storage, lead_days, shelf_life) in SEED_INGREDIENTS:
        if ing_id in existing:
            continue
        db.add(Ingredient(
            id=ing_id,
            name=name,
            category=category,
            unit=unit,
            on_hand=on_hand,
            par_level=par,
            reorder_point=reorder,
            cost_per_unit=cost,
            vendor=vendor,
            storage_location=storage,
            lead_time_days=lead_days,
            last_delivery=today - timedelta(days=lead_days + 1),
            expiry_date=today + timedelta(days=shelf_life),
        ))
        created["ingredients"] += 1

    existing = {row.id for row in db.query(Recipe.id).all()}
    for recipe_id, name, category, yield_percent, price in SEED_RECIPES:
        if recipe_id in existing:
            continue
        recipe = Recipe(
            id=recipe_id,
            name=name,
            category=category,
            yield_percent=yield_percent,
            sell_price=price,
        )
        for ing_id, qty in SEED_RECIPE_LINES[recipe_id]:
            recipe.lines.append(RecipeIngredient(ingredient_id=ing_id, quantity=qty))
        db.add(recipe)
        created["recipes"] += 1

    db.commit()
    return created


def seed_history(db, rng: random.Random, days: int, now: datetime) -> dict:
    """Backfill sales events, usage transactions and a few waste entries"""
    sales = usage = waste = 0

    for day in range(days - 1, -1, -1):
        day_start = (now - timedelta(days=day)).replace(hour=0, minute=0, second=0, microsecond=0)

        for recipe_id, *_ in SEED_RECIPES:
            for _ in range(rng.randint(10, 29)):
                sold_at = day_start + timedelta(hours=rng.randint(11, 22), minutes=rng.randint(0, 59))
                if sold_at > now:
                    continue
                db.add(SalesEvent(
                    recipe_id=recipe_id,
                    quantity=1,
                    sale_timestamp=sold_at,
                    day_of_week=sold_at.weekday(),
                ))
                sales += 1

        for ing in SEED_INGREDIENTS:
            db.add(InventoryTransaction(
                ingredient_id=ing[0],
                transaction_type="usage",
                quantity=-round(rng.uniform(5, 15), 2),
                transaction_timestamp=day_start,
            ))
            usage += 1

        if rng.random() < 0.4:
            picked = rng.choice(SEED_INGREDIENTS)
            ing_id, cost = picked[0], picked[7]
            qty = round(rng.uniform(0.5, 4), 2)
            db.add(WasteEntry(
                id=f"w-{uuid.uuid4().hex[:12]}",
                ingredient_id=ing_id,
                qty=qty,
                reason=rng.choice(WASTE_REASONS),
                date=day_start.date(),
                cost_lost=round(qty * cost, 2),
            ))
            waste += 1

        db.commit()

    return {"sales_events": sales, "usage_transactions": usage, "waste_entries": waste}


def reset_history(db) -> None:
    db.query(SalesEvent).delete()
    db.query(InventoryTransaction).delete()
    db.query(WasteEntry).delete()
    db.commit()


def main():
    parser = argparse.ArgumentParser(description="Seed the TacoTrack demo restaurant")
    parser.add_argument("--days", type=int, default=14, help="Days of history to generate")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--reset", action="store_true", help="Delete existing sales, usage and waste first")
    args = parser.parse_args()

    init_db()
    db = SessionLocal()
    try:
        if args.reset:
            reset_history(db)
            log.info("Cleared sales, usage and waste history")

        now = datetime.utcnow()
        catalog = seed_catalog(db, now.date())
        history = seed_history(db, random.Random(args.seed), args.days, now)

        print("\n" + "=" * 60)
        print("DEMO DATA SEEDED")
        print("=" * 60)
        for key, value in {**catalog, **history}.items():
            print(f"  {key:<20} {value}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
