"""
Data access layer

The one place where database rows (snake_case columns) become the typed
entities of ``tacotrack.domain`` and where entities become camelCase JSON.
Usage and sales histories are rebuilt here from the transaction and sales
event tables, so every entity leaving this module carries exactly 14 days.
"""
import dataclasses
import uuid
from collections import defaultdict
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic.alias_generators import to_camel
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tacotrack.config import get_settings
from tacotrack.domain import (
    ForecastRecord,
    HISTORY_DAYS,
    Ingredient,
    Order,
    OrderLine,
    OrderStatus,
    Recipe,
    RecipeLine,
    WasteEntry,
)
from tacotrack.exceptions import DataStoreError, NotFoundError
from tacotrack.models.forecast import Forecast as ForecastRow
from tacotrack.models.inventory import (
    Ingredient as IngredientRow,
    InventoryTransaction,
    WasteEntry as WasteRow,
)
from tacotrack.models.menu import Recipe as RecipeRow, RecipeIngredient, SalesEvent
from tacotrack.models.order import PurchaseOrder
from tacotrack.schemas import IngredientCreate, IngredientUpdate, RecipeCreate, SaleCreate, WasteCreate
from tacotrack.services.time_window import bucket_daily
from tacotrack.utils.cache import DataCache
from tacotrack.utils.helpers import round_half_up
from tacotrack.utils.logger import log

settings = get_settings()

INGREDIENTS = "ingredients"
RECIPES = "recipes"
WASTE = "waste"


# ─────────────────────────────────────────────
# ROW -> ENTITY
# ─────────────────────────────────────────────

def ingredient_from_row(row: IngredientRow, daily_usage: Optional[List[float]] = None) -> Ingredient:
    return Ingredient(
        id=row.id,
        name=row.name,
        category=row.category or "other",
        unit=row.unit or "each",
        on_hand=row.on_hand or 0.0,
        par_level=row.par_level or 0.0,
        reorder_point=row.reorder_point or 0.0,
        cost_per_unit=row.cost_per_unit or 0.0,
        vendor=row.vendor or "",
        storage_location=row.storage_location or "",
        expiry_date=row.expiry_date,
        last_delivery=row.last_delivery,
        lead_time_days=row.lead_time_days or 0,
        daily_usage=tuple(daily_usage or ()),
    )


def recipe_from_row(row: RecipeRow, daily_sales: Optional[List[float]] = None) -> Recipe:
    return Recipe(
        id=row.id,
        name=row.name,
        category=row.category or "",
        sell_price=row.sell_price or 0.0,
        yield_percent=row.yield_percent if row.yield_percent is not None else 100.0,
        ingredients=tuple(
            RecipeLine(ingredient_id=line.ingredient_id, qty=line.quantity, unit=line.unit)
            for line in row.lines
        ),
        daily_sales=tuple(daily_sales or ()),
    )


def waste_from_row(row: WasteRow) -> WasteEntry:
    return WasteEntry(
        id=row.id,
        ingredient_id=row.ingredient_id,
        qty=row.qty,
        reason=row.reason or "other",
        date=row.date,
        cost_lost=row.cost_lost or 0.0,
    )


def order_from_row(row: PurchaseOrder) -> Order:
    return Order(
        id=row.id,
        vendor=row.vendor,
        items=tuple(
            OrderLine(ingredient_id=item.ingredient_id, qty=item.qty, unit_cost=item.unit_cost or 0.0)
            for item in row.items
        ),
        status=OrderStatus(row.status),
        delivery_date=row.delivery_date,
        total_cost=row.total_cost or 0.0,
    )


def forecast_from_row(row: ForecastRow) -> ForecastRecord:
    return ForecastRecord(
        recipe_id=row.recipe_id,
        target_date=row.target_date,
        predicted_quantity=row.predicted_quantity,
        confidence=row.confidence,
        created_at=row.created_at,
    )


# ─────────────────────────────────────────────
# ENTITY -> JSON
# ─────────────────────────────────────────────

def to_json(value: Any) -> Any:
    """Entities, dicts and lists to JSON-ready values with camelCase keys."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            to_camel(f.name): to_json(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value


def commit_or_rollback(db: Session, action: str) -> None:
    """Commit, or roll back and raise DataStoreError so the session stays usable."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Database error while trying to {action}: {str(e)}")
        raise DataStoreError(f"Failed to {action}")


# ─────────────────────────────────────────────
# SERVICE
# ─────────────────────────────────────────────

class DataAccessService:
    """Reads and writes for the API. Reads go through the cache when one is given."""

    def __init__(self, db: Session, cache: Optional[DataCache] = None):
        self.db = db
        self.cache = cache

    def _cached(self, kind: str, fetch: Callable[[], Any]) -> Any:
        if self.cache is None:
            return fetch()
        return self.cache.get_or_fetch(kind, fetch)

    def _invalidate(self, kind: str) -> None:
        if self.cache is not None:
            self.cache.invalidate(kind)

    def _commit(self, action: str) -> None:
        commit_or_rollback(self.db, action)

    # ── reads ──────────────────────────────────────

    def _usage_by_ingredient(self, now: datetime) -> Dict[str, List[float]]:
        cutoff = now - timedelta(days=HISTORY_DAYS)
        rows = (
            self.db.query(
                InventoryTransaction.ingredient_id,
                InventoryTransaction.transaction_timestamp,
                InventoryTransaction.quantity,
            )
            .filter(
                InventoryTransaction.transaction_type == "usage",
                InventoryTransaction.transaction_timestamp >= cutoff,
            )
            .all()
        )
        events = defaultdict(list)
        for row in rows:
            events[row.ingredient_id].append((row.transaction_timestamp, row.quantity))
        return {ing_id: bucket_daily(evts, now) for ing_id, evts in events.items()}

    def _sales_by_recipe(self, now: datetime) -> Dict[str, List[float]]:
        cutoff = now - timedelta(days=HISTORY_DAYS)
        rows = (
            self.db.query(SalesEvent.recipe_id, SalesEvent.sale_timestamp, SalesEvent.quantity)
            .filter(SalesEvent.sale_timestamp >= cutoff)
            .all()
        )
        events = defaultdict(list)
        for row in rows:
            events[row.recipe_id].append((row.sale_timestamp, row.quantity))
        return {recipe_id: bucket_daily(evts, now) for recipe_id, evts in events.items()}

    def fetch_ingredients(self, now: Optional[datetime] = None) -> List[Ingredient]:
        """Ingredients, newest first, each with its 14-day usage history."""
        now = now or datetime.utcnow()
        usage = self._usage_by_ingredient(now)
        rows = self.db.query(IngredientRow).order_by(IngredientRow.created_at.desc()).all()
        return [ingredient_from_row(row, usage.get(row.id)) for row in rows]

    def fetch_recipes(self, now: Optional[datetime] = None) -> List[Recipe]:
        """Recipes, newest first, each with its 14-day sales history."""
        now = now or datetime.utcnow()
        sales = self._sales_by_recipe(now)
        rows = self.db.query(RecipeRow).order_by(RecipeRow.created_at.desc()).all()
        return [recipe_from_row(row, sales.get(row.id)) for row in rows]

    def fetch_waste_entries(self) -> List[WasteEntry]:
        rows = self.db.query(WasteRow).order_by(WasteRow.created_at.desc()).all()
        return [waste_from_row(row) for row in rows]

    def ingredients(self) -> List[Ingredient]:
        return self._cached(INGREDIENTS, self.fetch_ingredients)

    def recipes(self) -> List[Recipe]:
        return self._cached(RECIPES, self.fetch_recipes)

    def waste_entries(self) -> List[WasteEntry]:
        return self._cached(WASTE, self.fetch_waste_entries)

    def get_ingredient(self, ingredient_id: str) -> Ingredient:
        for ingredient in self.ingredients():
            if ingredient.id == ingredient_id:
                return ingredient
        raise NotFoundError(f"Ingredient '{ingredient_id}' not found")

    def recipe_exists(self, recipe_id: str) -> bool:
        return self.db.query(RecipeRow.id).filter(RecipeRow.id == recipe_id).first() is not None

    # ── writes ─────────────────────────────────────

    def create_ingredient(self, payload: IngredientCreate) -> Ingredient:
        row = IngredientRow(**payload.model_dump())
        self.db.add(row)
        self._commit("create ingredient")
        self.db.refresh(row)
        self._invalidate(INGREDIENTS)
        log.info(f"Created ingredient {row.id}")
        return ingredient_from_row(row)

    def update_ingredient(self, payload: IngredientUpdate) -> Ingredient:
        row = self.db.query(IngredientRow).filter(IngredientRow.id == payload.id).first()
        if row is None:
            raise NotFoundError(f"Ingredient '{payload.id}' not found")
        changes = payload.model_dump(exclude_unset=True, exclude={"id"})
        for column, value in changes.items():
            setattr(row, column, value)
        self._commit("update ingredient")
        self.db.refresh(row)
        self._invalidate(INGREDIENTS)
        log.info(f"Updated ingredient {row.id}: {sorted(changes)}")
        usage = self._usage_by_ingredient(datetime.utcnow()).get(row.id)
        return ingredient_from_row(row, usage)

    def create_recipe(self, payload: RecipeCreate) -> Recipe:
        row = RecipeRow(
            id=payload.id,
            name=payload.name,
            category=payload.category,
            sell_price=payload.sell_price,
            yield_percent=payload.yield_percent,
        )
        for line in payload.ingredients:
            row.lines.append(RecipeIngredient(
                ingredient_id=line.ingredient_id,
                quantity=line.qty,
                unit=line.unit,
            ))
        self.db.add(row)
        self._commit("create recipe")
        self.db.refresh(row)
        self._invalidate(RECIPES)
        log.info(f"Created recipe {row.id} with {len(payload.ingredients)} ingredient lines")
        return recipe_from_row(row)

    def record_sale(self, payload: SaleCreate) -> Dict:
        if not self.recipe_exists(payload.recipe_id):
            raise NotFoundError(f"Recipe '{payload.recipe_id}' not found")
        sold_at = payload.sale_timestamp or datetime.utcnow()
        event = SalesEvent(
            recipe_id=payload.recipe_id,
            quantity=payload.quantity,
            sale_timestamp=sold_at,
            day_of_week=sold_at.weekday(),
        )
        self.db.add(event)
        self._commit("record sale")
        self.db.refresh(event)
        self._invalidate(RECIPES)
        return {
            "id": event.id,
            "recipeId": event.recipe_id,
            "quantity": event.quantity,
            "saleTimestamp": event.sale_timestamp.isoformat(),
        }

    def create_waste_entry(self, payload: WasteCreate) -> WasteEntry:
        ingredient = self.db.query(IngredientRow).filter(IngredientRow.id == payload.ingredient_id).first()
        if ingredient is None:
            raise NotFoundError(f"Ingredient '{payload.ingredient_id}' not found")
        cost_lost = payload.cost_lost
        if cost_lost is None:
            cost_lost = round_half_up(payload.qty * (ingredient.cost_per_unit or 0.0), 2)
        row = WasteRow(
            id=f"w-{uuid.uuid4().hex[:12]}",
            ingredient_id=payload.ingredient_id,
            qty=payload.qty,
            reason=payload.reason,
            date=payload.date or date.today(),
            cost_lost=cost_lost,
        )
        self.db.add(row)
        self._commit("log waste")
        self.db.refresh(row)
        self._invalidate(WASTE)
        log.info(f"Logged waste {row.id}: {row.qty} of {row.ingredient_id} ({row.reason})")
        return waste_from_row(row)

    # ── sales log ──────────────────────────────────

    def sales_summary(self, recipe_id: Optional[str] = None, days: int = 28) -> Dict:
        """Sales event count, units per recipe over 28 days, and recent events for one recipe."""
        now = datetime.utcnow()
        total_count = self.db.query(func.count(SalesEvent.id)).scalar() or 0

        four_weeks_ago = now - timedelta(days=28)
        by_recipe = (
            self.db.query(SalesEvent.recipe_id, func.sum(SalesEvent.quantity).label("units"))
            .filter(SalesEvent.sale_timestamp >= four_weeks_ago)
            .group_by(SalesEvent.recipe_id)
            .all()
        )

        recent = []
        if recipe_id:
            from_date = now - timedelta(days=days)
            rows = (
                self.db.query(SalesEvent)
                .filter(SalesEvent.recipe_id == recipe_id, SalesEvent.sale_timestamp >= from_date)
                .order_by(SalesEvent.sale_timestamp.desc())
                .limit(100)
                .all()
            )
            recent = [
                {
                    "id": r.id,
                    "recipeId": r.recipe_id,
                    "quantity": r.quantity,
                    "saleTimestamp": r.sale_timestamp.isoformat(),
                }
                for r in rows
            ]

        return {
            "totalSalesEvents": total_count,
            "salesByRecipe": {row.recipe_id: int(row.units or 0) for row in by_recipe},
            "recentSalesForRecipe": recent,
            "days": days,
        }
