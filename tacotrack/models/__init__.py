"""Database models for TacoTrack"""

from tacotrack.models.inventory import (
    Ingredient,
    InventoryTransaction,
    WasteEntry
)

from tacotrack.models.menu import (
    Recipe,
    RecipeIngredient,
    SalesEvent
)

from tacotrack.models.order import (
    PurchaseOrder,
    PurchaseOrderItem
)

from tacotrack.models.forecast import (
    Forecast,
    InventoryForecast
)

__all__ = [
    "Ingredient",
    "InventoryTransaction",
    "WasteEntry",
    "Recipe",
    "RecipeIngredient",
    "SalesEvent",
    "PurchaseOrder",
    "PurchaseOrderItem",
    "Forecast",
    "InventoryForecast",
]
