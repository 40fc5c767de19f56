"""
Recipe and sales endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from tacotrack.api.deps import get_data_access
from tacotrack.exceptions import TacoTrackError
from tacotrack.schemas import RecipeCreate, SaleCreate
from tacotrack.services.data_access import DataAccessService, to_json
from tacotrack.services.recipe_metrics import food_cost_percent, index_ingredients, recipe_cost
from tacotrack.utils.helpers import round_half_up
from tacotrack.utils.logger import log

router = APIRouter(prefix="/api", tags=["recipes"])


@router.get("/recipes")
async def list_recipes(data: DataAccessService = Depends(get_data_access)):
    """All recipes, newest first, with plate cost and food cost %"""
    try:
        by_id = index_ingredients(data.ingredients())
        return [
            {
                **to_json(recipe),
                "plateCost": round_half_up(recipe_cost(recipe, by_id), 2),
                "foodCostPercent": food_cost_percent(recipe, by_id),
            }
            for recipe in data.recipes()
        ]
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error fetching recipes: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch recipes")


@router.post("/recipes", status_code=201)
async def create_recipe(payload: RecipeCreate, data: DataAccessService = Depends(get_data_access)):
    try:
        return to_json(data.create_recipe(payload))
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error creating recipe: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create recipe")


@router.get("/sales")
async def get_sales_summary(
    recipe_id: Optional[str] = Query(None, alias="recipeId"),
    days: int = Query(28, ge=1, le=365),
    data: DataAccessService = Depends(get_data_access),
):
    """Sales event totals, units per recipe (28 days), and recent events for one recipe"""
    try:
        return {"success": True, "data": data.sales_summary(recipe_id, days)}
    except Exception as e:
        log.error(f"Error fetching sales summary: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch sales data")


@router.post("/sales", status_code=201)
async def record_sale(payload: SaleCreate, data: DataAccessService = Depends(get_data_access)):
    try:
        return data.record_sale(payload)
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error recording sale: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to record sale")
