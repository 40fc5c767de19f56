"""
Ingredient endpoints
"""
from fastapi import APIRouter, Depends, HTTPException

from tacotrack.api.deps import get_data_access
from tacotrack.exceptions import TacoTrackError
from tacotrack.schemas import IngredientCreate, IngredientUpdate
from tacotrack.services.data_access import DataAccessService, to_json
from tacotrack.services.ingredient_metrics import burndown_data, ingredient_metrics, weekly_usage_data
from tacotrack.utils.logger import log

router = APIRouter(prefix="/api/ingredients", tags=["ingredients"])


@router.get("")
async def list_ingredients(data: DataAccessService = Depends(get_data_access)):
    """All ingredients, newest first, with their stock metrics"""
    try:
        return [
            {**to_json(ing), "metrics": ingredient_metrics(ing)}
            for ing in data.ingredients()
        ]
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error fetching ingredients: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch ingredients")


@router.get("/{ingredient_id}")
async def get_ingredient(ingredient_id: str, data: DataAccessService = Depends(get_data_access)):
    """One ingredient with metrics and chart series for the detail page"""
    try:
        ing = data.get_ingredient(ingredient_id)
        return {
            **to_json(ing),
            "metrics": ingredient_metrics(ing),
            "burndown": burndown_data(ing),
            "weeklyUsage": weekly_usage_data(ing),
        }
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error fetching ingredient {ingredient_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch ingredient")


@router.post("", status_code=201)
async def create_ingredient(payload: IngredientCreate, data: DataAccessService = Depends(get_data_access)):
    try:
        return to_json(data.create_ingredient(payload))
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error creating ingredient: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create ingredient")


@router.patch("")
async def update_ingredient(payload: IngredientUpdate, data: DataAccessService = Depends(get_data_access)):
    """Partial update; the body carries the ingredient id"""
    try:
        return to_json(data.update_ingredient(payload))
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error updating ingredient {payload.id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update ingredient")
