"""
Forecast endpoints
Recipe demand forecasts and ingredient stockout forecasts
"""
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from tacotrack.api.deps import get_data_access, get_llm_service
from tacotrack.exceptions import TacoTrackError
from tacotrack.models.base import get_db
from tacotrack.schemas import ForecastRequest
from tacotrack.services.data_access import DataAccessService, to_json
from tacotrack.services.forecast_service import ForecastService
from tacotrack.services.llm_service import LLMService
from tacotrack.utils.logger import log

router = APIRouter(prefix="/api", tags=["forecast"])


@router.post("/forecast")
async def generate_forecast(
    request: ForecastRequest,
    db: Session = Depends(get_db),
    llm: LLMService = Depends(get_llm_service),
):
    """
    Forecast daily demand for a recipe, starting tomorrow.

    Uses the LLM when configured and falls back to weekday averages.
    Example: {"recipeId": "r1", "forecastDays": 7}
    """
    try:
        result = ForecastService(db, llm).generate_recipe_forecast(request.recipe_id, request.forecast_days)
        return {"success": True, **result}
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Forecast error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to generate forecast")


@router.get("/forecast")
async def get_forecasts(
    recipe_id: Optional[str] = Query(None, alias="recipeId"),
    db: Session = Depends(get_db),
):
    try:
        return {"success": True, "forecasts": to_json(ForecastService(db).get_forecasts(recipe_id))}
    except Exception as e:
        log.error(f"Error fetching forecasts: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch forecasts")


@router.post("/inventory-forecast")
async def generate_inventory_forecast(
    data: DataAccessService = Depends(get_data_access),
):
    """Store today's stockout projection for every ingredient"""
    try:
        summary = ForecastService(data.db).generate_inventory_forecasts(data.fetch_ingredients())
        return {"success": True, **summary}
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Inventory forecast error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to generate inventory forecast")


@router.get("/inventory-forecast")
async def get_inventory_forecast(
    forecast_date: Optional[date] = Query(None, alias="date"),
    urgency: Optional[Literal["critical", "warning", "ok"]] = Query(None),
    db: Session = Depends(get_db),
):
    """Stockout projections for a date (default today), most urgent first"""
    try:
        forecasts = ForecastService(db).get_inventory_forecasts(forecast_date, urgency)
        return {"success": True, "forecasts": forecasts, "count": len(forecasts)}
    except Exception as e:
        log.error(f"Error fetching inventory forecasts: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch inventory forecasts")
