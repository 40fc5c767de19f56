"""
Insights, dashboard, Wrapped and alert endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from tacotrack.api.deps import fetch_recent_forecasts, get_data_access
from tacotrack.exceptions import TacoTrackError
from tacotrack.services.alert_service import generate_alerts
from tacotrack.services.data_access import DataAccessService, to_json
from tacotrack.services.report_builders import build_dashboard, build_insights, build_wrapped
from tacotrack.utils.logger import log

router = APIRouter(prefix="/api", tags=["insights"])


@router.get("/insights")
async def get_insights_snapshot(data: DataAccessService = Depends(get_data_access)):
    """Everything the analytics page needs in one call"""
    try:
        recipes = data.recipes()
        ingredients = data.ingredients()
        waste = data.waste_entries()
    except Exception as e:
        log.error(f"Error fetching insights data: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch insights data")

    forecasts = await fetch_recent_forecasts()
    return {
        "recipes": to_json(recipes),
        "ingredients": to_json(ingredients),
        "wasteEntries": to_json(waste),
        "forecasts": to_json(forecasts),
        "success": True,
    }


@router.get("/insights/summary")
async def get_insights_summary(data: DataAccessService = Depends(get_data_access)):
    """Week over week, margins, waste hotspots and demand estimates"""
    try:
        recipes = data.recipes()
        ingredients = data.ingredients()
        waste = data.waste_entries()
    except Exception as e:
        log.error(f"Error fetching insights data: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch insights data")

    forecasts = await fetch_recent_forecasts()
    try:
        return build_insights(recipes, ingredients, waste, forecasts)
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error building insights: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to build insights")


@router.get("/dashboard")
async def get_dashboard(data: DataAccessService = Depends(get_data_access)):
    try:
        return build_dashboard(data.ingredients(), data.recipes(), data.waste_entries(), datetime.utcnow())
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error building dashboard: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to build dashboard")


@router.get("/wrapped")
async def get_wrapped(data: DataAccessService = Depends(get_data_access)):
    """Two-week retrospective: top dishes, best day, waste ratio, trending items"""
    try:
        return build_wrapped(data.recipes(), data.ingredients(), data.waste_entries())
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error building wrapped: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to build wrapped summary")


@router.get("/alerts")
async def get_alerts(data: DataAccessService = Depends(get_data_access)):
    try:
        alerts = generate_alerts(data.ingredients(), datetime.utcnow())
        return {"alerts": [alert.to_dict() for alert in alerts], "count": len(alerts)}
    except Exception as e:
        log.error(f"Error generating alerts: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to generate alerts")
