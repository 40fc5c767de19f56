"""
Health check and status endpoints
"""
from fastapi import APIRouter, Depends
from datetime import datetime

from tacotrack.api.deps import get_data_cache, get_llm_service
from tacotrack.config import get_settings
from tacotrack.services.llm_service import LLMService
from tacotrack.utils.cache import DataCache
from tacotrack import __version__

settings = get_settings()

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": __version__
    }


@router.get("/status")
async def get_status(
    cache: DataCache = Depends(get_data_cache),
    llm: LLMService = Depends(get_llm_service),
):
    """Get system status"""
    return {
        "app_name": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "features": {
            "llm": llm.is_available(),
            "strict_ingredient_references": settings.strict_ingredient_references,
            "lead_time_in_orders": settings.include_lead_time_in_orders,
        },
        "cache": cache.status(),
        "timestamp": datetime.utcnow().isoformat()
    }
