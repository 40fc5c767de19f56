"""
Shared request dependencies
"""
import asyncio
from functools import lru_cache
from typing import List

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from tacotrack.config import get_settings
from tacotrack.domain import ForecastRecord
from tacotrack.models.base import SessionLocal, get_db
from tacotrack.services.data_access import DataAccessService
from tacotrack.services.forecast_service import ForecastService
from tacotrack.services.llm_service import LLMService
from tacotrack.utils.cache import DataCache
from tacotrack.utils.logger import log

settings = get_settings()


def get_data_cache(request: Request) -> DataCache:
    """The application-wide read cache created at startup"""
    return request.app.state.data_cache


def get_data_access(
    db: Session = Depends(get_db),
    cache: DataCache = Depends(get_data_cache),
) -> DataAccessService:
    return DataAccessService(db, cache)


@lru_cache()
def get_llm_service() -> LLMService:
    return LLMService()


def _load_recent_forecasts() -> List[ForecastRecord]:
    # Worker thread; may still be running after the request session is closed
    db = SessionLocal()
    try:
        return ForecastService(db).recent_forecasts()
    finally:
        db.close()


async def fetch_recent_forecasts() -> List[ForecastRecord]:
    """Recent forecast records, or [] when the lookup is slow or fails."""
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(_load_recent_forecasts),
            timeout=settings.forecast_fetch_timeout_seconds,
        )
    except asyncio.TimeoutError:
        log.warning(f"Forecast fetch timed out after {settings.forecast_fetch_timeout_seconds}s")
        return []
    except Exception as e:
        log.error(f"Error fetching forecasts: {str(e)}")
        return []
