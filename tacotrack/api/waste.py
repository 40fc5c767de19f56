"""
Waste log endpoints
"""
from fastapi import APIRouter, Depends, HTTPException

from tacotrack.api.deps import get_data_access
from tacotrack.exceptions import TacoTrackError
from tacotrack.schemas import WasteCreate
from tacotrack.services.data_access import DataAccessService, to_json
from tacotrack.utils.logger import log

router = APIRouter(prefix="/api/waste", tags=["waste"])


@router.get("")
async def list_waste(data: DataAccessService = Depends(get_data_access)):
    try:
        return to_json(data.waste_entries())
    except Exception as e:
        log.error(f"Error fetching waste entries: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch waste entries")


@router.post("", status_code=201)
async def log_waste(payload: WasteCreate, data: DataAccessService = Depends(get_data_access)):
    """Record wasted stock. cost_lost defaults to qty x the ingredient's unit cost."""
    try:
        return to_json(data.create_waste_entry(payload))
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error logging waste: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to log waste")
