"""
Purchase order endpoints
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from tacotrack.api.deps import get_data_access
from tacotrack.domain import OrderStatus
from tacotrack.exceptions import TacoTrackError
from tacotrack.models.base import get_db
from tacotrack.schemas import OrderCreate, OrderStatusUpdate, Status
from tacotrack.services.data_access import DataAccessService, to_json
from tacotrack.services.order_service import OrderService, generate_suggested_orders
from tacotrack.utils.logger import log

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("")
async def list_orders(
    status: Optional[Status] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        return {"orders": to_json(OrderService(db).list_orders(status))}
    except Exception as e:
        log.error(f"Error fetching orders: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch orders")


@router.get("/suggested")
async def get_suggested_orders(data: DataAccessService = Depends(get_data_access)):
    """Draft orders per vendor for everything below target stock"""
    try:
        orders = generate_suggested_orders(data.ingredients(), date.today())
        return {"orders": to_json(orders)}
    except Exception as e:
        log.error(f"Error building suggested orders: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to build suggested orders")


@router.post("", status_code=201)
async def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    try:
        order = OrderService(db).create_order(
            vendor=payload.vendor,
            items=[item.model_dump() for item in payload.items],
            delivery_date=payload.delivery_date,
            status=OrderStatus(payload.status),
        )
        return to_json(order)
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error creating order: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create order")


@router.patch("/{order_id}/status")
async def update_order_status(order_id: str, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    """Advance or cancel an order. Invalid transitions answer 409."""
    try:
        return to_json(OrderService(db).update_status(order_id, OrderStatus(payload.status)))
    except TacoTrackError:
        raise
    except Exception as e:
        log.error(f"Error updating order {order_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update order")
