"""
Order Service

Suggested purchase orders grouped by vendor, and the purchase order
lifecycle: suggested -> pending -> confirmed -> shipped -> delivered, with
cancellation allowed from any non-terminal status.
"""
import uuid
from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from tacotrack.domain import Ingredient, Order, OrderLine, OrderStatus
from tacotrack.exceptions import InvalidTransitionError, NotFoundError
from tacotrack.models.order import PurchaseOrder, PurchaseOrderItem
from tacotrack.services.data_access import commit_or_rollback, order_from_row
from tacotrack.services.ingredient_metrics import suggested_order_qty
from tacotrack.utils.helpers import round_half_up
from tacotrack.utils.logger import log


def generate_suggested_orders(ingredients: Sequence[Ingredient], today: Optional[date] = None) -> List[Order]:
    """One suggested order per vendor covering every ingredient below target."""
    today = today or date.today()
    groups: "OrderedDict[str, List[Ingredient]]" = OrderedDict()
    for ingredient in ingredients:
        if suggested_order_qty(ingredient) <= 0:
            continue
        groups.setdefault(ingredient.vendor or "Unassigned", []).append(ingredient)

    orders = []
    for i, (vendor, members) in enumerate(groups.items()):
        lines = tuple(
            OrderLine(ingredient_id=ing.id, qty=suggested_order_qty(ing), unit_cost=ing.cost_per_unit)
            for ing in members
        )
        lead_time = max(ing.lead_time_days for ing in members)
        orders.append(Order(
            id=f"suggested-{i}",
            vendor=vendor,
            items=lines,
            status=OrderStatus.SUGGESTED,
            delivery_date=today + timedelta(days=lead_time),
            total_cost=round_half_up(sum(line.line_total for line in lines), 2),
        ))
    return orders


class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def list_orders(self, status: Optional[str] = None) -> List[Order]:
        query = self.db.query(PurchaseOrder)
        if status:
            query = query.filter(PurchaseOrder.status == status)
        rows = query.order_by(PurchaseOrder.created_at.desc()).all()
        return [order_from_row(row) for row in rows]

    def create_order(
        self,
        vendor: str,
        items: List[Dict],
        delivery_date: Optional[date] = None,
        status: OrderStatus = OrderStatus.PENDING,
    ) -> Order:
        """Persist a new purchase order. items: [{ingredient_id, qty, unit_cost}]."""
        order = PurchaseOrder(
            id=f"po-{uuid.uuid4().hex[:12]}",
            vendor=vendor,
            status=status.value,
            delivery_date=delivery_date,
            total_cost=round_half_up(sum(i["qty"] * i["unit_cost"] for i in items), 2),
        )
        for item in items:
            order.items.append(PurchaseOrderItem(
                ingredient_id=item["ingredient_id"],
                qty=item["qty"],
                unit_cost=item["unit_cost"],
            ))
        self.db.add(order)
        commit_or_rollback(self.db, "create order")
        self.db.refresh(order)
        log.info(f"Created purchase order {order.id} for {vendor} ({len(items)} items)")
        return order_from_row(order)

    def update_status(self, order_id: str, new_status: OrderStatus) -> Order:
        row = self.db.query(PurchaseOrder).filter(PurchaseOrder.id == order_id).first()
        if row is None:
            raise NotFoundError(f"Order '{order_id}' not found")

        current = OrderStatus(row.status)
        if not current.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Cannot move order from {current.value} to {new_status.value}"
            )
        row.status = new_status.value
        row.updated_at = datetime.utcnow()
        commit_or_rollback(self.db, "update order")
        self.db.refresh(row)
        log.info(f"Order {order_id}: {current.value} -> {new_status.value}")
        return order_from_row(row)
