"""
Purchase order models
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, Date, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from tacotrack.models.base import Base


class PurchaseOrder(Base):
    """Order placed with a vendor"""
    __tablename__ = "purchase_orders"

    id = Column(String, primary_key=True, index=True)
    vendor = Column(String, nullable=False, index=True)
    status = Column(String, default="pending", index=True)  # suggested, pending, confirmed, shipped, delivered, cancelled
    delivery_date = Column(Date, nullable=True)
    total_cost = Column(Float, default=0.0)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship(
        "PurchaseOrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )


class PurchaseOrderItem(Base):
    """Line item on a purchase order"""
    __tablename__ = "purchase_order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String, ForeignKey("purchase_orders.id"), index=True, nullable=False)
    ingredient_id = Column(String, index=True, nullable=False)
    qty = Column(Float, nullable=False)
    unit_cost = Column(Float, default=0.0)

    order = relationship("PurchaseOrder", back_populates="items")
