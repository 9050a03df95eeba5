# FILE: pstu_inventory/models/requests.py
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from pstu_inventory.db.base import Base, TimestampMixin

Money = Numeric(14, 2)


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DeadStockRequest(TimestampMixin, Base):
    __tablename__ = "dead_stock_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    reason = Column(String(1000), nullable=False)
    image_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=RequestStatus.PENDING.value, index=True)
    reported_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User")
    item = relationship("Item")


class StockRequest(TimestampMixin, Base):
    """
    Stock-in request raised by a teacher/staff member; an admin approves it
    into a real StockIn.
    """
    __tablename__ = "stock_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=True)
    invoice_no = Column(String(50), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    unit_price = Column(Money, nullable=False, default=0)
    total_price = Column(Money, nullable=False, default=0)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    description = Column(String(500), nullable=True)
    image_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=RequestStatus.PENDING.value, index=True)
    admin_note = Column(String(500), nullable=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    requested_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])
    reviewed_by = relationship("User", foreign_keys=[reviewed_by_id])
