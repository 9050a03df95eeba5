# FILE: pstu_inventory/models/stock.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from pstu_inventory.db.base import Base, TimestampMixin

Money = Numeric(14, 2)


# -------------------------
# Receipts
# -------------------------
class StockIn(TimestampMixin, Base):
    __tablename__ = "stock_ins"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    office_id = Column(Integer, ForeignKey("offices.id"), nullable=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)

    quantity = Column(Integer, nullable=False, default=0)
    unit_price = Column(Money, nullable=False, default=0)
    total_price = Column(Money, nullable=False, default=0)
    purchase_date = Column(Date, nullable=True)
    invoice_no = Column(String(50), unique=True, nullable=False, index=True)
    remarks = Column(Text, nullable=True)

    user = relationship("User")
    item = relationship("Item")
    supplier = relationship("Supplier")


class CurrentStockIn(TimestampMixin, Base):
    """
    Running balance of what a user currently holds per item.
    Exactly one row per (user_id, item_id).
    """
    __tablename__ = "current_stock_ins"
    __table_args__ = (UniqueConstraint("user_id", "item_id", name="uq_current_stock_in_user_item"), )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True)
    office_id = Column(Integer, ForeignKey("offices.id"), nullable=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)

    quantity = Column(Integer, nullable=False, default=0)
    unit_price = Column(Money, nullable=False, default=0)
    total_price = Column(Money, nullable=False, default=0)
    purchase_date = Column(Date, nullable=True)
    invoice_no = Column(String(50), nullable=True)
    remarks = Column(Text, nullable=True)


# -------------------------
# Issues
# -------------------------
class StockOut(TimestampMixin, Base):
    __tablename__ = "stock_outs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    office_id = Column(Integer, ForeignKey("offices.id"), nullable=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=True, index=True)

    issue_type = Column(String(50), default="")
    issue_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    issue_date = Column(Date, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    remarks = Column(Text, nullable=True)

    item = relationship("Item")


class CurrentStockOut(TimestampMixin, Base):
    __tablename__ = "current_stock_outs"
    __table_args__ = (UniqueConstraint("user_id", "item_id", name="uq_current_stock_out_user_item"), )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True)
    office_id = Column(Integer, ForeignKey("offices.id"), nullable=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)

    issue_type = Column(String(50), default="")
    issue_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    issue_date = Column(Date, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    remarks = Column(Text, nullable=True)


# -------------------------
# Write-offs
# -------------------------
class DeadStock(TimestampMixin, Base):
    __tablename__ = "dead_stocks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=True, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    office_id = Column(Integer, ForeignKey("offices.id"), nullable=True, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    reason = Column(String(1000), default="")
    reported_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    item = relationship("Item")


class StockHistory(TimestampMixin, Base):
    __tablename__ = "stock_histories"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=True, index=True)
    # STOCK_IN | STOCK_OUT | DEAD_STOCK | free text for manual rows
    action = Column(String(50), nullable=False, default="")
    reference_id = Column(Integer, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    performed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    date = Column(DateTime, default=datetime.utcnow, nullable=True)
