# FILE: pstu_inventory/schemas/stock.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Create payloads keep every field optional on purpose: required-field checks
# happen in the service layer so the API answers 400 with the same message
# for any missing field.


# ---------- Stock in ----------
class StockInCreate(BaseModel):
    user_id: Optional[int] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None
    item_id: Optional[int] = None
    supplier_id: Optional[int] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    purchase_date: Optional[date] = None
    invoice_no: Optional[str] = None
    remarks: Optional[str] = None


class StockInUpdate(StockInCreate):
    pass


class StockInOut(BaseModel):
    id: int
    user_id: Optional[int] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None
    item_id: Optional[int] = None
    supplier_id: Optional[int] = None
    quantity: int
    unit_price: float
    total_price: float
    purchase_date: Optional[date] = None
    invoice_no: Optional[str] = None
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentStockInCreate(StockInCreate):
    pass


class CurrentStockInOut(StockInOut):
    pass


class QuantityAdjustIn(BaseModel):
    user_id: Optional[int] = None
    item_id: Optional[int] = None
    quantity: Optional[int] = None


class QuantityOut(BaseModel):
    quantity: int

    model_config = ConfigDict(from_attributes=True)


# ---------- Stock out ----------
class StockOutCreate(BaseModel):
    user_id: Optional[int] = None
    # role of the receiving user; decides department vs office
    role: Optional[str] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None
    item_id: Optional[int] = None
    issue_type: Optional[str] = None
    issue_by: Optional[int] = None
    issue_date: Optional[date] = None
    quantity: Optional[int] = None
    remarks: Optional[str] = None


class StockOutUpdate(BaseModel):
    user_id: Optional[int] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None
    item_id: Optional[int] = None
    issue_type: Optional[str] = None
    issue_by: Optional[int] = None
    issue_date: Optional[date] = None
    quantity: Optional[int] = None
    remarks: Optional[str] = None


class StockOutOut(BaseModel):
    id: int
    user_id: Optional[int] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None
    item_id: Optional[int] = None
    issue_type: Optional[str] = None
    issue_by: Optional[int] = None
    issue_date: Optional[date] = None
    quantity: int
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentStockOutCreate(StockOutUpdate):
    pass


class CurrentStockOutOut(StockOutOut):
    pass


# ---------- Dead stock ----------
class DeadStockCreate(BaseModel):
    user_id: Optional[int] = None
    item_id: Optional[int] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None
    quantity: Optional[int] = Field(None, gt=0)
    reason: Optional[str] = None
    reported_at: Optional[datetime] = None


class DeadStockUpdate(DeadStockCreate):
    pass


class DeadStockOut(BaseModel):
    id: int
    user_id: Optional[int] = None
    item_id: Optional[int] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None
    quantity: int
    reason: Optional[str] = None
    reported_at: datetime
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Stock history ----------
class StockHistoryCreate(BaseModel):
    item_id: Optional[int] = None
    action: str
    reference_id: Optional[int] = None
    quantity: int = 0
    performed_by: Optional[int] = None
    date: Optional[datetime] = None


class StockHistoryUpdate(BaseModel):
    item_id: Optional[int] = None
    action: Optional[str] = None
    reference_id: Optional[int] = None
    quantity: Optional[int] = None
    performed_by: Optional[int] = None
    date: Optional[datetime] = None


class StockHistoryOut(BaseModel):
    id: int
    item_id: Optional[int] = None
    action: str
    reference_id: Optional[int] = None
    quantity: int
    performed_by: Optional[int] = None
    date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
