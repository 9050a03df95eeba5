# FILE: pstu_inventory/schemas/requests.py
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from pstu_inventory.schemas.user import UserMiniOut


class ItemMiniOut(BaseModel):
    id: int
    name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ---------- Dead stock requests ----------
class DeadStockRequestOut(BaseModel):
    id: int
    user_id: int
    item_id: int
    quantity: int
    reason: str
    image_url: Optional[str] = None
    status: str
    reported_at: datetime
    created_at: datetime
    updated_at: datetime

    user: Optional[UserMiniOut] = None
    item: Optional[ItemMiniOut] = None

    model_config = ConfigDict(from_attributes=True)


# ---------- Stock-in requests ----------
class StockRequestOut(BaseModel):
    id: int
    user_id: int
    item_id: Optional[int] = None
    invoice_no: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float
    supplier_id: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    status: str
    admin_note: Optional[str] = None
    reviewed_by_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    requested_at: datetime
    created_at: datetime
    updated_at: datetime

    user: Optional[UserMiniOut] = None

    model_config = ConfigDict(from_attributes=True)


class RequestReviewIn(BaseModel):
    admin_note: Optional[str] = None


class StockRequestApproveIn(RequestReviewIn):
    # falls back to the request's own invoice, then "<item_id>-<timestamp>"
    invoice_no: Optional[str] = None


class StockRequestStatus(BaseModel):
    status: Literal["pending", "approved", "rejected"]
