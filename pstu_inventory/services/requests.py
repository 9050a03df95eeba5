# FILE: pstu_inventory/services/requests.py
from __future__ import annotations

import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pstu_inventory.crud.crud_base import get_or_404
from pstu_inventory.models.requests import DeadStockRequest, RequestStatus, StockRequest
from pstu_inventory.models.stock import StockIn
from pstu_inventory.models.user import User
from pstu_inventory.schemas.stock import StockInCreate
from pstu_inventory.services.stock import DUPLICATE_INVOICE_DB_MSG, create_stock_in

logger = logging.getLogger(__name__)

PENDING = RequestStatus.PENDING.value
APPROVED = RequestStatus.APPROVED.value
REJECTED = RequestStatus.REJECTED.value


def total_of(quantity, unit_price) -> Decimal:
    return Decimal(str(quantity or 0)) * Decimal(str(unit_price or 0))


def _ensure_pending(status: str) -> None:
    if status != PENDING:
        raise HTTPException(status_code=400, detail=f"Request already {status}")


# =========================================================
# Dead-stock requests
# =========================================================
def set_dead_stock_request_status(db: Session, request_id: int,
                                  status: str) -> DeadStockRequest:
    row = get_or_404(db, DeadStockRequest, request_id, "Dead stock request")
    _ensure_pending(row.status)
    row.status = status
    db.commit()
    db.refresh(row)
    logger.info("Dead stock request %s %s", row.id, status)
    return row


# =========================================================
# Stock-in requests
# =========================================================
def mark_reviewed(row: StockRequest, reviewer: Optional[User], status: str,
                  admin_note: Optional[str] = None) -> None:
    now = datetime.utcnow()
    row.status = status
    row.reviewed_by_id = reviewer.id if reviewer else None
    row.reviewed_at = now
    if status == APPROVED:
        row.approved_at = now
    if admin_note is not None:
        row.admin_note = admin_note


def approve_stock_request(
    db: Session,
    request_id: int,
    reviewer: User,
    *,
    invoice_no: Optional[str] = None,
    admin_note: Optional[str] = None,
) -> Tuple[StockRequest, StockIn, StockInCreate]:
    """
    Turn a pending request into a real StockIn booked to the requester's
    department (teacher) or office (staff).
    Returns (request, stock_in, stock_in_payload); the payload is what the
    caller records in the ledger.
    """
    row = get_or_404(db, StockRequest, request_id, "Stock request")
    _ensure_pending(row.status)

    requester = db.get(User, row.user_id)
    if not requester:
        raise HTTPException(status_code=400, detail="Requesting user not found")
    if not requester.department_id and not requester.office_id:
        raise HTTPException(
            status_code=400,
            detail="Cannot create stock-in: requester has no department_id or office_id.",
        )

    invoice = (invoice_no or row.invoice_no or "").strip()
    if not invoice:
        invoice = f"{row.item_id}-{int(time.time() * 1000)}"

    stock_payload = StockInCreate(
        user_id=row.user_id,
        department_id=requester.department_id,
        office_id=requester.office_id,
        item_id=row.item_id,
        supplier_id=row.supplier_id,
        quantity=row.quantity,
        unit_price=float(row.unit_price or 0),
        total_price=float(total_of(row.quantity, row.unit_price)),
        purchase_date=(row.requested_at or datetime.utcnow()).date(),
        invoice_no=invoice,
        remarks=row.description or f"Approved stock request #{row.id}",
    )

    stock_in = create_stock_in(db, stock_payload, commit=False)
    mark_reviewed(row, reviewer, APPROVED, admin_note)
    row.invoice_no = invoice

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if "invoice_no" in str(exc.orig):
            raise HTTPException(status_code=409, detail=DUPLICATE_INVOICE_DB_MSG)
        raise

    db.refresh(row)
    db.refresh(stock_in)
    logger.info("Stock request %s approved into stock-in %s", row.id, stock_in.id)
    return row, stock_in, stock_payload


def reject_stock_request(db: Session, request_id: int, reviewer: User, *,
                         admin_note: Optional[str] = None) -> StockRequest:
    row = get_or_404(db, StockRequest, request_id, "Stock request")
    _ensure_pending(row.status)
    mark_reviewed(row, reviewer, REJECTED, admin_note)
    db.commit()
    db.refresh(row)
    logger.info("Stock request %s rejected", row.id)
    return row
