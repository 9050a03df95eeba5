# FILE: pstu_inventory/services/stock.py
"""
Stock movements: receipts (stock-in), issues (stock-out), write-offs
(dead stock) and the per-user running balances (current stock-in/out).

Functions here raise HTTPException for expected failures and leave ledger
capture and e-mail to the route, which runs them after the commit.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple, Type

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pstu_inventory.crud.crud_base import get_or_404, require_exists
from pstu_inventory.models.catalog import Item, Supplier
from pstu_inventory.models.department import Department, Office
from pstu_inventory.models.stock import (
    CurrentStockIn,
    CurrentStockOut,
    DeadStock,
    StockHistory,
    StockIn,
    StockOut,
)
from pstu_inventory.models.user import User, UserRole
from pstu_inventory.schemas.stock import (
    CurrentStockInCreate,
    CurrentStockOutCreate,
    DeadStockCreate,
    StockInCreate,
    StockInOut,
    StockInUpdate,
    StockOutCreate,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MSG = "All required fields must be provided."
DUPLICATE_INVOICE_MSG = "Invoice number already exists! Please use a unique invoice number."
DUPLICATE_INVOICE_DB_MSG = ("Invoice number already exists (database check). "
                            "Please use a unique invoice number.")

STOCK_IN_REQUIRED = (
    "user_id",
    "item_id",
    "supplier_id",
    "quantity",
    "unit_price",
    "total_price",
    "purchase_date",
    "invoice_no",
)
CURRENT_STOCK_OUT_REQUIRED = (
    "user_id",
    "item_id",
    "issue_type",
    "issue_by",
    "issue_date",
    "quantity",
)

ACTION_STOCK_IN = "STOCK_IN"
ACTION_STOCK_OUT = "STOCK_OUT"
ACTION_DEAD_STOCK = "DEAD_STOCK"


def _d(x: Any) -> Decimal:
    return Decimal(str(x if x is not None else 0))


def _blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def _check_required(data: Dict[str, Any], fields: Iterable[str],
                    msg: str = REQUIRED_FIELDS_MSG) -> None:
    if any(_blank(data.get(f)) for f in fields):
        raise HTTPException(status_code=400, detail=msg)


def _check_unit(data: Dict[str, Any]) -> None:
    # a movement belongs to a department or to an office
    if not data.get("department_id") and not data.get("office_id"):
        raise HTTPException(status_code=400, detail=REQUIRED_FIELDS_MSG)


def _check_positive(quantity: Any) -> None:
    if quantity is None or int(quantity) <= 0:
        raise HTTPException(status_code=400,
                            detail="Quantity must be greater than zero.")


def _check_unit_refs(db: Session, data: Dict[str, Any]) -> None:
    require_exists(db, Department, data.get("department_id"), "Department")
    require_exists(db, Office, data.get("office_id"), "Office")


def _flush_stock_in(db: Session) -> None:
    # only a unique clash on invoice_no is a duplicate invoice
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if "invoice_no" in str(exc.orig):
            raise HTTPException(status_code=409, detail=DUPLICATE_INVOICE_DB_MSG)
        raise


def record_history(
    db: Session,
    *,
    item_id: Optional[int],
    action: str,
    reference_id: Optional[int],
    quantity: int,
    performed_by: Optional[int],
) -> StockHistory:
    """
    Central creator for StockHistory rows; flushed with the movement that
    caused it and committed by the caller.
    """
    row = StockHistory(
        item_id=item_id,
        action=action,
        reference_id=reference_id,
        quantity=int(quantity or 0),
        performed_by=performed_by,
        date=datetime.utcnow(),
    )
    db.add(row)
    return row


def _commit_or_409(db: Session, detail: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=detail)


# =========================================================
# Stock in
# =========================================================
def create_stock_in(db: Session, payload: StockInCreate, *, commit: bool = True) -> StockIn:
    data = payload.model_dump()
    _check_required(data, STOCK_IN_REQUIRED)
    _check_unit(data)
    _check_positive(data["quantity"])

    require_exists(db, User, data["user_id"], "User")
    require_exists(db, Item, data["item_id"], "Item")
    require_exists(db, Supplier, data["supplier_id"], "Supplier")
    _check_unit_refs(db, data)

    invoice_no = str(data["invoice_no"]).strip()
    if db.query(StockIn.id).filter(StockIn.invoice_no == invoice_no).first():
        raise HTTPException(status_code=409, detail=DUPLICATE_INVOICE_MSG)
    data["invoice_no"] = invoice_no

    row = StockIn(**data)
    db.add(row)
    _flush_stock_in(db)

    record_history(
        db,
        item_id=row.item_id,
        action=ACTION_STOCK_IN,
        reference_id=row.id,
        quantity=row.quantity,
        performed_by=row.user_id,
    )

    if commit:
        db.commit()
        db.refresh(row)
    return row


def update_stock_in(db: Session, stock_in_id: int, payload: StockInUpdate) -> StockIn:
    row = get_or_404(db, StockIn, stock_in_id, "StockIn")
    data = payload.model_dump(exclude_unset=True)

    invoice_no = data.get("invoice_no")
    if invoice_no is not None:
        invoice_no = str(invoice_no).strip()
        if not invoice_no:
            raise HTTPException(status_code=400, detail="Invoice number cannot be empty.")
        clash = (db.query(StockIn.id).filter(StockIn.invoice_no == invoice_no,
                                             StockIn.id != row.id).first())
        if clash:
            raise HTTPException(status_code=409, detail=DUPLICATE_INVOICE_MSG)
        data["invoice_no"] = invoice_no

    if "quantity" in data:
        _check_positive(data["quantity"])

    require_exists(db, User, data.get("user_id"), "User")
    require_exists(db, Item, data.get("item_id"), "Item")
    require_exists(db, Supplier, data.get("supplier_id"), "Supplier")
    _check_unit_refs(db, data)

    for k, v in data.items():
        setattr(row, k, v)
    _flush_stock_in(db)
    db.commit()
    db.refresh(row)
    return row


def delete_stock_in(db: Session, stock_in_id: int) -> Dict[str, Any]:
    """
    Delete a stock-in and return a JSON snapshot of what was removed.
    """
    row = get_or_404(db, StockIn, stock_in_id, "StockIn")
    snapshot = StockInOut.model_validate(row).model_dump(mode="json")
    db.delete(row)
    db.commit()
    return snapshot


# =========================================================
# Current stock (running balances)
# =========================================================
def _locked_balance(db: Session, model: Type[Any], user_id: int, item_id: int):
    return (db.query(model).filter(model.user_id == user_id,
                                   model.item_id == item_id).with_for_update().first())


def upsert_current_stock_in(db: Session,
                            payload: CurrentStockInCreate) -> Tuple[CurrentStockIn, bool]:
    """
    Add to the (user, item) balance, creating it on first receipt.
    Returns (row, created).
    """
    data = payload.model_dump()
    _check_required(data, STOCK_IN_REQUIRED)
    _check_unit(data)
    _check_positive(data["quantity"])

    existing = _locked_balance(db, CurrentStockIn, data["user_id"], data["item_id"])
    if existing:
        existing.quantity = int(existing.quantity or 0) + int(data["quantity"])
        existing.total_price = _d(existing.unit_price) * existing.quantity
        db.commit()
        db.refresh(existing)
        return existing, False

    row = CurrentStockIn(**data)
    db.add(row)
    _commit_or_409(db, "Stock entry already exists for this user and item.")
    db.refresh(row)
    return row, True


def adjust_current_stock_in(
    db: Session,
    user_id: Optional[int],
    item_id: Optional[int],
    delta: Optional[int],
    *,
    commit: bool = True,
) -> CurrentStockIn:
    """
    quantity += delta (delta may be negative); never below zero.
    """
    if user_id is None or item_id is None or delta is None:
        raise HTTPException(status_code=400,
                            detail="user_id, item_id and quantity are required.")

    row = _locked_balance(db, CurrentStockIn, user_id, item_id)
    if not row:
        raise HTTPException(status_code=404,
                            detail="Stock entry not found for this user and item.")

    new_qty = int(row.quantity or 0) + int(delta)
    if new_qty < 0:
        raise HTTPException(status_code=400,
                            detail=f"Insufficient stock: only {row.quantity} available.")

    row.quantity = new_qty
    row.total_price = _d(row.unit_price) * new_qty
    if commit:
        db.commit()
        db.refresh(row)
    return row


def upsert_current_stock_out(db: Session,
                             payload: CurrentStockOutCreate,
                             *,
                             commit: bool = True) -> Tuple[CurrentStockOut, bool]:
    data = payload.model_dump()
    _check_required(data, CURRENT_STOCK_OUT_REQUIRED)
    _check_unit(data)
    _check_positive(data["quantity"])

    existing = _locked_balance(db, CurrentStockOut, data["user_id"], data["item_id"])
    if existing:
        existing.quantity = int(existing.quantity or 0) + int(data["quantity"])
        if commit:
            db.commit()
            db.refresh(existing)
        return existing, False

    row = CurrentStockOut(**data)
    db.add(row)
    if commit:
        _commit_or_409(db, "Stock entry already exists for this user and item.")
        db.refresh(row)
    else:
        db.flush()
    return row, True


def reduce_current_stock_out(db: Session, user_id: Optional[int],
                             item_id: Optional[int],
                             quantity: Optional[int]) -> CurrentStockOut:
    """
    quantity -= given; never below zero.
    """
    if user_id is None or item_id is None or quantity is None:
        raise HTTPException(status_code=400,
                            detail="user_id, item_id and quantity are required.")

    row = _locked_balance(db, CurrentStockOut, user_id, item_id)
    if not row:
        raise HTTPException(status_code=404,
                            detail="Stock entry not found for this user and item.")

    new_qty = int(row.quantity or 0) - int(quantity)
    if new_qty < 0:
        raise HTTPException(status_code=400,
                            detail=f"Insufficient stock: only {row.quantity} available.")
    row.quantity = new_qty
    db.commit()
    db.refresh(row)
    return row


def balance_quantities(db: Session, model: Type[Any], user_id: Optional[int],
                       item_id: Optional[int]) -> list[Dict[str, int]]:
    if user_id is None or item_id is None:
        raise HTTPException(status_code=400,
                            detail="user_id and item_id are required.")
    rows = (db.query(model.quantity).filter(model.user_id == user_id,
                                            model.item_id == item_id).all())
    if not rows:
        raise HTTPException(status_code=404,
                            detail="No stock found for this user and item.")
    return [{"quantity": int(q or 0)} for (q, ) in rows]


# =========================================================
# Stock out
# =========================================================
def _apply_role(db: Session, data: Dict[str, Any], role: Optional[str]) -> None:
    """
    Teachers receive into their department, staff into their office.
    When no role is sent the receiving user's own role decides.
    """
    if not role and data.get("user_id"):
        receiver = db.get(User, data["user_id"])
        role = receiver.role if receiver else None

    if role == UserRole.TEACHER.value:
        if not data.get("department_id"):
            raise HTTPException(status_code=400,
                                detail="Department ID is required for teachers")
        data["office_id"] = None
    elif role == UserRole.STAFF.value:
        if not data.get("office_id"):
            raise HTTPException(status_code=400,
                                detail="Office ID is required for staff")
        data["department_id"] = None


def create_stock_out(db: Session, payload: StockOutCreate, *, commit: bool = True) -> StockOut:
    data = payload.model_dump(exclude={"role"})
    _check_required(data, ("user_id", "item_id", "quantity"))
    _check_positive(data["quantity"])
    _apply_role(db, data, payload.role)

    require_exists(db, User, data["user_id"], "User")
    require_exists(db, Item, data["item_id"], "Item")
    require_exists(db, User, data.get("issue_by"), "Issuing user")
    _check_unit_refs(db, data)

    row = StockOut(**data)
    db.add(row)
    db.flush()

    record_history(
        db,
        item_id=row.item_id,
        action=ACTION_STOCK_OUT,
        reference_id=row.id,
        quantity=row.quantity,
        performed_by=row.issue_by or row.user_id,
    )

    if commit:
        db.commit()
        db.refresh(row)
    return row


def issue_stock(db: Session, payload: StockOutCreate) -> StockOut:
    """
    Issue items from `issue_by` to `user_id` in one transaction:
    decrement the issuer's current stock-in, record the StockOut and add to
    the receiver's current stock-out.
    """
    data = payload.model_dump()
    _check_required(data, CURRENT_STOCK_OUT_REQUIRED)
    _check_positive(data["quantity"])

    try:
        adjust_current_stock_in(db,
                                data["issue_by"],
                                data["item_id"],
                                -int(data["quantity"]),
                                commit=False)
        row = create_stock_out(db, payload, commit=False)
        upsert_current_stock_out(
            db,
            CurrentStockOutCreate(
                user_id=row.user_id,
                department_id=row.department_id,
                office_id=row.office_id,
                item_id=row.item_id,
                issue_type=row.issue_type,
                issue_by=row.issue_by,
                issue_date=row.issue_date,
                quantity=row.quantity,
                remarks=row.remarks,
            ),
            commit=False,
        )
        db.commit()
    except HTTPException:
        db.rollback()
        raise

    db.refresh(row)
    logger.info("Issued %s x item %s from user %s to user %s", row.quantity,
                row.item_id, row.issue_by, row.user_id)
    return row


# =========================================================
# Dead stock
# =========================================================
def create_dead_stock(db: Session, payload: DeadStockCreate) -> DeadStock:
    data = payload.model_dump()
    _check_required(data, ("user_id", "item_id", "quantity"))
    _check_positive(data["quantity"])
    if not data.get("reported_at"):
        data["reported_at"] = datetime.utcnow()

    require_exists(db, User, data["user_id"], "User")
    require_exists(db, Item, data["item_id"], "Item")
    _check_unit_refs(db, data)

    row = DeadStock(**data)
    db.add(row)
    db.flush()

    record_history(
        db,
        item_id=row.item_id,
        action=ACTION_DEAD_STOCK,
        reference_id=row.id,
        quantity=row.quantity,
        performed_by=row.user_id,
    )
    db.commit()
    db.refresh(row)
    return row
