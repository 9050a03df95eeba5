# FILE: pstu_inventory/services/reports.py
"""
Stock aggregations: per-item totals, the current-stock table, the
department report and dashboard counters.

current stock = stock in - stock out - dead stock
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from pstu_inventory.crud.crud_base import get_or_404
from pstu_inventory.models.catalog import Category, Item, Supplier
from pstu_inventory.models.department import Department, Office
from pstu_inventory.models.requests import DeadStockRequest, RequestStatus, StockRequest
from pstu_inventory.models.stock import CurrentStockIn, DeadStock, StockIn, StockOut
from pstu_inventory.models.user import User, UserRole

MOVEMENTS = (
    ("stock_in", StockIn),
    ("stock_out", StockOut),
    ("dead_stock", DeadStock),
)


def _total(db: Session, model, *filters) -> int:
    q = db.query(func.coalesce(func.sum(model.quantity), 0))
    if filters:
        q = q.filter(*filters)
    return int(q.scalar() or 0)


def _totals_by_item(db: Session, model, *filters) -> Dict[int, int]:
    q = db.query(model.item_id, func.coalesce(func.sum(model.quantity), 0))
    if filters:
        q = q.filter(*filters)
    return {item_id: int(qty or 0) for item_id, qty in q.group_by(model.item_id).all()}


def _with_current(row: Dict[str, Any]) -> Dict[str, Any]:
    row["current_stock"] = row["stock_in"] - row["stock_out"] - row["dead_stock"]
    return row


def item_stats(db: Session, item_id: int) -> Dict[str, Any]:
    get_or_404(db, Item, item_id, "Item")
    row = {"item_id": item_id}
    for key, model in MOVEMENTS:
        row[key] = _total(db, model, model.item_id == item_id)
    return _with_current(row)


def _stock_rows(db: Session, department_id: Optional[int] = None) -> List[Dict[str, Any]]:
    sums: Dict[str, Dict[int, int]] = {}
    for key, model in MOVEMENTS:
        filters = [model.department_id == department_id] if department_id is not None else []
        sums[key] = _totals_by_item(db, model, *filters)

    items = (db.query(Item, Category.name).outerjoin(
        Category, Item.category_id == Category.id).order_by(Item.name.asc(), Item.id.asc()).all())

    rows: List[Dict[str, Any]] = []
    for item, category_name in items:
        row = {
            "item_id": item.id,
            "item_name": item.name,
            "category_name": category_name,
            "unit": item.unit,
        }
        for key, _ in MOVEMENTS:
            row[key] = sums[key].get(item.id, 0)
        if department_id is not None and not any(row[k] for k, _ in MOVEMENTS):
            # no movement in this department
            continue
        rows.append(_with_current(row))
    return rows


def current_stock(db: Session) -> List[Dict[str, Any]]:
    return _stock_rows(db)


def department_report(db: Session, department_id: int) -> Dict[str, Any]:
    dept = db.get(Department, department_id)
    if not dept:
        raise HTTPException(status_code=404, detail="Department not found")

    rows = _stock_rows(db, department_id=department_id)
    totals = {key: sum(r[key] for r in rows) for key in ("stock_in", "stock_out", "dead_stock", "current_stock")}
    return {
        "department_id": dept.id,
        "department_name": dept.name,
        "rows": rows,
        "totals": totals,
    }


def dashboard(db: Session) -> Dict[str, Any]:

    def count(model, *filters) -> int:
        q = db.query(func.count(model.id))
        if filters:
            q = q.filter(*filters)
        return int(q.scalar() or 0)

    totals = {key: _total(db, model) for key, model in MOVEMENTS}
    totals["current_stock"] = totals["stock_in"] - totals["stock_out"] - totals["dead_stock"]
    totals["held_by_users"] = _total(db, CurrentStockIn)

    pending = RequestStatus.PENDING.value
    return {
        "counts": {
            "departments": count(Department),
            "offices": count(Office),
            "suppliers": count(Supplier),
            "categories": count(Category),
            "items": count(Item),
            "users": count(User),
            "teachers": count(User, User.role == UserRole.TEACHER.value),
            "staff": count(User, User.role == UserRole.STAFF.value),
        },
        "totals": totals,
        "pending_requests": {
            "dead_stock": count(DeadStockRequest, DeadStockRequest.status == pending),
            "stock_in": count(StockRequest, StockRequest.status == pending),
        },
    }
