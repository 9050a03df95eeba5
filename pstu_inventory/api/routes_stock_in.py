# FILE: pstu_inventory/api/routes_stock_in.py
from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.api.response import message
from pstu_inventory.crud import crud_base
from pstu_inventory.models.stock import StockIn
from pstu_inventory.models.user import User
from pstu_inventory.schemas.stock import StockInCreate, StockInOut, StockInUpdate
from pstu_inventory.services import stock as stock_service
from pstu_inventory.services.ledger import capture_event
from pstu_inventory.services.notifications import notify_stock_in_created

logger = logging.getLogger(__name__)

router = APIRouter()

COLLECTION = "StockIn"


def queue_stock_in_email(background: BackgroundTasks, row: StockIn) -> None:
    """
    Collect plain values now; the session is gone when the task runs.
    """
    if not row.user or not row.user.email:
        return
    background.add_task(
        notify_stock_in_created,
        user_email=row.user.email,
        user_name=row.user.name,
        item_name=row.item.name if row.item else None,
        supplier_name=row.supplier.name if row.supplier else None,
        quantity=row.quantity,
        total_price=str(row.total_price),
        invoice_no=row.invoice_no,
        purchase_date=row.purchase_date,
    )


@router.post("/create")
def create_stock_in(
    payload: StockInCreate,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    me: User = Depends(require_admin),
):
    row = stock_service.create_stock_in(db, payload)

    capture_event(db, "STOCK_IN", row.id, COLLECTION,
                  payload.model_dump(exclude_unset=True), user_id=row.user_id)
    queue_stock_in_email(background, row)

    return message("StockIn created successfully",
                   data=StockInOut.model_validate(row),
                   status_code=201)


@router.get("/get", response_model=list[StockInOut])
def list_stock_ins(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, StockIn, newest_first=True)


@router.get("/get/{stock_in_id}", response_model=StockInOut)
def get_stock_in(stock_in_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, StockIn, stock_in_id, "StockIn")


@router.get("/item/{item_id}", response_model=list[StockInOut])
def stock_ins_by_item(item_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, StockIn, "item_id", item_id,
                                    "No StockIn records found for this item")


@router.get("/department/{department_id}", response_model=list[StockInOut])
def stock_ins_by_department(department_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, StockIn, "department_id", department_id,
                                    "No StockIn records found for this department")


@router.get("/office/{office_id}", response_model=list[StockInOut])
def stock_ins_by_office(office_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, StockIn, "office_id", office_id,
                                    "No StockIn records found for this office")


@router.get("/user/{user_id}", response_model=list[StockInOut])
def stock_ins_by_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, StockIn, "user_id", user_id,
                                    "No StockIn records found for this user")


@router.put("/update/{stock_in_id}", response_model=StockInOut)
def update_stock_in(
    stock_in_id: int,
    payload: StockInUpdate,
    db: Session = Depends(get_db),
    me: User = Depends(require_admin),
):
    row = stock_service.update_stock_in(db, stock_in_id, payload)
    body = payload.model_dump(exclude_unset=True)
    capture_event(db, "UPDATE", row.id, COLLECTION, body, user_id=body.get("user_id"))
    db.refresh(row)
    return row


@router.delete("/delete/{stock_in_id}")
def delete_stock_in(stock_in_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    snapshot = stock_service.delete_stock_in(db, stock_in_id)
    capture_event(db, "DELETE", stock_in_id, COLLECTION, snapshot,
                  user_id=snapshot.get("user_id"))
    return {"message": "StockIn deleted successfully"}
