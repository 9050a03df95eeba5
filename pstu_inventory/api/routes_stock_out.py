# FILE: pstu_inventory/api/routes_stock_out.py
from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user
from pstu_inventory.api.response import message
from pstu_inventory.crud import crud_base
from pstu_inventory.models.stock import StockOut
from pstu_inventory.models.user import User
from pstu_inventory.schemas.stock import StockOutCreate, StockOutOut, StockOutUpdate
from pstu_inventory.services import stock as stock_service
from pstu_inventory.services.ledger import capture_event
from pstu_inventory.services.notifications import notify_stock_out_issued

router = APIRouter()

COLLECTION = "StockOut"


def _after_stock_out(db: Session, background: BackgroundTasks, row: StockOut,
                     payload: StockOutCreate) -> None:
    capture_event(db, "STOCK_OUT", row.id, COLLECTION,
                  payload.model_dump(exclude_unset=True), user_id=row.issue_by or row.user_id)

    to_user = db.get(User, row.user_id) if row.user_id else None
    by_user = db.get(User, row.issue_by) if row.issue_by else None
    if not to_user and not by_user:
        return
    background.add_task(
        notify_stock_out_issued,
        to_name=to_user.name if to_user else "",
        to_email=to_user.email if to_user else "",
        by_name=by_user.name if by_user else "",
        by_email=by_user.email if by_user else "",
        item_name=row.item.name if row.item else None,
        quantity=row.quantity,
        issue_date=row.issue_date,
        remarks=row.remarks,
    )


@router.post("/create")
def create_stock_out(
    payload: StockOutCreate,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    row = stock_service.create_stock_out(db, payload)
    _after_stock_out(db, background, row, payload)
    return message("StockOut created successfully", data=StockOutOut.model_validate(row), status_code=201)


@router.post("/issue")
def issue_stock(
    payload: StockOutCreate,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    """
    StockOut + receiver's current stock-out + issuer's current stock-in,
    all or nothing.
    """
    row = stock_service.issue_stock(db, payload)
    _after_stock_out(db, background, row, payload)
    return message("Stock issued successfully", data=StockOutOut.model_validate(row), status_code=201)


@router.get("/get", response_model=list[StockOutOut])
def list_stock_outs(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, StockOut, newest_first=True)


@router.get("/get/{stock_out_id}", response_model=StockOutOut)
def get_stock_out(stock_out_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, StockOut, stock_out_id, "StockOut")


@router.get("/item/{item_id}", response_model=list[StockOutOut])
def stock_outs_by_item(item_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, StockOut, "item_id", item_id,
                                    "No StockOut records found for this item")


@router.get("/department/{department_id}", response_model=list[StockOutOut])
def stock_outs_by_department(department_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, StockOut, "department_id", department_id,
                                    "No StockOut records found for this department")


@router.get("/office/{office_id}", response_model=list[StockOutOut])
def stock_outs_by_office(office_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, StockOut, "office_id", office_id,
                                    "No StockOut records found for this office")


@router.get("/user/{user_id}", response_model=list[StockOutOut])
def stock_outs_by_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, StockOut, "user_id", user_id,
                                    "No StockOut records found for this user")


@router.put("/update/{stock_out_id}", response_model=StockOutOut)
def update_stock_out(stock_out_id: int, payload: StockOutUpdate, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row = crud_base.get_or_404(db, StockOut, stock_out_id, "StockOut")
    return crud_base.update(db, row, payload)


@router.delete("/delete/{stock_out_id}")
def delete_stock_out(stock_out_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row = crud_base.get_or_404(db, StockOut, stock_out_id, "StockOut")
    crud_base.delete(db, row)
    return {"message": "StockOut deleted successfully"}
