from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user
from pstu_inventory.api.response import message
from pstu_inventory.crud import crud_base
from pstu_inventory.models.stock import CurrentStockOut
from pstu_inventory.models.user import User
from pstu_inventory.schemas.stock import (
    CurrentStockOutCreate,
    CurrentStockOutOut,
    QuantityAdjustIn,
    QuantityOut,
)
from pstu_inventory.services import stock as stock_service

router = APIRouter()


@router.post("/create")
def create_current_stock_out(payload: CurrentStockOutCreate, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row, created = stock_service.upsert_current_stock_out(db, payload)
    if created:
        return message("New stock entry created.", data=CurrentStockOutOut.model_validate(row), status_code=201)
    return message("Stock updated successfully.", data=CurrentStockOutOut.model_validate(row))


@router.get("/get", response_model=list[CurrentStockOutOut])
def list_current_stock_outs(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, CurrentStockOut)


@router.get("/quantity", response_model=list[QuantityOut])
def current_stock_out_quantity(
    user_id: Optional[int] = Query(None),
    item_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    return stock_service.balance_quantities(db, CurrentStockOut, user_id, item_id)


@router.get("/get/{row_id}", response_model=CurrentStockOutOut)
def get_current_stock_out(row_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, CurrentStockOut, row_id, "Current stock entry")


@router.put("/update-quantity")
def update_current_stock_out_quantity(payload: QuantityAdjustIn, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row = stock_service.reduce_current_stock_out(db, payload.user_id, payload.item_id, payload.quantity)
    return message("Quantity updated successfully.", data=CurrentStockOutOut.model_validate(row))
