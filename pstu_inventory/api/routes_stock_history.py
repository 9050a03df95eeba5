from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user
from pstu_inventory.crud import crud_base
from pstu_inventory.models.stock import StockHistory
from pstu_inventory.models.user import User
from pstu_inventory.schemas.stock import StockHistoryCreate, StockHistoryOut, StockHistoryUpdate

router = APIRouter()


@router.post("/create", response_model=StockHistoryOut, status_code=201)
def create_stock_history(payload: StockHistoryCreate, db: Session = Depends(get_db), me: User = Depends(current_user)):
    data = payload.model_dump()
    data["date"] = data.get("date") or datetime.utcnow()
    data["performed_by"] = data.get("performed_by") or me.id
    return crud_base.create(db, StockHistory, data)


@router.get("/get", response_model=list[StockHistoryOut])
def list_stock_histories(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, StockHistory, newest_first=True)


@router.get("/get/{history_id}", response_model=StockHistoryOut)
def get_stock_history(history_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, StockHistory, history_id, "StockHistory")


@router.put("/update/{history_id}", response_model=StockHistoryOut)
def update_stock_history(history_id: int, payload: StockHistoryUpdate, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row = crud_base.get_or_404(db, StockHistory, history_id, "StockHistory")
    return crud_base.update(db, row, payload)


@router.delete("/delete/{history_id}")
def delete_stock_history(history_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row = crud_base.get_or_404(db, StockHistory, history_id, "StockHistory")
    crud_base.delete(db, row)
    return {"message": "StockHistory deleted successfully"}
