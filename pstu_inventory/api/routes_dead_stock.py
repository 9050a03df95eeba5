from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user
from pstu_inventory.api.response import message
from pstu_inventory.crud import crud_base
from pstu_inventory.models.stock import DeadStock
from pstu_inventory.models.user import User
from pstu_inventory.schemas.stock import DeadStockCreate, DeadStockOut, DeadStockUpdate
from pstu_inventory.services import stock as stock_service
from pstu_inventory.services.ledger import capture_event
from pstu_inventory.services.notifications import notify_dead_stock_reported

router = APIRouter()


@router.post("/create")
def create_dead_stock(
    payload: DeadStockCreate,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    row = stock_service.create_dead_stock(db, payload)
    capture_event(db, "DEAD_STOCK", row.id, "DeadStock",
                  payload.model_dump(exclude_unset=True), user_id=row.user_id)

    owner = db.get(User, row.user_id) if row.user_id else None
    if owner and owner.email:
        background.add_task(
            notify_dead_stock_reported,
            user_email=owner.email,
            user_name=owner.name,
            item_name=row.item.name if row.item else None,
            quantity=row.quantity,
            reason=row.reason,
            reported_at=row.reported_at,
        )

    return message("DeadStock created successfully", data=DeadStockOut.model_validate(row), status_code=201)


@router.get("/get", response_model=list[DeadStockOut])
def list_dead_stocks(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, DeadStock, newest_first=True)


@router.get("/get/{dead_stock_id}", response_model=DeadStockOut)
def get_dead_stock(dead_stock_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, DeadStock, dead_stock_id, "DeadStock")


@router.get("/item/{item_id}", response_model=list[DeadStockOut])
def dead_stocks_by_item(item_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, DeadStock, "item_id", item_id,
                                    "No DeadStock records found for this item")


@router.get("/department/{department_id}", response_model=list[DeadStockOut])
def dead_stocks_by_department(department_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, DeadStock, "department_id", department_id,
                                    "No DeadStock records found for this department")


@router.get("/office/{office_id}", response_model=list[DeadStockOut])
def dead_stocks_by_office(office_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, DeadStock, "office_id", office_id,
                                    "No DeadStock records found for this office")


@router.get("/user/{user_id}", response_model=list[DeadStockOut])
def dead_stocks_by_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_by_or_404(db, DeadStock, "user_id", user_id,
                                    "No DeadStock records found for this user")


@router.put("/update/{dead_stock_id}", response_model=DeadStockOut)
def update_dead_stock(dead_stock_id: int, payload: DeadStockUpdate, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row = crud_base.get_or_404(db, DeadStock, dead_stock_id, "DeadStock")
    return crud_base.update(db, row, payload)


@router.delete("/delete/{dead_stock_id}")
def delete_dead_stock(dead_stock_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row = crud_base.get_or_404(db, DeadStock, dead_stock_id, "DeadStock")
    crud_base.delete(db, row)
    return {"message": "DeadStock deleted successfully"}
