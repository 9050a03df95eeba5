from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.crud import crud_base
from pstu_inventory.models.catalog import Category, Item
from pstu_inventory.schemas.catalog import ItemCreate, ItemOut, ItemUpdate
from pstu_inventory.models.user import User

router = APIRouter()


def _check_category(db: Session, category_id: int) -> None:
    if not db.get(Category, category_id):
        raise HTTPException(status_code=400, detail="Category not found")


@router.post("/create", response_model=ItemOut, status_code=201)
def create_item(payload: ItemCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    _check_category(db, payload.category_id)
    return crud_base.create(db, Item, payload)


@router.get("/get", response_model=list[ItemOut])
def list_items(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, Item)


@router.get("/get/{item_id}", response_model=ItemOut)
def get_item(item_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, Item, item_id, "Item")


@router.put("/update/{item_id}", response_model=ItemOut)
def update_item(item_id: int, payload: ItemUpdate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    it = crud_base.get_or_404(db, Item, item_id, "Item")
    if payload.category_id is not None:
        _check_category(db, payload.category_id)
    return crud_base.update(db, it, payload)


@router.delete("/delete/{item_id}")
def delete_item(item_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    it = crud_base.get_or_404(db, Item, item_id, "Item")
    crud_base.delete(db, it)
    return {"message": "Item deleted successfully"}
