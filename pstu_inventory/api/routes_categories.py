from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.crud import crud_base
from pstu_inventory.models.catalog import Category, Item
from pstu_inventory.schemas.catalog import CategoryCreate, CategoryOut, CategoryUpdate, ItemCategoryOut
from pstu_inventory.models.user import User

router = APIRouter()


@router.post("/create", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return crud_base.create(db, Category, payload)


@router.get("/get", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, Category)


@router.get("/get/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, Category, category_id, "Category")


@router.get("/category/{item_id}", response_model=ItemCategoryOut)
def get_category_by_item(item_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    item = db.get(Item, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    category = db.get(Category, item.category_id) if item.category_id else None
    if not category:
        raise HTTPException(status_code=404, detail="Category not found for this item")
    return ItemCategoryOut(
        item_id=item.id,
        item_name=item.name,
        category_id=category.id,
        category_name=category.name,
    )


@router.put("/update/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    c = crud_base.get_or_404(db, Category, category_id, "Category")
    return crud_base.update(db, c, payload)


@router.delete("/delete/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    c = crud_base.get_or_404(db, Category, category_id, "Category")
    if db.query(Item.id).filter(Item.category_id == c.id).first():
        raise HTTPException(status_code=409, detail="Category is used by existing items")
    crud_base.delete(db, c)
    return {"message": "Category deleted successfully"}
