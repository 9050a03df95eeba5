from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.crud import crud_base
from pstu_inventory.models.catalog import Supplier
from pstu_inventory.schemas.catalog import SupplierCreate, SupplierOut, SupplierUpdate
from pstu_inventory.models.user import User

router = APIRouter()


@router.post("/create", response_model=SupplierOut, status_code=201)
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return crud_base.create(db, Supplier, payload)


@router.get("/get", response_model=list[SupplierOut])
def list_suppliers(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, Supplier)


@router.get("/get/{supplier_id}", response_model=SupplierOut)
def get_supplier(supplier_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, Supplier, supplier_id, "Supplier")


@router.put("/update/{supplier_id}", response_model=SupplierOut)
def update_supplier(supplier_id: int, payload: SupplierUpdate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    s = crud_base.get_or_404(db, Supplier, supplier_id, "Supplier")
    return crud_base.update(db, s, payload)


@router.delete("/delete/{supplier_id}")
def delete_supplier(supplier_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    s = crud_base.get_or_404(db, Supplier, supplier_id, "Supplier")
    crud_base.delete(db, s)
    return {"message": "Supplier deleted successfully"}
