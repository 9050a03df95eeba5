from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.crud import crud_base
from pstu_inventory.models.department import Office
from pstu_inventory.schemas.department import OfficeCreate, OfficeOut, OfficeUpdate
from pstu_inventory.models.user import User

router = APIRouter()


@router.post("/create", response_model=OfficeOut, status_code=201)
def create_office(payload: OfficeCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return crud_base.create(db, Office, payload)


@router.get("/get", response_model=list[OfficeOut])
def list_offices(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, Office)


@router.get("/get/{office_id}", response_model=OfficeOut)
def get_office(office_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, Office, office_id, "Office")


@router.put("/update/{office_id}", response_model=OfficeOut)
def update_office(office_id: int, payload: OfficeUpdate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    o = crud_base.get_or_404(db, Office, office_id, "Office")
    return crud_base.update(db, o, payload)


@router.delete("/delete/{office_id}")
def delete_office(office_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    o = crud_base.get_or_404(db, Office, office_id, "Office")
    crud_base.delete(db, o)
    return {"message": "Office deleted successfully"}
