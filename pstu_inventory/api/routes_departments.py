from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.crud import crud_base
from pstu_inventory.models.department import Department
from pstu_inventory.schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate
from pstu_inventory.models.user import User

router = APIRouter()


@router.post("/create", response_model=DepartmentOut, status_code=201)
def create_department(payload: DepartmentCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    if db.query(Department).filter(Department.name == payload.name).first():
        raise HTTPException(status_code=400, detail="Department with this name already exists.")
    return crud_base.create(db, Department, payload)


@router.get("/get", response_model=list[DepartmentOut])
def list_departments(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, Department)


@router.get("/get/{dept_id}", response_model=DepartmentOut)
def get_department(dept_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, Department, dept_id, "Department")


@router.put("/update/{dept_id}", response_model=DepartmentOut)
def update_department(dept_id: int, payload: DepartmentUpdate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    d = crud_base.get_or_404(db, Department, dept_id, "Department")
    if payload.name and payload.name != d.name:
        if db.query(Department).filter(Department.name == payload.name).first():
            raise HTTPException(status_code=400, detail="Department with this name already exists.")
    return crud_base.update(db, d, payload)


@router.delete("/delete/{dept_id}")
def delete_department(dept_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    d = crud_base.get_or_404(db, Department, dept_id, "Department")
    crud_base.delete(db, d)
    return {"message": "Department deleted successfully"}
