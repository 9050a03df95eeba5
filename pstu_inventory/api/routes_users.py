# FILE: pstu_inventory/api/routes_users.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.api.response import message
from pstu_inventory.core.config import settings
from pstu_inventory.core.security import hash_password, verify_password
from pstu_inventory.crud import crud_base
from pstu_inventory.models.department import Department, Office
from pstu_inventory.models.user import User, UserRole
from pstu_inventory.schemas.user import (
    LoginIn,
    LoginOut,
    PasswordOtpRequestIn,
    PasswordOtpVerifyIn,
    PasswordUpdateIn,
    UserCreate,
    UserOut,
    UserUpdate,
)
from pstu_inventory.services import otp_service
from pstu_inventory.services.notifications import notify_account_created, notify_password_otp
from pstu_inventory.utils.jwt import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter()


def _normalize_unit(db: Session, data: Dict[str, Any]) -> None:
    """
    Teachers keep only department_id, staff only office_id, admins neither
    required. Referenced department/office must exist.
    """
    role = data.get("role")
    if role == UserRole.TEACHER.value:
        if not data.get("department_id"):
            raise HTTPException(status_code=400, detail="Department is required for teachers")
        crud_base.require_exists(db, Department, data["department_id"], "Department")
        data["office_id"] = None
    elif role == UserRole.STAFF.value:
        if not data.get("office_id"):
            raise HTTPException(status_code=400, detail="Office is required for staff")
        crud_base.require_exists(db, Office, data["office_id"], "Office")
        data["department_id"] = None


def _email_taken(db: Session, email: str, exclude_id: int | None = None) -> bool:
    q = db.query(User.id).filter(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


# ---------------- Auth ----------------
@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    email = (payload.email or "").strip().lower()
    user = db.query(User).filter(func.lower(User.email) == email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid email or password")

    token = create_access_token(user_id=user.id, role=user.role)
    logger.info("User %s logged in", user.id)
    return LoginOut(token=token, user=UserOut.model_validate(user))


@router.post("/request-password-otp")
def request_password_otp(payload: PasswordOtpRequestIn, background: BackgroundTasks, db: Session = Depends(get_db)):
    user, otp = otp_service.request_password_otp(db, payload.email)
    background.add_task(
        notify_password_otp,
        email=user.email,
        otp=otp,
        ttl_minutes=settings.PASSWORD_OTP_TTL_MINUTES,
    )
    return {"message": "OTP sent to your email"}


@router.post("/verify-password-otp")
def verify_password_otp(payload: PasswordOtpVerifyIn, db: Session = Depends(get_db)):
    otp_service.verify_password_otp(db, payload.email, payload.otp)
    return {"message": "OTP verified"}


@router.post("/update-password")
def update_password(payload: PasswordUpdateIn, db: Session = Depends(get_db)):
    otp_service.update_password(db, payload.email, payload.new_password)
    return {"message": "Password updated successfully"}


# ---------------- Users ----------------
@router.post("/create")
def create_user(
    payload: UserCreate,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    me: User = Depends(require_admin),
):
    data = payload.model_dump()
    if not (data.get("phone_number") or "").strip():
        raise HTTPException(status_code=400, detail="Phone number is required")
    _normalize_unit(db, data)

    email = str(data["email"]).strip().lower()
    if _email_taken(db, email):
        raise HTTPException(status_code=409, detail="User with this email already exists")

    user = User(
        name=data["name"].strip(),
        email=email,
        password_hash=hash_password(data["password"]),
        role=data["role"],
        phone_number=data["phone_number"].strip(),
        department_id=data.get("department_id"),
        office_id=data.get("office_id"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    background.add_task(notify_account_created, name=user.name, email=user.email, role=user.role)
    return message("User created successfully", data=UserOut.model_validate(user), key="user", status_code=201)


@router.get("/get", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, User)


@router.get("/get-teachers", response_model=List[UserOut])
def list_teachers(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return db.query(User).filter(User.role == UserRole.TEACHER.value).order_by(User.name.asc()).all()


@router.get("/get-staff", response_model=List[UserOut])
def list_staff(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return db.query(User).filter(User.role == UserRole.STAFF.value).order_by(User.name.asc()).all()


@router.get("/get/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, User, user_id, "User")


@router.get("/getByName/{name}", response_model=UserOut)
def get_user_by_name(name: str, db: Session = Depends(get_db), me: User = Depends(current_user)):
    user = db.query(User).filter(func.lower(User.name) == name.strip().lower()).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put("/update/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    user = crud_base.get_or_404(db, User, user_id, "User")
    data = payload.model_dump(exclude_unset=True)

    if data.get("email"):
        data["email"] = str(data["email"]).strip().lower()
        if _email_taken(db, data["email"], exclude_id=user.id):
            raise HTTPException(status_code=409, detail="User with this email already exists")

    if "role" in data or "department_id" in data or "office_id" in data:
        merged = {
            "role": data.get("role", user.role),
            "department_id": data.get("department_id", user.department_id),
            "office_id": data.get("office_id", user.office_id),
        }
        _normalize_unit(db, merged)
        data.update(merged)

    password = data.pop("password", None)
    if password:
        user.password_hash = hash_password(password)

    for k, v in data.items():
        if v is None and k in ("name", "email", "role"):
            continue
        setattr(user, k, v)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/delete/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    user = crud_base.get_or_404(db, User, user_id, "User")
    if user.id == me.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    crud_base.delete(db, user)
    return {"message": "User deleted successfully"}
