# pstu_inventory/schemas/user.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["admin", "teacher", "staff"]


class UserBase(BaseModel):
    name: str
    email: EmailStr
    role: Role
    phone_number: Optional[str] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    phone_number: Optional[str] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None
    password: Optional[str] = Field(None, min_length=6)


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: str
    phone_number: Optional[str] = None
    department_id: Optional[int] = None
    office_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserMiniOut(BaseModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ---------- Auth ----------
class LoginIn(BaseModel):
    email: str
    password: str


class LoginOut(BaseModel):
    token: str
    user: UserOut


class PasswordOtpRequestIn(BaseModel):
    email: str


class PasswordOtpVerifyIn(BaseModel):
    email: str
    otp: str


class PasswordUpdateIn(BaseModel):
    email: str
    new_password: str = Field(..., min_length=6)
