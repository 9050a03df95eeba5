from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


# ---------- Departments ----------
class DepartmentBase(BaseModel):
    name: str
    code: str | None = ""
    description: str | None = ""
    faculty: str | None = ""


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    description: Optional[str] = None
    faculty: Optional[str] = None


class DepartmentOut(DepartmentBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Offices ----------
class OfficeBase(BaseModel):
    name: str
    description: str | None = ""
    section: str | None = ""


class OfficeCreate(OfficeBase):
    pass


class OfficeUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    section: Optional[str] = None


class OfficeOut(OfficeBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
