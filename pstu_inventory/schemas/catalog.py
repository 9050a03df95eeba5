# FILE: pstu_inventory/schemas/catalog.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------- Suppliers ----------
class SupplierBase(BaseModel):
    name: str
    contact_person: str | None = ""
    phone: str | None = ""
    email: str | None = ""
    address: str | None = ""


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None


class SupplierOut(SupplierBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Categories ----------
class CategoryBase(BaseModel):
    name: str
    description: str | None = ""


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class CategoryOut(CategoryBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ItemCategoryOut(BaseModel):
    item_id: int
    item_name: str
    category_id: int
    category_name: str


# ---------- Items ----------
class ItemBase(BaseModel):
    name: str
    description: str | None = ""
    category_id: int
    unit: str | None = "unit"
    price: Optional[float] = Field(None, ge=0)


class ItemCreate(ItemBase):
    pass


class ItemUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)


class ItemOut(ItemBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
