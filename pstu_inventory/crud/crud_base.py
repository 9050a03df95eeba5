# FILE: pstu_inventory/crud/crud_base.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pstu_inventory.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


def get_or_404(db: Session, model: Type[ModelT], obj_id: int,
               label: str) -> ModelT:
    obj = db.get(model, obj_id)
    if not obj:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return obj


def list_all(db: Session, model: Type[ModelT], *, newest_first: bool = False) -> List[ModelT]:
    q = db.query(model)
    q = q.order_by(model.id.desc() if newest_first else model.id.asc())
    return q.all()


def list_by_or_404(
    db: Session,
    model: Type[ModelT],
    column: str,
    value: Any,
    not_found: str,
) -> List[ModelT]:
    """
    Filter by one column; an empty result is a 404 with `not_found`.
    """
    rows = (db.query(model).filter(getattr(model, column) == value).order_by(
        model.id.desc()).all())
    if not rows:
        raise HTTPException(status_code=404, detail=not_found)
    return rows


def create(db: Session, model: Type[ModelT], obj_in: BaseModel | Dict[str, Any]) -> ModelT:
    data = obj_in.model_dump() if isinstance(obj_in, BaseModel) else dict(obj_in)
    obj = model(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update(db: Session, obj: ModelT, obj_in: BaseModel | Dict[str, Any]) -> ModelT:
    """
    Partial update: only fields the client actually sent are applied.
    """
    if isinstance(obj_in, BaseModel):
        data = obj_in.model_dump(exclude_unset=True)
    else:
        data = dict(obj_in)
    for k, v in data.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj


def delete(db: Session, obj: ModelT) -> None:
    db.delete(obj)
    db.commit()


def require_exists(db: Session, model: Type[ModelT], obj_id: Optional[int],
                   label: str) -> Optional[ModelT]:
    """
    400 when a referenced id is given but unknown; None passes through.
    """
    if obj_id is None:
        return None
    obj = db.get(model, obj_id)
    if not obj:
        raise HTTPException(status_code=400, detail=f"{label} not found")
    return obj
