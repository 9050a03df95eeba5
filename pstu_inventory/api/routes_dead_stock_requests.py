# FILE: pstu_inventory/api/routes_dead_stock_requests.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session, joinedload

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.api.response import message
from pstu_inventory.crud import crud_base
from pstu_inventory.models.requests import DeadStockRequest, RequestStatus
from pstu_inventory.models.user import User
from pstu_inventory.schemas.requests import DeadStockRequestOut
from pstu_inventory.services import requests as request_service
from pstu_inventory.utils.files import save_upload

router = APIRouter()

UPLOAD_MODULE = "deadstock"
STATUSES = {s.value for s in RequestStatus}


def _query(db: Session):
    return db.query(DeadStockRequest).options(
        joinedload(DeadStockRequest.user),
        joinedload(DeadStockRequest.item),
    )


def _get(db: Session, request_id: int) -> DeadStockRequest:
    row = _query(db).filter(DeadStockRequest.id == request_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Dead stock request not found")
    return row


@router.post("/create")
def create_dead_stock_request(
    user_id: Optional[int] = Form(None),
    item_id: Optional[int] = Form(None),
    quantity: Optional[int] = Form(None),
    reason: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    if not user_id or not item_id or not quantity or not (reason or "").strip():
        raise HTTPException(status_code=400, detail="Please fill all required fields.")
    if quantity < 1:
        raise HTTPException(status_code=400, detail="Quantity must be at least 1.")

    image_url = save_upload(image, UPLOAD_MODULE) if image is not None and image.filename else None

    row = DeadStockRequest(
        user_id=user_id,
        item_id=item_id,
        quantity=quantity,
        reason=reason.strip(),
        image_url=image_url,
        status=RequestStatus.PENDING.value,
    )
    db.add(row)
    db.commit()
    return message("Dead stock request submitted successfully",
                   data=DeadStockRequestOut.model_validate(_get(db, row.id)),
                   status_code=201)


@router.get("/get", response_model=List[DeadStockRequestOut])
def list_dead_stock_requests(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return _query(db).order_by(DeadStockRequest.reported_at.desc(), DeadStockRequest.id.desc()).all()


@router.get("/get/{request_id}", response_model=DeadStockRequestOut)
def get_dead_stock_request(request_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return _get(db, request_id)


@router.get("/status/{status}", response_model=List[DeadStockRequestOut])
def dead_stock_requests_by_status(status: str, db: Session = Depends(get_db), me: User = Depends(current_user)):
    status = status.lower()
    if status not in STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    return (_query(db).filter(DeadStockRequest.status == status).order_by(
        DeadStockRequest.reported_at.desc(), DeadStockRequest.id.desc()).all())


@router.get("/user/{user_id}", response_model=List[DeadStockRequestOut])
def dead_stock_requests_by_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return (_query(db).filter(DeadStockRequest.user_id == user_id).order_by(
        DeadStockRequest.reported_at.desc(), DeadStockRequest.id.desc()).all())


@router.put("/update/{request_id}", response_model=DeadStockRequestOut)
def update_dead_stock_request(
    request_id: int,
    item_id: Optional[int] = Form(None),
    quantity: Optional[int] = Form(None),
    reason: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    row = crud_base.get_or_404(db, DeadStockRequest, request_id, "Dead stock request")

    if item_id is not None:
        row.item_id = item_id
    if quantity is not None:
        if quantity < 1:
            raise HTTPException(status_code=400, detail="Quantity must be at least 1.")
        row.quantity = quantity
    if reason is not None:
        row.reason = reason.strip()
    if status is not None:
        status = status.lower()
        if status not in STATUSES:
            raise HTTPException(status_code=400, detail="Invalid status")
        if status != row.status and not me.is_admin:
            raise HTTPException(status_code=403, detail="Only admins can change the status")
        row.status = status
    if image is not None and image.filename:
        row.image_url = save_upload(image, UPLOAD_MODULE)

    db.commit()
    return _get(db, request_id)


@router.put("/approve/{request_id}", response_model=DeadStockRequestOut)
def approve_dead_stock_request(request_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    request_service.set_dead_stock_request_status(db, request_id, RequestStatus.APPROVED.value)
    return _get(db, request_id)


@router.put("/reject/{request_id}", response_model=DeadStockRequestOut)
def reject_dead_stock_request(request_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    request_service.set_dead_stock_request_status(db, request_id, RequestStatus.REJECTED.value)
    return _get(db, request_id)


@router.delete("/delete/{request_id}")
def delete_dead_stock_request(request_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row = crud_base.get_or_404(db, DeadStockRequest, request_id, "Dead stock request")
    crud_base.delete(db, row)
    return {"message": "Dead stock request deleted successfully"}
