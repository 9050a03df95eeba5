# FILE: pstu_inventory/api/routes_stock_requests.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session, joinedload

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.api.response import message
from pstu_inventory.api.routes_stock_in import COLLECTION as STOCK_IN_COLLECTION, queue_stock_in_email
from pstu_inventory.crud import crud_base
from pstu_inventory.models.requests import RequestStatus, StockRequest
from pstu_inventory.models.user import User
from pstu_inventory.schemas.requests import RequestReviewIn, StockRequestApproveIn, StockRequestOut
from pstu_inventory.schemas.stock import StockInOut
from pstu_inventory.services import requests as request_service
from pstu_inventory.services.ledger import capture_event
from pstu_inventory.utils.files import save_upload

router = APIRouter()

UPLOAD_MODULE = "stockrequests"
STATUSES = {s.value for s in RequestStatus}


def _get(db: Session, request_id: int) -> StockRequest:
    row = (db.query(StockRequest).options(joinedload(StockRequest.user)).filter(
        StockRequest.id == request_id).first())
    if not row:
        raise HTTPException(status_code=404, detail="Stock request not found")
    return row


def _check_description(description: Optional[str]) -> None:
    if description and len(description) > 500:
        raise HTTPException(status_code=400, detail="Description must be at most 500 characters.")


@router.post("/create")
def create_stock_request(
    user_id: Optional[int] = Form(None),
    item_id: Optional[int] = Form(None),
    invoice_no: Optional[str] = Form(None),
    quantity: Optional[int] = Form(None),
    unit_price: Optional[float] = Form(None),
    supplier_id: Optional[int] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="Product image is required.")
    if (not user_id or not item_id or not (invoice_no or "").strip() or not quantity
            or unit_price is None or not supplier_id):
        raise HTTPException(status_code=400, detail="Please fill all required fields.")
    if quantity < 1 or unit_price < 0:
        raise HTTPException(status_code=400, detail="Quantity and unit price must be positive.")
    _check_description(description)

    row = StockRequest(
        user_id=user_id,
        item_id=item_id,
        invoice_no=invoice_no.strip(),
        quantity=quantity,
        unit_price=unit_price,
        total_price=request_service.total_of(quantity, unit_price),
        supplier_id=supplier_id,
        description=description,
        image_url=save_upload(image, UPLOAD_MODULE),
        status=RequestStatus.PENDING.value,
    )
    db.add(row)
    db.commit()
    return message("Stock request submitted successfully",
                   data=StockRequestOut.model_validate(_get(db, row.id)),
                   status_code=201)


@router.get("/get", response_model=List[StockRequestOut])
def list_stock_requests(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return (db.query(StockRequest).options(joinedload(StockRequest.user)).order_by(
        StockRequest.requested_at.desc(), StockRequest.id.desc()).all())


@router.get("/get/{request_id}", response_model=StockRequestOut)
def get_stock_request(request_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return _get(db, request_id)


@router.put("/update/{request_id}", response_model=StockRequestOut)
def update_stock_request(
    request_id: int,
    item_id: Optional[int] = Form(None),
    invoice_no: Optional[str] = Form(None),
    quantity: Optional[int] = Form(None),
    unit_price: Optional[float] = Form(None),
    supplier_id: Optional[int] = Form(None),
    description: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    admin_note: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    row = crud_base.get_or_404(db, StockRequest, request_id, "Stock request")
    _check_description(description)

    if item_id is not None:
        row.item_id = item_id
    if invoice_no is not None:
        row.invoice_no = invoice_no.strip()
    if supplier_id is not None:
        row.supplier_id = supplier_id
    if description is not None:
        row.description = description
    if quantity is not None:
        row.quantity = quantity
    if unit_price is not None:
        row.unit_price = unit_price
    if quantity is not None and unit_price is not None:
        row.total_price = request_service.total_of(quantity, unit_price)
    if image is not None and image.filename:
        row.image_url = save_upload(image, UPLOAD_MODULE)
    if admin_note is not None:
        row.admin_note = admin_note

    if status is not None:
        status = status.lower()
        if status not in STATUSES:
            raise HTTPException(status_code=400, detail="Invalid status")
        if status != row.status:
            if not me.is_admin:
                raise HTTPException(status_code=403, detail="Only admins can change the status")
            if status == RequestStatus.PENDING.value:
                row.status = status
            else:
                request_service.mark_reviewed(row, me, status)

    db.commit()
    return _get(db, request_id)


@router.put("/approve/{request_id}")
def approve_stock_request(
    request_id: int,
    background: BackgroundTasks,
    payload: Optional[StockRequestApproveIn] = Body(None),
    db: Session = Depends(get_db),
    me: User = Depends(require_admin),
):
    payload = payload or StockRequestApproveIn()
    row, stock_in, stock_payload = request_service.approve_stock_request(
        db,
        request_id,
        me,
        invoice_no=payload.invoice_no,
        admin_note=payload.admin_note,
    )

    capture_event(db, "STOCK_IN", stock_in.id, STOCK_IN_COLLECTION,
                  stock_payload.model_dump(), user_id=stock_in.user_id)
    queue_stock_in_email(background, stock_in)

    return {
        "message": "Stock request approved",
        "request": StockRequestOut.model_validate(_get(db, row.id)),
        "stock_in": StockInOut.model_validate(stock_in),
    }


@router.put("/reject/{request_id}", response_model=StockRequestOut)
def reject_stock_request(
    request_id: int,
    payload: Optional[RequestReviewIn] = Body(None),
    db: Session = Depends(get_db),
    me: User = Depends(require_admin),
):
    payload = payload or RequestReviewIn()
    request_service.reject_stock_request(db, request_id, me, admin_note=payload.admin_note)
    return _get(db, request_id)


@router.delete("/delete/{request_id}")
def delete_stock_request(request_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    row = crud_base.get_or_404(db, StockRequest, request_id, "Stock request")
    crud_base.delete(db, row)
    return {"message": "Stock request deleted successfully"}
