# FILE: pstu_inventory/api/routes_reports.py
from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import List

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.crud import crud_base
from pstu_inventory.models.report import Report
from pstu_inventory.models.user import User
from pstu_inventory.schemas.report import (
    DashboardOut,
    DepartmentReportOut,
    ItemStatsOut,
    ReportCreate,
    ReportOut,
    ReportUpdate,
    StockRowOut,
)
from pstu_inventory.services import reports as report_service
from pstu_inventory.services.excel_export import build_current_stock_excel
from pstu_inventory.services.pdfs.stock_report_pdf import build_current_stock_pdf

router = APIRouter()


# -------------------- Saved reports --------------------
@router.post("/create", response_model=ReportOut, status_code=201)
def create_report(payload: ReportCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    data = payload.model_dump()
    data["generated_by"] = data.get("generated_by") or me.id
    data["generated_at"] = data.get("generated_at") or datetime.utcnow()
    return crud_base.create(db, Report, data)


@router.get("/get", response_model=List[ReportOut])
def list_reports(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.list_all(db, Report, newest_first=True)


@router.get("/get/{report_id}", response_model=ReportOut)
def get_report(report_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return crud_base.get_or_404(db, Report, report_id, "Report")


@router.put("/update/{report_id}", response_model=ReportOut)
def update_report(report_id: int, payload: ReportUpdate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    r = crud_base.get_or_404(db, Report, report_id, "Report")
    return crud_base.update(db, r, payload)


@router.delete("/delete/{report_id}")
def delete_report(report_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    r = crud_base.get_or_404(db, Report, report_id, "Report")
    crud_base.delete(db, r)
    return {"message": "Report deleted successfully"}


# -------------------- Aggregations --------------------
@router.get("/current-stock", response_model=List[StockRowOut])
def current_stock(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return report_service.current_stock(db)


@router.get("/current-stock/export")
def export_current_stock(
    format: str = Query("xlsx", pattern="^(xlsx|pdf)$"),
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    rows = report_service.current_stock(db)
    ts = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    filename_base = f"current_stock_{ts}"

    if format == "pdf":
        return StreamingResponse(
            BytesIO(build_current_stock_pdf(rows)),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename_base}.pdf"'},
        )

    bio = BytesIO()
    build_current_stock_excel(bio, rows)
    bio.seek(0)
    return StreamingResponse(
        bio,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename_base}.xlsx"'},
    )


@router.get("/department/{department_id}", response_model=DepartmentReportOut)
def department_report(department_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return report_service.department_report(db, department_id)


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return report_service.dashboard(db)


@router.get("/{item_id}/stats", response_model=ItemStatsOut)
def item_stats(item_id: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    return report_service.item_stats(db, item_id)
