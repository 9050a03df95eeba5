from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ReportCreate(BaseModel):
    report_type: str
    generated_by: Optional[int] = None
    generated_at: Optional[datetime] = None


class ReportUpdate(BaseModel):
    report_type: Optional[str] = None
    generated_by: Optional[int] = None
    generated_at: Optional[datetime] = None


class ReportOut(BaseModel):
    id: int
    report_type: str
    generated_by: Optional[int] = None
    generated_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ItemStatsOut(BaseModel):
    item_id: int
    stock_in: int
    stock_out: int
    dead_stock: int
    current_stock: int


class StockRowOut(ItemStatsOut):
    item_name: str
    category_name: Optional[str] = None
    unit: Optional[str] = None


class DepartmentReportOut(BaseModel):
    department_id: int
    department_name: str
    rows: List[StockRowOut]
    totals: Dict[str, int]


class DashboardOut(BaseModel):
    counts: Dict[str, int]
    totals: Dict[str, int]
    pending_requests: Dict[str, int]
