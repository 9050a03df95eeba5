from __future__ import annotations

from typing import Any, Dict, Iterable

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

STOCK_HEADERS = [
    "Item ID", "Item", "Category", "Unit",
    "Stock In", "Stock Out", "Dead Stock", "Current Stock",
]


def _int(x) -> int:
    try:
        return int(x or 0)
    except (TypeError, ValueError):
        return 0


def build_current_stock_excel(fp, rows: Iterable[Dict[str, Any]]):
    wb = Workbook()
    ws = wb.active
    ws.title = "Current Stock"

    ws.append(STOCK_HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for r in rows:
        ws.append([
            r.get("item_id"),
            r.get("item_name") or "",
            r.get("category_name") or "",
            r.get("unit") or "",
            _int(r.get("stock_in")),
            _int(r.get("stock_out")),
            _int(r.get("dead_stock")),
            _int(r.get("current_stock")),
        ])

    for col in range(1, len(STOCK_HEADERS) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 18
    ws.column_dimensions["B"].width = 32

    wb.save(fp)
