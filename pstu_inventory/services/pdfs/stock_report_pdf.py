# FILE: pstu_inventory/services/pdfs/stock_report_pdf.py
from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from pstu_inventory.core.config import settings

TEXT = colors.HexColor("#0F172A")
MUTED = colors.HexColor("#475569")
BORDER = colors.HexColor("#E2E8F0")

COLUMNS = [
    ("Item", "item_name", 70 * mm),
    ("Category", "category_name", 50 * mm),
    ("Unit", "unit", 22 * mm),
    ("Stock In", "stock_in", 28 * mm),
    ("Stock Out", "stock_out", 28 * mm),
    ("Dead Stock", "dead_stock", 28 * mm),
    ("Current", "current_stock", 28 * mm),
]


def build_current_stock_pdf(rows: List[Dict[str, Any]], title: str = "Current Stock Report") -> bytes:
    bio = BytesIO()
    c = canvas.Canvas(bio, pagesize=landscape(A4))
    w, h = landscape(A4)

    x = 12 * mm
    top = h - 15 * mm

    def header(yy: float) -> float:
        c.setFillColor(TEXT)
        c.setFont("Helvetica-Bold", 12)
        c.drawString(x, yy, settings.PROJECT_NAME)
        yy -= 6 * mm
        c.setFont("Helvetica-Bold", 10)
        c.drawString(x, yy, title)
        c.setFont("Helvetica", 8)
        c.setFillColor(MUTED)
        c.drawRightString(w - x, yy, datetime.utcnow().strftime("Generated %d-%m-%Y %H:%M UTC"))
        yy -= 8 * mm
        return yy

    def draw_row(vals: List[str], yy: float, bold: bool = False):
        c.setFillColor(TEXT)
        c.setFont("Helvetica-Bold" if bold else "Helvetica", 8)
        xx = x
        for (_, _, width), v in zip(COLUMNS, vals):
            c.drawString(xx, yy, (v or "")[:40])
            xx += width
        c.setStrokeColor(BORDER)
        c.line(x, yy - 1.5 * mm, w - x, yy - 1.5 * mm)

    y = header(top)
    if not rows:
        c.setFont("Helvetica", 9)
        c.drawString(x, y, "No data")
        c.showPage()
        c.save()
        return bio.getvalue()

    draw_row([label for label, _, _ in COLUMNS], y, bold=True)
    y -= 6 * mm

    for r in rows:
        if y < 12 * mm:
            c.showPage()
            y = header(top)
            draw_row([label for label, _, _ in COLUMNS], y, bold=True)
            y -= 6 * mm
        draw_row(["" if r.get(key) is None else str(r.get(key)) for _, key, _ in COLUMNS], y)
        y -= 5 * mm

    c.showPage()
    c.save()
    return bio.getvalue()
