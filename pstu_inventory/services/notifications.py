# FILE: pstu_inventory/services/notifications.py
"""
Best-effort e-mail notifications.

Every public function takes plain values (no ORM objects) so it can be queued
on FastAPI BackgroundTasks and run after the request session is closed.
Delivery failures are logged and never raised.
"""
from __future__ import annotations

import html
import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from pstu_inventory.core.config import settings
from pstu_inventory.core.emailer import email_configured, send_email

logger = logging.getLogger(__name__)

FOOTER = (
    '<p style="color: gray; font-size: 12px;">This message was automatically '
    "sent by the {project}.</p>")


def _e(value: Any, fallback: str = "N/A") -> str:
    if value is None or value == "":
        return fallback
    return html.escape(str(value))


def _fmt_date(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.strftime("%d/%m/%Y")
    return _e(value)


def _deliver(to_email: Optional[str], subject: str, text: str, body_html: str) -> bool:
    if not to_email:
        logger.info("Skipping email '%s': no recipient", subject)
        return False
    if not email_configured():
        logger.info("Email disabled, skipping '%s' to %s", subject, to_email)
        return False
    try:
        send_email(to_email, subject, text,
                   html=body_html + FOOTER.format(project=html.escape(settings.PROJECT_NAME)))
        return True
    except Exception:
        logger.exception("Error sending email '%s' to %s", subject, to_email)
        return False


def notify_stock_in_created(
    *,
    user_email: str,
    user_name: str,
    item_name: Optional[str],
    supplier_name: Optional[str],
    quantity: int,
    total_price: Any,
    invoice_no: str,
    purchase_date: Any,
) -> bool:
    body = f"""
        <h2>Hello, {_e(user_name)}!</h2>
        <p>A new <strong>StockIn</strong> entry was created.</p>
        <p><strong>Item:</strong> {_e(item_name)}</p>
        <p><strong>Supplier:</strong> {_e(supplier_name)}</p>
        <p><strong>Quantity:</strong> {_e(quantity)}</p>
        <p><strong>Total Price:</strong> {_e(total_price)}</p>
        <p><strong>Invoice No:</strong> {_e(invoice_no)}</p>
        <p><strong>Purchase Date:</strong> {_fmt_date(purchase_date)}</p>
    """
    text = (f"Hello {user_name}, a new StockIn entry was created "
            f"(invoice {invoice_no}, quantity {quantity}).")
    return _deliver(user_email, "New StockIn Entry Created", text, body)


def notify_stock_out_issued(
    *,
    to_name: str,
    to_email: str,
    by_name: str,
    by_email: str,
    item_name: Optional[str],
    quantity: int,
    issue_date: Any,
    remarks: Optional[str],
) -> int:
    details = f"""
        <p><strong>Item:</strong> {_e(item_name)}</p>
        <p><strong>Quantity:</strong> {_e(quantity)}</p>
        <p><strong>Issue Date:</strong> {_fmt_date(issue_date)}</p>
        <p><strong>Issued To:</strong> {_e(to_name)}</p>
        <p><strong>Issued By:</strong> {_e(by_name)}</p>
        <p><strong>Remarks:</strong> {_e(remarks)}</p>
        <p>You can log in to the system to see details.</p>
    """
    sent = 0
    if _deliver(
            to_email,
            "You have received a StockOut entry",
            f"Hello {to_name}, a StockOut entry has been issued to you by {by_name}.",
            f"<h2>Hello, {_e(to_name)}!</h2>"
            "<p>A new <strong>StockOut entry</strong> has been issued to you.</p>" + details,
    ):
        sent += 1
    if _deliver(
            by_email,
            "You issued a StockOut entry",
            f"Hello {by_name}, you have issued a StockOut entry to {to_name}.",
            f"<h2>Hello, {_e(by_name)}!</h2>"
            "<p>You have issued a new <strong>StockOut entry</strong>.</p>" + details,
    ):
        sent += 1
    return sent


def notify_dead_stock_reported(
    *,
    user_email: str,
    user_name: str,
    item_name: Optional[str],
    quantity: int,
    reason: Optional[str],
    reported_at: Any,
) -> bool:
    body = f"""
        <h2>Hello, {_e(user_name)}!</h2>
        <p>A new <strong>DeadStock report</strong> has been created in the system.</p>
        <p><strong>Item:</strong> {_e(item_name)}</p>
        <p><strong>Quantity:</strong> {_e(quantity)}</p>
        <p><strong>Reason:</strong> {_e(reason)}</p>
        <p><strong>Reported At:</strong> {_fmt_date(reported_at)}</p>
        <p>You can log in to the system to see details.</p>
    """
    text = f"Hello {user_name}, your DeadStock report has been recorded."
    return _deliver(user_email, "DeadStock Report Created", text, body)


def notify_account_created(*, name: str, email: str, role: str) -> bool:
    body = f"""
        <h2>Hello, {_e(name)}</h2>
        <p>Your account has been <strong>successfully created</strong> by
        <strong>{_e(settings.PROJECT_NAME)}</strong>.</p>
        <p><strong>Email:</strong> {_e(email)}</p>
        <p><strong>Role:</strong> {_e(role)}</p>
        <p>You can now log in and start using the system.</p>
    """
    text = (f"Hello {name}, your account has been successfully created by "
            f"{settings.PROJECT_NAME}.")
    return _deliver(email, "Account Created Successfully", text, body)


def notify_password_otp(*, email: str, otp: str, ttl_minutes: int) -> bool:
    text = f"Your OTP is {otp}. Valid for {ttl_minutes} minutes."
    body = f"<p>Your OTP is <strong>{_e(otp)}</strong>. Valid for {ttl_minutes} minutes.</p>"
    return _deliver(email, "Password Reset OTP", text, body)


def notify_tamper_alert(tampered_blocks: Iterable[Dict[str, Any]]) -> bool:
    blocks = list(tampered_blocks)
    if not settings.ALERT_EMAIL:
        logger.warning("ALERT_EMAIL not configured - tamper alert not sent")
        return False

    lines = "\n".join(
        f"Block #{b.get('index')}: {b.get('reason')} (ID: {b.get('block_id')})"
        for b in blocks)
    body = f"""
        <h2 style="color: red;">Ledger Integrity Violation Detected</h2>
        <p><strong>Time:</strong> {datetime.utcnow().isoformat()}Z</p>
        <p><strong>Tampered Blocks:</strong> {len(blocks)}</p>
        <pre style="background: #f5f5f5; padding: 10px; border-radius: 5px;">{html.escape(lines)}</pre>
        <p>Please investigate immediately.</p>
    """
    return _deliver(
        settings.ALERT_EMAIL,
        f"LEDGER TAMPER ALERT - {len(blocks)} blocks detected",
        f"{len(blocks)} ledger blocks failed verification:\n{lines}",
        body,
    )
