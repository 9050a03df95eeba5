# FILE: pstu_inventory/utils/otp_tokens.py
from __future__ import annotations

import secrets
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from pstu_inventory.models.otp import OtpToken


def _utcnow_naive() -> datetime:
    # MySQL DATETIME usually stored as naive; keep consistent
    return datetime.utcnow()


def generate_otp6() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


def issue_otp(
    db: Session,
    user_id: int,
    purpose: str,
    email: Optional[str] = None,
    ttl_minutes: int = 5,
) -> str:
    """
    Creates a fresh OTP row and retires any previous unused one for the same
    user and purpose, so only the newest code can ever verify.
    """
    (db.query(OtpToken).filter(
        OtpToken.user_id == user_id,
        OtpToken.purpose == purpose,
        OtpToken.used.is_(False),
    ).update({OtpToken.used: True}, synchronize_session=False))

    otp_code = generate_otp6()
    db.add(
        OtpToken(
            user_id=user_id,
            otp_code=otp_code,
            purpose=purpose,
            email=email,
            verified=False,
            used=False,
            expires_at=OtpToken.expiry(ttl_minutes),
            created_at=_utcnow_naive(),
        ))
    db.commit()
    return otp_code


def latest_otp(db: Session, user_id: int, purpose: str) -> Optional[OtpToken]:
    return (db.query(OtpToken).filter(
        OtpToken.user_id == user_id,
        OtpToken.purpose == purpose,
        OtpToken.used.is_(False),
    ).order_by(OtpToken.id.desc()).first())


def is_expired(row: OtpToken) -> bool:
    return bool(row.expires_at and row.expires_at < _utcnow_naive())
