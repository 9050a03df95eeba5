# FILE: pstu_inventory/services/otp_service.py
from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from pstu_inventory.core.config import settings
from pstu_inventory.core.security import hash_password
from pstu_inventory.models.user import User
from pstu_inventory.utils.otp_tokens import issue_otp, is_expired, latest_otp

logger = logging.getLogger(__name__)

PURPOSE_PASSWORD_RESET = "password_reset"


def _user_by_email(db: Session, email: str) -> User:
    email = (email or "").strip().lower()
    user = db.query(User).filter(func.lower(User.email) == email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def request_password_otp(db: Session, email: str) -> tuple[User, str]:
    """
    Issue a password-reset OTP for the account behind `email`.
    The caller is responsible for delivering the code.
    """
    user = _user_by_email(db, email)
    otp = issue_otp(
        db,
        user_id=int(user.id),
        purpose=PURPOSE_PASSWORD_RESET,
        email=str(user.email),
        ttl_minutes=settings.PASSWORD_OTP_TTL_MINUTES,
    )
    logger.info("Password reset OTP issued for user %s", user.id)
    return user, otp


def verify_password_otp(db: Session, email: str, otp_code: str) -> None:
    user = _user_by_email(db, email)
    row = latest_otp(db, int(user.id), PURPOSE_PASSWORD_RESET)
    if not row:
        raise HTTPException(status_code=400, detail="OTP not requested")
    if is_expired(row):
        raise HTTPException(status_code=400, detail="OTP expired")
    if str(row.otp_code) != str(otp_code or "").strip():
        raise HTTPException(status_code=400, detail="Invalid OTP")

    row.verified = True
    db.commit()


def update_password(db: Session, email: str, new_password: str) -> User:
    user = _user_by_email(db, email)
    row = latest_otp(db, int(user.id), PURPOSE_PASSWORD_RESET)
    if not row or not row.verified or is_expired(row):
        raise HTTPException(status_code=400, detail="OTP not verified")

    user.password_hash = hash_password(new_password)
    row.used = True
    db.commit()
    logger.info("Password updated for user %s", user.id)
    return user
