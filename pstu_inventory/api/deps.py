# pstu_inventory/api/deps.py
from __future__ import annotations

from typing import Callable, Generator, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from pstu_inventory.db.session import SessionLocal
from pstu_inventory.models.user import User
from pstu_inventory.utils.jwt import decode_token

PERMISSION_DENIED = "You do not have permission to perform this action."


# =========================================================
# DB (per request)
# =========================================================
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =========================================================
# AUTH HELPERS
# =========================================================
def _extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    raw = _extract_bearer(authorization)
    if not raw:
        raise HTTPException(status_code=401, detail="Missing token")

    payload = decode_token(raw)
    if payload is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    sub = payload.get("sub")
    if not sub or not str(sub).isdigit():
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = db.get(User, int(sub))
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_roles(*roles: str) -> Callable[..., User]:
    """
    Dependency factory: `me: User = Depends(require_roles("admin"))`.
    """
    allowed = set(roles)

    def _checker(me: User = Depends(current_user)) -> User:
        if me.role not in allowed:
            raise HTTPException(status_code=403, detail=PERMISSION_DENIED)
        return me

    return _checker


require_admin = require_roles("admin")
