# FILE: pstu_inventory/api/response.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def message(msg: str, *, data: Any = None, status_code: int = 200,
            key: str = "data") -> JSONResponse:
    """
    Message wrapper used by write endpoints:
    {
      "message": "...",
      "data": ... (optional, key configurable e.g. "user")
    }
    """
    payload: Dict[str, Any] = {"message": msg}
    if data is not None:
        payload[key] = data
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def err(
    msg: str = "Something went wrong",
    *,
    status_code: int = 400,
    code: Optional[str] = None,
    details: Any = None,
) -> JSONResponse:
    """
    Standard error wrapper:
    {
      "ok": false,
      "error": {
        "msg": "...",
        "code": "...",
        "details": ...
      }
    }
    """
    payload: Dict[str, Any] = {
        "ok": False,
        "error": {
            "msg": msg,
            "code": code,
            "details": details,
        },
    }
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))
