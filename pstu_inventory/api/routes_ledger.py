# FILE: pstu_inventory/api/routes_ledger.py
from __future__ import annotations

import csv
import logging
from datetime import datetime
from io import StringIO
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pstu_inventory.api.deps import get_db, current_user, require_admin
from pstu_inventory.models.ledger import Block
from pstu_inventory.models.user import User
from pstu_inventory.schemas.ledger import (
    AuditTrailOut,
    BlockDetailOut,
    ChainOut,
    EventsOut,
    ForceVerifyOut,
    LedgerStatsOut,
    VerificationOut,
)
from pstu_inventory.services.ledger import ledger
from pstu_inventory.services.notifications import notify_tamper_alert

logger = logging.getLogger(__name__)

router = APIRouter()

EVENTS_LIMIT = 100


@router.get("/chain", response_model=ChainOut)
def get_chain(db: Session = Depends(get_db), me: User = Depends(current_user)):
    blocks = db.query(Block).order_by(Block.index.asc()).all()
    return {"success": True, "total_blocks": len(blocks), "blocks": blocks}


@router.get("/chain/verify", response_model=VerificationOut)
def verify_chain(db: Session = Depends(get_db), me: User = Depends(current_user)):
    result = ledger.verify_chain(db)
    return {
        "success": True,
        "is_valid": result["is_valid"],
        "tampered_blocks": result["tampered_blocks"],
        "verification_timestamp": datetime.utcnow(),
    }


@router.get("/block/{index}", response_model=BlockDetailOut)
def get_block(index: int, db: Session = Depends(get_db), me: User = Depends(current_user)):
    block = db.query(Block).filter(Block.index == index).first()
    if not block:
        raise HTTPException(status_code=404, detail="Block not found")
    return {"success": True, "block": block}


@router.get("/stats", response_model=LedgerStatsOut)
def ledger_stats(db: Session = Depends(get_db), me: User = Depends(current_user)):
    return {"success": True, **ledger.stats(db)}


@router.get("/events", response_model=EventsOut)
def list_events(
    event_type: Optional[str] = Query(None),
    collection_name: Optional[str] = Query(None),
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    q = db.query(Block)
    if event_type:
        q = q.filter(Block.event_type == event_type)
    if collection_name:
        q = q.filter(Block.collection_name == collection_name)
    if user_id is not None:
        q = q.filter(Block.user_id == user_id)
    events = q.order_by(Block.index.desc()).limit(EVENTS_LIMIT).all()
    return {"success": True, "count": len(events), "events": events}


@router.get("/audit/{event_id}", response_model=AuditTrailOut)
def audit_trail(
    event_id: str,
    collection_name: str = Query("StockIn"),
    db: Session = Depends(get_db),
    me: User = Depends(current_user),
):
    """
    Every block about one record, checked against the block that precedes
    each of them in the full chain.
    """
    trail = (db.query(Block).filter(Block.event_id == event_id,
                                    Block.collection_name == collection_name).order_by(
                                        Block.index.asc()).all())

    wanted = {b.index - 1 for b in trail if b.index > 1}
    predecessors = {}
    if wanted:
        predecessors = {
            b.index: b
            for b in db.query(Block).filter(Block.index.in_(wanted)).all()
        }

    return {
        "success": True,
        "item_id": event_id,
        "collection_name": collection_name,
        "audit_trail": trail,
        "count": len(trail),
        "verification": ledger.verify_trail(trail, predecessors),
    }


@router.post("/force-verify", response_model=ForceVerifyOut)
def force_verify(db: Session = Depends(get_db), me: User = Depends(require_admin)):
    result = ledger.verify_chain(db)
    alert_sent = False
    if not result["is_valid"]:
        logger.warning("Forced ledger verification found %s tampered block(s)",
                       len(result["tampered_blocks"]))
        alert_sent = notify_tamper_alert(result["tampered_blocks"])
    return {
        "success": True,
        "is_valid": result["is_valid"],
        "tampered_blocks": result["tampered_blocks"],
        "alert_sent": alert_sent,
    }


@router.get("/export/csv")
def export_csv(db: Session = Depends(get_db), me: User = Depends(require_admin)):
    buf = StringIO()
    writer = csv.writer(buf)
    writer.writerow(["Index", "Timestamp", "EventType", "CollectionName", "UserId", "IsVerified"])
    for b in db.query(Block).order_by(Block.index.asc()).all():
        writer.writerow([
            b.index,
            b.timestamp,
            b.event_type,
            b.collection_name,
            b.user_id if b.user_id is not None else "SYSTEM",
            "true" if b.is_verified else "false",
        ])

    return StreamingResponse(
        iter([buf.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="blockchain_audit.csv"'},
    )
