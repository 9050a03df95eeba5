# FILE: pstu_inventory/services/ledger.py
"""
Append-only, hash-linked audit ledger.

Block N stores sha256(canonical content of N) as its hash, where the content
includes block N-1's hash (or GENESIS for the first block), and an
HMAC-SHA256 signature of that hash keyed with LEDGER_SIGNING_KEY.
Verification recomputes both and walks the links; anything that does not
line up is reported and the block is flagged is_verified = False.
"""
from __future__ import annotations

import hashlib
import hmac
import json
import logging
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy import func
from sqlalchemy.orm import Session

from pstu_inventory.core.config import settings
from pstu_inventory.models.ledger import Block

logger = logging.getLogger(__name__)

GENESIS = "GENESIS"

REASON_SIGNATURE = "Invalid HMAC signature"
REASON_HASH = "Hash mismatch - block contents altered"
REASON_LINK = "Previous hash mismatch - chain broken"
REASON_GAP = "Index gap - block missing"
REASON_UNVERIFIED = "Block marked as unverified"

# one appender at a time inside this process; the unique index column
# rejects a concurrent duplicate from another process
_append_lock = threading.Lock()


def canonical_json(data: Any) -> str:
    return json.dumps(data,
                      sort_keys=True,
                      separators=(",", ":"),
                      ensure_ascii=False,
                      default=str)


def normalize_payload(payload: Any) -> Any:
    """
    Convert a payload (dict, pydantic model, ORM-ish values) into the exact
    JSON structure that will be stored, so hashing before and after a
    database round trip sees the same thing.
    """
    if payload is None:
        return None
    return json.loads(canonical_json(jsonable_encoder(payload)))


def _utc_timestamp() -> str:
    return datetime.utcnow().isoformat(timespec="milliseconds") + "Z"


def _issue(block: Block, reason: str) -> Dict[str, Any]:
    return {"index": block.index, "reason": reason, "block_id": block.id}


class Ledger:

    def __init__(self, signing_key: str):
        self.signing_key = signing_key

    # ------------------------------------------------------------------
    # primitives
    # ------------------------------------------------------------------
    def calculate_hash(self, data: str) -> str:
        return hashlib.sha256(data.encode("utf-8")).hexdigest()

    def create_signature(self, block_hash: str) -> str:
        return hmac.new(self.signing_key.encode("utf-8"),
                        block_hash.encode("utf-8"),
                        hashlib.sha256).hexdigest()

    def verify_signature(self, block_hash: str, signature: str) -> bool:
        if not block_hash or not signature:
            return False
        expected = self.create_signature(block_hash)
        return hmac.compare_digest(expected.encode("utf-8"),
                                   str(signature).encode("utf-8"))

    def content_of(
        self,
        *,
        index: int,
        timestamp: str,
        event_type: str,
        event_id: str,
        collection_name: str,
        payload: Any,
        previous_hash: str,
    ) -> str:
        return canonical_json({
            "index": index,
            "timestamp": timestamp,
            "event_type": event_type,
            "event_id": event_id,
            "collection_name": collection_name,
            "payload": payload,
            "previous_hash": previous_hash,
        })

    def hash_block(self, block: Block) -> str:
        return self.calculate_hash(
            self.content_of(
                index=block.index,
                timestamp=block.timestamp,
                event_type=block.event_type,
                event_id=block.event_id,
                collection_name=block.collection_name,
                payload=block.payload,
                previous_hash=block.previous_hash,
            ))

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------
    def append(
        self,
        db: Session,
        *,
        event_type: str,
        event_id: Any,
        collection_name: str,
        payload: Any,
        user_id: Optional[int] = None,
    ) -> Block:
        """
        Append one block and commit it.
        """
        with _append_lock:
            last: Optional[Block] = (db.query(Block).order_by(
                Block.index.desc()).with_for_update().first())

            index = (last.index + 1) if last else 1
            previous_hash = last.hash if last else GENESIS
            timestamp = _utc_timestamp()
            event_id = str(event_id)
            payload = normalize_payload(payload)

            block_hash = self.calculate_hash(
                self.content_of(
                    index=index,
                    timestamp=timestamp,
                    event_type=event_type,
                    event_id=event_id,
                    collection_name=collection_name,
                    payload=payload,
                    previous_hash=previous_hash,
                ))

            block = Block(
                index=index,
                timestamp=timestamp,
                event_type=event_type,
                event_id=event_id,
                collection_name=collection_name,
                payload=payload,
                user_id=user_id,
                previous_hash=previous_hash,
                hash=block_hash,
                hmac_signature=self.create_signature(block_hash),
                is_verified=True,
            )
            db.add(block)
            db.commit()
            db.refresh(block)
            return block

    # ------------------------------------------------------------------
    # verification
    # ------------------------------------------------------------------
    def verify_chain(self, db: Session) -> Dict[str, Any]:
        """
        Walk the whole chain in index order.
        Returns {"is_valid": bool, "tampered_blocks": [{index, reason, block_id}]}
        and flags every offending block as unverified.
        """
        blocks: List[Block] = db.query(Block).order_by(Block.index.asc()).all()
        tampered: List[Dict[str, Any]] = []
        flagged: Dict[int, Block] = {}

        prev: Optional[Block] = None
        for block in blocks:
            expected_index = (prev.index + 1) if prev else 1
            if block.index != expected_index:
                tampered.append(_issue(block, REASON_GAP))
                flagged[block.id] = block

            if not self.verify_signature(block.hash, block.hmac_signature):
                tampered.append(_issue(block, REASON_SIGNATURE))
                flagged[block.id] = block

            if self.hash_block(block) != block.hash:
                tampered.append(_issue(block, REASON_HASH))
                flagged[block.id] = block

            expected_prev = prev.hash if prev else GENESIS
            if block.previous_hash != expected_prev:
                tampered.append(_issue(block, REASON_LINK))
                flagged[block.id] = block

            prev = block

        changed = False
        for block in flagged.values():
            if block.is_verified:
                block.is_verified = False
                changed = True
        if changed:
            db.commit()

        return {"is_valid": not tampered, "tampered_blocks": tampered}

    def verify_trail(
        self,
        blocks: Iterable[Block],
        predecessors: Mapping[int, Block],
    ) -> Dict[str, Any]:
        """
        Verify a non-contiguous subset of the chain (e.g. every block about
        one record). `predecessors` maps index -> block for each index - 1.
        Read-only.
        """
        tampered: List[Dict[str, Any]] = []
        for block in sorted(blocks, key=lambda b: b.index):
            if not block.is_verified:
                tampered.append(_issue(block, REASON_UNVERIFIED))
            if self.hash_block(block) != block.hash:
                tampered.append(_issue(block, REASON_HASH))

            if block.index == 1:
                if block.previous_hash != GENESIS:
                    tampered.append(_issue(block, REASON_LINK))
                continue

            pred = predecessors.get(block.index - 1)
            if pred is None:
                tampered.append(_issue(block, REASON_GAP))
            elif pred.hash != block.previous_hash:
                tampered.append(_issue(block, REASON_LINK))

        return {"is_valid": not tampered, "tampered_blocks": tampered}

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    def stats(self, db: Session) -> Dict[str, Any]:
        total = db.query(func.count(Block.id)).scalar() or 0
        unverified = (db.query(func.count(Block.id)).filter(
            Block.is_verified.is_(False)).scalar() or 0)
        breakdown = (db.query(Block.event_type, func.count(Block.id)).group_by(
            Block.event_type).order_by(Block.event_type).all())
        first = db.query(Block).order_by(Block.index.asc()).first()
        last = db.query(Block).order_by(Block.index.desc()).first()
        return {
            "total_blocks": int(total),
            "unverified_blocks": int(unverified),
            "event_type_breakdown": [{
                "event_type": et,
                "count": int(c)
            } for et, c in breakdown],
            "first_block_time": first.timestamp if first else None,
            "last_block_time": last.timestamp if last else None,
        }


ledger = Ledger(settings.LEDGER_SIGNING_KEY)


def capture_event(
    db: Session,
    event_type: str,
    event_id: Any,
    collection_name: str,
    payload: Any,
    user_id: Optional[int] = None,
) -> Optional[Block]:
    """
    Best-effort append used from request handlers: the business write has
    already been committed, so a ledger failure is logged and swallowed.
    """
    try:
        block = ledger.append(
            db,
            event_type=event_type,
            event_id=event_id,
            collection_name=collection_name,
            payload=payload,
            user_id=user_id,
        )
    except Exception:
        db.rollback()
        logger.exception("Error capturing ledger event %s (%s %s)",
                         event_type, collection_name, event_id)
        return None

    logger.info("Ledger event captured: %s (%s %s) -> block #%s", event_type,
                collection_name, event_id, block.index)
    return block
