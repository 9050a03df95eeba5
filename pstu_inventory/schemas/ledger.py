from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class BlockOut(BaseModel):
    id: int
    index: int
    timestamp: str
    event_type: str
    event_id: str
    collection_name: str
    payload: Optional[Any] = None
    user_id: Optional[int] = None
    previous_hash: str
    hash: str
    hmac_signature: str
    is_verified: bool

    model_config = ConfigDict(from_attributes=True)


class TamperedBlock(BaseModel):
    index: int
    reason: str
    block_id: int


class ChainOut(BaseModel):
    success: bool = True
    total_blocks: int
    blocks: List[BlockOut]


class BlockDetailOut(BaseModel):
    success: bool = True
    block: BlockOut


class VerificationOut(BaseModel):
    success: bool = True
    is_valid: bool
    tampered_blocks: List[TamperedBlock]
    verification_timestamp: datetime


class ForceVerifyOut(BaseModel):
    success: bool = True
    is_valid: bool
    tampered_blocks: List[TamperedBlock]
    alert_sent: bool


class EventTypeCount(BaseModel):
    event_type: str
    count: int


class LedgerStatsOut(BaseModel):
    success: bool = True
    total_blocks: int
    unverified_blocks: int
    event_type_breakdown: List[EventTypeCount]
    first_block_time: Optional[str] = None
    last_block_time: Optional[str] = None


class EventsOut(BaseModel):
    success: bool = True
    count: int
    events: List[BlockOut]


class TrailVerification(BaseModel):
    is_valid: bool
    tampered_blocks: List[TamperedBlock]


class AuditTrailOut(BaseModel):
    success: bool = True
    item_id: str
    collection_name: str
    audit_trail: List[BlockOut]
    count: int
    verification: TrailVerification
