from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    String,
    JSON,
)

from pstu_inventory.db.base import Base


class Block(Base):
    """
    One entry of the append-only, hash-linked audit ledger.
    Rows are only ever inserted; verification may flip is_verified.
    """
    __tablename__ = "ledger_blocks"

    id = Column(Integer, primary_key=True)
    index = Column(Integer, unique=True, nullable=False)

    # ISO-8601 string; it is part of the hashed content so it must not be
    # re-rendered by the database
    timestamp = Column(String(40), nullable=False)

    event_type = Column(String(50), nullable=False, index=True)  # STOCK_IN / UPDATE / DELETE ...
    event_id = Column(String(100), nullable=False, index=True)  # generic pk, stored as string
    collection_name = Column(String(100), nullable=False, index=True)
    payload = Column(JSON, nullable=True)
    user_id = Column(Integer, nullable=True, index=True)  # system events are null

    previous_hash = Column(String(64), nullable=False)
    hash = Column(String(64), nullable=False)
    hmac_signature = Column(String(64), nullable=False)
    is_verified = Column(Boolean, default=True, nullable=False)
