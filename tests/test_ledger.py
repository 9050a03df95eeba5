import pytest

from pstu_inventory.models import Block
from pstu_inventory.services import ledger as ledger_module
from pstu_inventory.services.ledger import (
    GENESIS,
    REASON_GAP,
    REASON_HASH,
    REASON_LINK,
    REASON_SIGNATURE,
    REASON_UNVERIFIED,
    Ledger,
    canonical_json,
    capture_event,
    ledger,
)


def _append(db, n=1, collection="StockIn"):
    blocks = []
    for i in range(n):
        blocks.append(
            ledger.append(
                db,
                event_type="STOCK_IN",
                event_id=i + 1,
                collection_name=collection,
                payload={"quantity": i + 1, "invoice_no": f"INV-{i + 1}"},
                user_id=1,
            ))
    return blocks


def test_first_block_links_to_genesis(db):
    (block, ) = _append(db)

    assert block.index == 1
    assert block.previous_hash == GENESIS
    assert block.is_verified is True
    assert len(block.hash) == 64
    assert ledger.verify_signature(block.hash, block.hmac_signature)
    assert ledger.hash_block(block) == block.hash


def test_blocks_are_hash_linked(db):
    blocks = _append(db, 3)

    assert [b.index for b in blocks] == [1, 2, 3]
    assert blocks[1].previous_hash == blocks[0].hash
    assert blocks[2].previous_hash == blocks[1].hash
    assert ledger.verify_chain(db) == {"is_valid": True, "tampered_blocks": []}


def test_event_id_is_stored_as_string(db):
    (block, ) = _append(db)
    assert block.event_id == "1"


def test_canonical_json_ignores_key_order():
    assert canonical_json({"b": 1, "a": [1, 2]}) == canonical_json({"a": [1, 2], "b": 1})
    assert canonical_json({"a": 1}) == '{"a":1}'


def test_signature_depends_on_key():
    other = Ledger("another-key")
    h = ledger.calculate_hash("data")
    assert ledger.create_signature(h) != other.create_signature(h)
    assert not other.verify_signature(h, ledger.create_signature(h))
    assert not ledger.verify_signature("", "")


def test_altered_payload_is_detected_and_flagged(db):
    blocks = _append(db, 3)
    target = blocks[1]
    target.payload = {"quantity": 999, "invoice_no": "INV-2"}
    db.commit()

    result = ledger.verify_chain(db)

    assert result["is_valid"] is False
    assert {"index": 2, "reason": REASON_HASH, "block_id": target.id} in result["tampered_blocks"]
    db.refresh(target)
    assert target.is_verified is False


def test_forged_signature_is_detected(db):
    blocks = _append(db, 2)
    blocks[0].hmac_signature = "0" * 64
    db.commit()

    result = ledger.verify_chain(db)

    reasons = [t["reason"] for t in result["tampered_blocks"]]
    assert result["is_valid"] is False
    assert REASON_SIGNATURE in reasons


def test_rewritten_hash_breaks_the_next_link(db):
    blocks = _append(db, 3)
    # re-sign an edited block so only the link to block 3 gives it away
    b2 = blocks[1]
    b2.payload = {"quantity": 50}
    b2.hash = ledger.hash_block(b2)
    b2.hmac_signature = ledger.create_signature(b2.hash)
    db.commit()

    result = ledger.verify_chain(db)

    assert result["tampered_blocks"] == [{"index": 3, "reason": REASON_LINK, "block_id": blocks[2].id}]


def test_removed_block_is_reported_as_gap(db):
    blocks = _append(db, 3)
    db.delete(blocks[1])
    db.commit()

    result = ledger.verify_chain(db)

    reasons = {t["reason"] for t in result["tampered_blocks"]}
    assert reasons == {REASON_GAP, REASON_LINK}
    assert all(t["index"] == 3 for t in result["tampered_blocks"])


def test_append_continues_after_last_index(db):
    _append(db, 2)
    block = ledger.append(db, event_type="DELETE", event_id="7", collection_name="StockIn", payload=None)
    assert block.index == 3
    assert block.user_id is None


def test_verify_trail_uses_real_predecessors(db):
    _append(db, 1, collection="StockIn")
    _append(db, 1, collection="StockOut")
    trail_block = ledger.append(db, event_type="UPDATE", event_id="1", collection_name="StockIn",
                                payload={"quantity": 3})
    predecessor = db.query(Block).filter(Block.index == trail_block.index - 1).one()

    ok = ledger.verify_trail([trail_block], {predecessor.index: predecessor})
    assert ok == {"is_valid": True, "tampered_blocks": []}

    missing = ledger.verify_trail([trail_block], {})
    assert missing["tampered_blocks"][0]["reason"] == REASON_GAP

    trail_block.is_verified = False
    flagged = ledger.verify_trail([trail_block], {predecessor.index: predecessor})
    assert flagged["tampered_blocks"][0]["reason"] == REASON_UNVERIFIED


def test_stats(db):
    _append(db, 2)
    ledger.append(db, event_type="DELETE", event_id="1", collection_name="StockIn", payload={})

    stats = ledger.stats(db)

    assert stats["total_blocks"] == 3
    assert stats["unverified_blocks"] == 0
    assert {"event_type": "STOCK_IN", "count": 2} in stats["event_type_breakdown"]
    assert stats["first_block_time"] <= stats["last_block_time"]


def test_capture_event_never_raises(db, monkeypatch):

    def boom(*args, **kwargs):
        raise RuntimeError("database down")

    monkeypatch.setattr(ledger_module.ledger, "append", boom)

    assert capture_event(db, "STOCK_IN", 1, "StockIn", {"quantity": 1}) is None


@pytest.mark.parametrize("payload", [{"when": "2024-05-01", "price": 12.5}, [1, 2, 3], None])
def test_payload_survives_database_round_trip(db, payload):
    block = ledger.append(db, event_type="STOCK_IN", event_id="1", collection_name="StockIn",
                          payload=payload)
    db.expire_all()
    reloaded = db.query(Block).filter(Block.id == block.id).one()
    assert ledger.hash_block(reloaded) == reloaded.hash
