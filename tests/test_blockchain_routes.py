import csv
import io

from pstu_inventory.models import Block

API = "/api/blockchain"


def _seed(client, admin_headers, stock_in_body):
    first = client.post("/api/stockins/create", json=stock_in_body(), headers=admin_headers).json()["data"]
    second = client.post("/api/stockins/create", json=stock_in_body(invoice_no="INV-002"),
                         headers=admin_headers).json()["data"]
    client.put(f"/api/stockins/update/{first['id']}", json={"remarks": "checked"}, headers=admin_headers)
    return first, second


def test_chain_and_block(client, admin_headers, stock_in_body):
    _seed(client, admin_headers, stock_in_body)

    chain = client.get(f"{API}/chain", headers=admin_headers).json()
    assert chain["success"] is True
    assert chain["total_blocks"] == 3
    assert [b["index"] for b in chain["blocks"]] == [1, 2, 3]
    assert chain["blocks"][0]["previous_hash"] == "GENESIS"

    block = client.get(f"{API}/block/2", headers=admin_headers).json()["block"]
    assert block["previous_hash"] == chain["blocks"][0]["hash"]

    missing = client.get(f"{API}/block/99", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["msg"] == "Block not found"


def test_verify_and_stats(client, admin_headers, stock_in_body):
    _seed(client, admin_headers, stock_in_body)

    verify = client.get(f"{API}/chain/verify", headers=admin_headers).json()
    assert verify["is_valid"] is True
    assert verify["tampered_blocks"] == []
    assert verify["verification_timestamp"]

    stats = client.get(f"{API}/stats", headers=admin_headers).json()
    assert stats["total_blocks"] == 3
    assert {"event_type": "UPDATE", "count": 1} in stats["event_type_breakdown"]


def test_events_filters(client, admin_headers, stock_in_body):
    _seed(client, admin_headers, stock_in_body)

    events = client.get(f"{API}/events", params={"event_type": "STOCK_IN"}, headers=admin_headers).json()
    assert events["count"] == 2
    # newest first
    assert events["events"][0]["index"] > events["events"][1]["index"]

    none = client.get(f"{API}/events", params={"collection_name": "StockOut"}, headers=admin_headers).json()
    assert none["count"] == 0


def test_audit_trail_of_one_record(client, db, admin_headers, stock_in_body):
    first, _ = _seed(client, admin_headers, stock_in_body)

    r = client.get(f"{API}/audit/{first['id']}", params={"collection_name": "StockIn"}, headers=admin_headers)

    body = r.json()
    assert body["item_id"] == str(first["id"])
    assert body["count"] == 2
    assert [b["event_type"] for b in body["audit_trail"]] == ["STOCK_IN", "UPDATE"]
    assert body["verification"] == {"is_valid": True, "tampered_blocks": []}

    # tamper the second stock-in's block: the update block no longer links to it
    db.query(Block).filter(Block.index == 2).update({Block.hash: "f" * 64})
    db.commit()

    body = client.get(f"{API}/audit/{first['id']}", headers=admin_headers).json()
    assert body["verification"]["is_valid"] is False
    assert body["verification"]["tampered_blocks"][0]["index"] == 3


def test_force_verify_flags_tampering(client, db, admin_headers, teacher_headers, stock_in_body):
    _seed(client, admin_headers, stock_in_body)
    db.query(Block).filter(Block.index == 1).update({Block.payload: {"quantity": 1000}})
    db.commit()

    assert client.post(f"{API}/force-verify", headers=teacher_headers).status_code == 403

    body = client.post(f"{API}/force-verify", headers=admin_headers).json()
    assert body["is_valid"] is False
    assert body["tampered_blocks"][0]["index"] == 1
    # no ALERT_EMAIL configured in tests
    assert body["alert_sent"] is False

    stats = client.get(f"{API}/stats", headers=admin_headers).json()
    assert stats["unverified_blocks"] == 1


def test_csv_export(client, admin_headers, teacher_headers, stock_in_body):
    _seed(client, admin_headers, stock_in_body)

    assert client.get(f"{API}/export/csv", headers=teacher_headers).status_code == 403
    r = client.get(f"{API}/export/csv", headers=admin_headers)

    assert r.headers["content-type"].startswith("text/csv")
    rows = list(csv.reader(io.StringIO(r.text)))
    assert rows[0] == ["Index", "Timestamp", "EventType", "CollectionName", "UserId", "IsVerified"]
    assert len(rows) == 4
    # the update body carried no user, recorded as a system event
    assert rows[3][2:] == ["UPDATE", "StockIn", "SYSTEM", "true"]
