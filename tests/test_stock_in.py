import pytest
from sqlalchemy import text

from pstu_inventory.models import Block, StockHistory, StockIn

API = "/api/stockins"


def test_create_stock_in_records_ledger_and_history(client, db, admin_headers, stock_in_body):
    r = client.post(f"{API}/create", json=stock_in_body(), headers=admin_headers)

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["message"] == "StockIn created successfully"
    assert body["data"]["invoice_no"] == "INV-001"
    stock_in_id = body["data"]["id"]

    block = db.query(Block).one()
    assert block.event_type == "STOCK_IN"
    assert block.collection_name == "StockIn"
    assert block.event_id == str(stock_in_id)
    assert block.payload["invoice_no"] == "INV-001"
    assert block.user_id == stock_in_body()["user_id"]

    history = db.query(StockHistory).one()
    assert history.action == "STOCK_IN"
    assert history.reference_id == stock_in_id
    assert history.quantity == 10


def test_missing_required_field_is_rejected(client, admin_headers, stock_in_body):
    body = stock_in_body()
    del body["supplier_id"]

    r = client.post(f"{API}/create", json=body, headers=admin_headers)

    assert r.status_code == 400
    assert r.json() == {
        "ok": False,
        "error": {"msg": "All required fields must be provided.", "code": None, "details": None},
    }


def test_department_or_office_is_required(client, admin_headers, stock_in_body):
    r = client.post(f"{API}/create", json=stock_in_body(department_id=None), headers=admin_headers)
    assert r.status_code == 400


def test_duplicate_invoice_conflicts(client, db, admin_headers, stock_in_body):
    assert client.post(f"{API}/create", json=stock_in_body(), headers=admin_headers).status_code == 201

    r = client.post(f"{API}/create", json=stock_in_body(quantity=3), headers=admin_headers)

    assert r.status_code == 409
    assert "Invoice number already exists" in r.json()["error"]["msg"]
    assert db.query(StockIn).count() == 1
    assert db.query(Block).count() == 1


def test_stock_in_requires_admin(client, teacher_headers, stock_in_body):
    r = client.post(f"{API}/create", json=stock_in_body(), headers=teacher_headers)
    assert r.status_code == 403
    assert r.json()["error"]["msg"] == "You do not have permission to perform this action."


def test_stock_in_requires_token(client, stock_in_body):
    r = client.get(f"{API}/get")
    assert r.status_code == 401
    assert r.json()["error"]["msg"] == "Missing token"

    r = client.get(f"{API}/get", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["error"]["msg"] == "Invalid token"


def test_update_and_delete_are_chained(client, db, admin_headers, stock_in_body):
    created = client.post(f"{API}/create", json=stock_in_body(), headers=admin_headers).json()["data"]

    r = client.put(f"{API}/update/{created['id']}", json={"quantity": 12, "remarks": "recount"},
                   headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["quantity"] == 12

    r = client.delete(f"{API}/delete/{created['id']}", headers=admin_headers)
    assert r.json() == {"message": "StockIn deleted successfully"}

    blocks = db.query(Block).order_by(Block.index).all()
    assert [b.event_type for b in blocks] == ["STOCK_IN", "UPDATE", "DELETE"]
    # update body carried no user_id
    assert blocks[1].user_id is None
    assert blocks[1].payload == {"quantity": 12, "remarks": "recount"}
    assert blocks[2].payload["invoice_no"] == "INV-001"
    assert blocks[2].user_id == created["user_id"]

    verify = client.get("/api/blockchain/chain/verify", headers=admin_headers).json()
    assert verify["is_valid"] is True


def test_update_rejects_invoice_of_another_record(client, admin_headers, stock_in_body):
    client.post(f"{API}/create", json=stock_in_body(), headers=admin_headers)
    second = client.post(f"{API}/create", json=stock_in_body(invoice_no="INV-002"),
                         headers=admin_headers).json()["data"]

    r = client.put(f"{API}/update/{second['id']}", json={"invoice_no": "INV-001"}, headers=admin_headers)

    assert r.status_code == 409


def test_get_and_filters(client, admin_headers, teacher_headers, stock_in_body, catalog, department):
    created = client.post(f"{API}/create", json=stock_in_body(), headers=admin_headers).json()["data"]

    assert client.get(f"{API}/get/{created['id']}", headers=teacher_headers).json()["id"] == created["id"]
    assert client.get(f"{API}/get/9999", headers=teacher_headers).status_code == 404

    by_item = client.get(f"{API}/item/{catalog['item'].id}", headers=teacher_headers)
    assert [row["id"] for row in by_item.json()] == [created["id"]]

    by_dept = client.get(f"{API}/department/{department.id}", headers=teacher_headers)
    assert len(by_dept.json()) == 1

    empty = client.get(f"{API}/office/12345", headers=teacher_headers)
    assert empty.status_code == 404
    assert empty.json()["error"]["msg"] == "No StockIn records found for this office"


def test_unknown_item_is_rejected(client, admin_headers, stock_in_body):
    r = client.post(f"{API}/create", json=stock_in_body(item_id=4040), headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"]["msg"] == "Item not found"


@pytest.fixture()
def foreign_keys(db):
    # sqlite leaves FK enforcement off unless asked; the shared StaticPool connection keeps it
    db.execute(text("PRAGMA foreign_keys=ON"))
    db.commit()


@pytest.mark.parametrize("field, label", [("department_id", "Department"), ("office_id", "Office")])
def test_unknown_unit_is_not_reported_as_duplicate_invoice(client, db, foreign_keys, admin_headers,
                                                           stock_in_body, field, label):
    r = client.post(f"{API}/create", json=stock_in_body(**{field: 999}), headers=admin_headers)

    assert r.status_code == 400
    assert r.json()["error"]["msg"] == f"{label} not found"
    assert db.query(StockIn).count() == 0
    assert db.query(Block).count() == 0


def test_update_rejects_unknown_department(client, admin_headers, stock_in_body):
    created = client.post(f"{API}/create", json=stock_in_body(), headers=admin_headers).json()["data"]

    r = client.put(f"{API}/update/{created['id']}", json={"department_id": 999}, headers=admin_headers)

    assert r.status_code == 400
    assert r.json()["error"]["msg"] == "Department not found"
    assert client.get(f"{API}/get/{created['id']}", headers=admin_headers).json()["department_id"] == \
        stock_in_body()["department_id"]
