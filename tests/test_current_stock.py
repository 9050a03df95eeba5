IN_API = "/api/currentstockins"
OUT_API = "/api/currentstockouts"


def test_current_stock_in_upserts_by_user_and_item(client, teacher_headers, stock_in_body):
    r = client.post(f"{IN_API}/create", json=stock_in_body(), headers=teacher_headers)
    assert r.status_code == 201
    assert r.json()["message"] == "New stock entry created."

    r = client.post(f"{IN_API}/create", json=stock_in_body(quantity=5, invoice_no="INV-XYZ"),
                    headers=teacher_headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert r.json()["message"] == "Stock updated successfully."
    assert data["quantity"] == 15
    assert data["total_price"] == 1500.0

    rows = client.get(f"{IN_API}/get", headers=teacher_headers).json()
    assert len(rows) == 1


def test_quantity_lookup(client, teacher, catalog, teacher_headers, stock_in_body):
    client.post(f"{IN_API}/create", json=stock_in_body(), headers=teacher_headers)

    r = client.get(f"{IN_API}/quantity", params={"user_id": teacher.id, "item_id": catalog["item"].id},
                   headers=teacher_headers)
    assert r.json() == [{"quantity": 10}]

    assert client.get(f"{IN_API}/quantity", params={"user_id": teacher.id},
                      headers=teacher_headers).status_code == 400
    assert client.get(f"{IN_API}/quantity", params={"user_id": 999, "item_id": 999},
                      headers=teacher_headers).status_code == 404


def test_update_quantity_never_goes_negative(client, teacher, catalog, teacher_headers, stock_in_body):
    client.post(f"{IN_API}/create", json=stock_in_body(), headers=teacher_headers)
    key = {"user_id": teacher.id, "item_id": catalog["item"].id}

    r = client.put(f"{IN_API}/update-quantity", json={**key, "quantity": -4}, headers=teacher_headers)
    assert r.status_code == 200
    assert r.json()["data"]["quantity"] == 6
    assert r.json()["data"]["total_price"] == 600.0

    r = client.put(f"{IN_API}/update-quantity", json={**key, "quantity": -7}, headers=teacher_headers)
    assert r.status_code == 400
    assert r.json()["error"]["msg"] == "Insufficient stock: only 6 available."

    r = client.put(f"{IN_API}/update-quantity", json={"user_id": 999, "item_id": 1, "quantity": 1},
                   headers=teacher_headers)
    assert r.status_code == 404


def _stock_out_body(staff, office, admin, catalog, **overrides):
    body = {
        "user_id": staff.id,
        "office_id": office.id,
        "item_id": catalog["item"].id,
        "issue_type": "permanent",
        "issue_by": admin.id,
        "issue_date": "2024-06-01",
        "quantity": 3,
    }
    body.update(overrides)
    return body


def test_current_stock_out_adds_and_reduces(client, staff, office, admin, catalog, staff_headers):
    body = _stock_out_body(staff, office, admin, catalog)
    assert client.post(f"{OUT_API}/create", json=body, headers=staff_headers).status_code == 201
    r = client.post(f"{OUT_API}/create", json={**body, "quantity": 2}, headers=staff_headers)
    assert r.json()["data"]["quantity"] == 5

    key = {"user_id": staff.id, "item_id": catalog["item"].id}
    r = client.put(f"{OUT_API}/update-quantity", json={**key, "quantity": 4}, headers=staff_headers)
    assert r.json()["data"]["quantity"] == 1

    r = client.put(f"{OUT_API}/update-quantity", json={**key, "quantity": 2}, headers=staff_headers)
    assert r.status_code == 400

    r = client.get(f"{OUT_API}/quantity", params=key, headers=staff_headers)
    assert r.json() == [{"quantity": 1}]


def test_current_stock_out_requires_issue_fields(client, staff, office, admin, catalog, staff_headers):
    body = _stock_out_body(staff, office, admin, catalog)
    del body["issue_by"]
    r = client.post(f"{OUT_API}/create", json=body, headers=staff_headers)
    assert r.status_code == 400
