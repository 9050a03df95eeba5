import pytest


def test_department_crud(client, admin_headers, teacher_headers):
    r = client.post("/api/departments/create", json={"name": "Physics", "code": "PHY"}, headers=admin_headers)
    assert r.status_code == 201
    dept = r.json()

    dup = client.post("/api/departments/create", json={"name": "Physics"}, headers=admin_headers)
    assert dup.status_code == 400
    assert dup.json()["error"]["msg"] == "Department with this name already exists."

    names = [d["name"] for d in client.get("/api/departments/get", headers=teacher_headers).json()]
    assert "Physics" in names

    r = client.put(f"/api/departments/update/{dept['id']}", json={"faculty": "Science"}, headers=admin_headers)
    assert r.json()["faculty"] == "Science"
    assert r.json()["code"] == "PHY"

    r = client.delete(f"/api/departments/delete/{dept['id']}", headers=admin_headers)
    assert r.json() == {"message": "Department deleted successfully"}

    missing = client.get(f"/api/departments/get/{dept['id']}", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json() == {"ok": False, "error": {"msg": "Department not found", "code": None, "details": None}}


@pytest.mark.parametrize("prefix, payload, label", [
    ("offices", {"name": "Accounts", "section": "Finance"}, "Office"),
    ("suppliers", {"name": "BD Supplies", "phone": "017"}, "Supplier"),
    ("categories", {"name": "Furniture"}, "Category"),
])
def test_simple_master_crud(client, admin_headers, teacher_headers, prefix, payload, label):
    created = client.post(f"/api/{prefix}/create", json=payload, headers=admin_headers)
    assert created.status_code == 201
    obj_id = created.json()["id"]

    assert client.post(f"/api/{prefix}/create", json=payload, headers=teacher_headers).status_code == 403
    assert client.get(f"/api/{prefix}/get/{obj_id}", headers=teacher_headers).json()["name"] == payload["name"]

    r = client.put(f"/api/{prefix}/update/{obj_id}", json={"name": "Renamed"}, headers=admin_headers)
    assert r.json()["name"] == "Renamed"

    r = client.delete(f"/api/{prefix}/delete/{obj_id}", headers=admin_headers)
    assert r.json() == {"message": f"{label} deleted successfully"}
    assert client.get(f"/api/{prefix}/get/{obj_id}", headers=admin_headers).status_code == 404


def test_item_needs_existing_category(client, admin_headers, catalog):
    r = client.post("/api/items/create", json={"name": "Chair", "category_id": 999}, headers=admin_headers)
    assert r.status_code == 400

    r = client.post("/api/items/create", json={"name": "Chair", "category_id": catalog["category"].id},
                    headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["unit"] == "unit"


def test_category_of_item(client, admin_headers, catalog):
    item = catalog["item"]

    r = client.get(f"/api/categories/category/{item.id}", headers=admin_headers)

    assert r.json() == {
        "item_id": item.id,
        "item_name": "Projector",
        "category_id": catalog["category"].id,
        "category_name": "Electronics",
    }
    assert client.get("/api/categories/category/999", headers=admin_headers).status_code == 404


def test_stock_history_manual_entry(client, teacher, teacher_headers, catalog):
    r = client.post("/api/stockhistories/create",
                    json={"item_id": catalog["item"].id, "action": "ADJUSTMENT", "quantity": 1},
                    headers=teacher_headers)
    assert r.status_code == 201
    assert r.json()["performed_by"] == teacher.id
    assert client.get("/api/stockhistories/get", headers=teacher_headers).json()[0]["action"] == "ADJUSTMENT"


def test_health(client):
    assert client.get("/").status_code == 200
