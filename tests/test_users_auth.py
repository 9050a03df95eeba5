from datetime import datetime, timedelta

from pstu_inventory.models import OtpToken, User
from pstu_inventory.core.security import verify_password

from conftest import PASSWORD

API = "/api/users"


def test_login_returns_token_without_password(client, teacher):
    r = client.post(f"{API}/login", json={"email": "TEACHER@pstu.ac.bd", "password": PASSWORD})

    assert r.status_code == 200
    body = r.json()
    assert body["token"]
    assert body["user"]["email"] == teacher.email
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]

    me = client.get(f"{API}/get/{teacher.id}", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200


def test_login_with_wrong_password(client, teacher):
    r = client.post(f"{API}/login", json={"email": teacher.email, "password": "nope"})
    assert r.status_code == 400
    assert r.json()["error"]["msg"] == "Invalid email or password"


def test_admin_creates_teacher(client, db, department, office, admin_headers):
    payload = {
        "name": "New Teacher",
        "email": "new.teacher@pstu.ac.bd",
        "password": "pass1234",
        "role": "teacher",
        "phone_number": "01811111111",
        "department_id": department.id,
        "office_id": office.id,
    }

    r = client.post(f"{API}/create", json=payload, headers=admin_headers)

    assert r.status_code == 201, r.text
    assert r.json()["message"] == "User created successfully"
    user = r.json()["user"]
    assert user["department_id"] == department.id
    assert user["office_id"] is None
    assert "password_hash" not in user

    stored = db.get(User, user["id"])
    assert stored.password_hash != "pass1234"
    assert verify_password("pass1234", stored.password_hash)

    dup = client.post(f"{API}/create", json=payload, headers=admin_headers)
    assert dup.status_code == 409


def test_role_unit_rules(client, office, admin_headers):
    base = {"name": "X", "password": "pass1234", "phone_number": "1"}

    r = client.post(f"{API}/create", json={**base, "email": "t@x.com", "role": "teacher"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"]["msg"] == "Department is required for teachers"

    r = client.post(f"{API}/create", json={**base, "email": "s@x.com", "role": "staff"}, headers=admin_headers)
    assert r.status_code == 400

    r = client.post(f"{API}/create", json={**base, "email": "s@x.com", "role": "staff", "office_id": office.id,
                                           "phone_number": ""}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"]["msg"] == "Phone number is required"


def test_invalid_role_is_a_validation_error(client, admin_headers):
    r = client.post(f"{API}/create", json={"name": "X", "email": "x@x.com", "password": "pass1234",
                                           "role": "student", "phone_number": "1"}, headers=admin_headers)
    assert r.status_code == 422
    assert r.json()["error"]["msg"] == "Validation error"


def test_only_admin_creates_users(client, teacher_headers):
    r = client.post(f"{API}/create", json={}, headers=teacher_headers)
    assert r.status_code in (403, 422)


def test_listing_by_role_and_name(client, admin, teacher, staff, admin_headers):
    teachers = client.get(f"{API}/get-teachers", headers=admin_headers).json()
    staff_rows = client.get(f"{API}/get-staff", headers=admin_headers).json()
    assert [u["id"] for u in teachers] == [teacher.id]
    assert [u["id"] for u in staff_rows] == [staff.id]
    assert len(client.get(f"{API}/get", headers=admin_headers).json()) == 3

    r = client.get(f"{API}/getByName/teacher one", headers=admin_headers)
    assert r.json()["id"] == teacher.id
    assert client.get(f"{API}/getByName/nobody", headers=admin_headers).status_code == 404


def test_update_rehashes_password(client, db, teacher, admin_headers):
    r = client.put(f"{API}/update/{teacher.id}", json={"password": "changed99", "name": "Dr. One"},
                   headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Dr. One"

    login = client.post(f"{API}/login", json={"email": teacher.email, "password": "changed99"})
    assert login.status_code == 200


def test_delete_user(client, staff, admin, admin_headers):
    assert client.delete(f"{API}/delete/{admin.id}", headers=admin_headers).status_code == 400
    r = client.delete(f"{API}/delete/{staff.id}", headers=admin_headers)
    assert r.json() == {"message": "User deleted successfully"}
    assert client.get(f"{API}/get/{staff.id}", headers=admin_headers).status_code == 404


def _latest_otp(db, user):
    db.expire_all()
    return db.query(OtpToken).filter_by(user_id=user.id).order_by(OtpToken.id.desc()).first()


def test_password_reset_flow(client, db, teacher):
    r = client.post(f"{API}/request-password-otp", json={"email": teacher.email})
    assert r.status_code == 200

    otp = _latest_otp(db, teacher)
    assert len(otp.otp_code) == 6

    wrong = "000000" if otp.otp_code != "000000" else "111111"
    r = client.post(f"{API}/verify-password-otp", json={"email": teacher.email, "otp": wrong})
    assert r.status_code == 400
    assert r.json()["error"]["msg"] == "Invalid OTP"

    r = client.post(f"{API}/verify-password-otp", json={"email": teacher.email, "otp": otp.otp_code})
    assert r.status_code == 200

    r = client.post(f"{API}/update-password", json={"email": teacher.email, "new_password": "brandnew1"})
    assert r.status_code == 200

    assert client.post(f"{API}/login", json={"email": teacher.email, "password": "brandnew1"}).status_code == 200

    # the OTP is consumed
    r = client.post(f"{API}/update-password", json={"email": teacher.email, "new_password": "again123"})
    assert r.status_code == 400


def test_password_reset_rejections(client, db, teacher):
    assert client.post(f"{API}/request-password-otp", json={"email": "ghost@pstu.ac.bd"}).status_code == 404

    r = client.post(f"{API}/verify-password-otp", json={"email": teacher.email, "otp": "123456"})
    assert r.json()["error"]["msg"] == "OTP not requested"

    client.post(f"{API}/request-password-otp", json={"email": teacher.email})
    r = client.post(f"{API}/update-password", json={"email": teacher.email, "new_password": "brandnew1"})
    assert r.status_code == 400

    otp = _latest_otp(db, teacher)
    otp.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()
    r = client.post(f"{API}/verify-password-otp", json={"email": teacher.email, "otp": otp.otp_code})
    assert r.json()["error"]["msg"] == "OTP expired"
