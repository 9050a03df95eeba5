import os
import tempfile

# must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["LEDGER_VERIFY_ENABLED"] = "false"
os.environ["LEDGER_SIGNING_KEY"] = "test-signing-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STORAGE_DIR"] = tempfile.mkdtemp(prefix="pstu-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pstu_inventory.api.deps import get_db
from pstu_inventory.core.security import hash_password
from pstu_inventory.db.base import Base
from pstu_inventory.main import app
from pstu_inventory.models import Category, Department, Item, Office, Supplier, User
from pstu_inventory.utils.jwt import create_access_token

PASSWORD = "secret123"


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    # no context manager: the lifespan (scheduler) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def department(db):
    d = Department(name="Computer Science", code="CSE", faculty="Engineering")
    db.add(d)
    db.commit()
    db.refresh(d)
    return d


@pytest.fixture()
def office(db):
    o = Office(name="Registrar Office", section="Administration")
    db.add(o)
    db.commit()
    db.refresh(o)
    return o


def make_user(db, *, name, email, role, department_id=None, office_id=None):
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(PASSWORD),
        role=role,
        phone_number="01700000000",
        department_id=department_id,
        office_id=office_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin(db):
    return make_user(db, name="Admin", email="admin@pstu.ac.bd", role="admin")


@pytest.fixture()
def teacher(db, department):
    return make_user(db, name="Teacher One", email="teacher@pstu.ac.bd", role="teacher",
                     department_id=department.id)


@pytest.fixture()
def staff(db, office):
    return make_user(db, name="Staff One", email="staff@pstu.ac.bd", role="staff",
                     office_id=office.id)


def headers_for(user):
    token = create_access_token(user_id=user.id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture()
def teacher_headers(teacher):
    return headers_for(teacher)


@pytest.fixture()
def staff_headers(staff):
    return headers_for(staff)


@pytest.fixture()
def catalog(db):
    category = Category(name="Electronics", description="Lab equipment")
    supplier = Supplier(name="Dhaka Traders", contact_person="Rahim", phone="0123")
    db.add_all([category, supplier])
    db.commit()

    item = Item(name="Projector", category_id=category.id, unit="pcs", price=25000)
    db.add(item)
    db.commit()
    db.refresh(item)
    db.refresh(category)
    db.refresh(supplier)
    return {"category": category, "supplier": supplier, "item": item}


@pytest.fixture()
def stock_in_body(teacher, department, catalog):

    def _body(**overrides):
        body = {
            "user_id": teacher.id,
            "department_id": department.id,
            "item_id": catalog["item"].id,
            "supplier_id": catalog["supplier"].id,
            "quantity": 10,
            "unit_price": 100.0,
            "total_price": 1000.0,
            "purchase_date": "2024-05-01",
            "invoice_no": "INV-001",
            "remarks": "initial purchase",
        }
        body.update(overrides)
        return body

    return _body
