# pstu_inventory/db/init_db.py
from __future__ import annotations

import argparse
from typing import Optional

from sqlalchemy import func, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pstu_inventory.db.session import engine
from pstu_inventory.db.base import Base
from pstu_inventory.core.security import hash_password

# Import all models so metadata is complete
from pstu_inventory.models import User, UserRole  # noqa: F401


def print_tables() -> set:
    names = inspect(engine).get_table_names()
    print("Existing tables:", names)
    return set(names)


def seed_admin(db: Session, *, email: str, password: str, name: str = "Administrator") -> Optional[User]:
    """
    Create the first admin account; skipped when the e-mail already exists.
    """
    email = email.strip().lower()
    exists = db.query(User).filter(func.lower(User.email) == email).first()
    if exists:
        print(f"Admin {email} already exists, skipping.")
        return None

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=UserRole.ADMIN.value,
        phone_number="",
    )
    db.add(user)
    return user


def run(fresh: bool = False,
        admin_email: Optional[str] = None,
        admin_password: Optional[str] = None,
        admin_name: str = "Administrator") -> None:
    if fresh:
        print("WARNING: Dropping ALL tables (dev only) …")
        Base.metadata.drop_all(bind=engine)

    print("Creating all missing tables …")
    Base.metadata.create_all(bind=engine)
    print_tables()

    if not (admin_email and admin_password):
        return

    try:
        with Session(engine) as db:
            if seed_admin(db, email=admin_email, password=admin_password, name=admin_name):
                db.commit()
                print(f"Admin {admin_email} created.")
    except SQLAlchemyError as e:
        print("Seeding failed:", e)
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Initialize DB (create tables, seed first admin).")
    parser.add_argument(
        "--fresh",
        action="store_true",
        help="Drop & recreate all tables (DEV ONLY).",
    )
    parser.add_argument("--admin-email", help="E-mail of the admin to seed.")
    parser.add_argument("--admin-password", help="Password of the admin to seed.")
    parser.add_argument("--admin-name", default="Administrator")
    args = parser.parse_args()
    run(fresh=args.fresh,
        admin_email=args.admin_email,
        admin_password=args.admin_password,
        admin_name=args.admin_name)
