import enum

from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from pstu_inventory.db.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STAFF = "staff"


class User(TimestampMixin, Base):
    __tablename__ = "users"
    __table_args__ = {
        "mysql_engine": "InnoDB",
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(191), unique=True,
                   nullable=False)  # <= 191, no index=True
    password_hash = Column(String(255), nullable=False)

    # admin | teacher | staff
    role = Column(String(20), nullable=False, default=UserRole.STAFF.value)
    phone_number = Column(String(50), nullable=False, default="")

    # teachers belong to a department, staff to an office
    department_id = Column(Integer,
                           ForeignKey("departments.id"),
                           nullable=True)
    office_id = Column(Integer, ForeignKey("offices.id"), nullable=True)

    department = relationship("Department", back_populates="users")
    office = relationship("Office", back_populates="users")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
