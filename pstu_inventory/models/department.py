from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from pstu_inventory.db.base import Base, TimestampMixin


class Department(TimestampMixin, Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(191), unique=True, nullable=False)
    code = Column(String(50), default="")
    description = Column(String(500), default="")
    faculty = Column(String(191), default="")

    users = relationship("User", back_populates="department")


class Office(TimestampMixin, Base):
    __tablename__ = "offices"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(191), nullable=False)
    description = Column(String(500), default="")
    section = Column(String(191), default="")

    users = relationship("User", back_populates="office")
