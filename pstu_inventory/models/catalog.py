# FILE: pstu_inventory/models/catalog.py
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from pstu_inventory.db.base import Base, TimestampMixin

Money = Numeric(14, 2)


class Supplier(TimestampMixin, Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    contact_person = Column(String(255), default="")
    phone = Column(String(50), default="")
    email = Column(String(255), default="")
    address = Column(String(1000), default="")


class Category(TimestampMixin, Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(191), nullable=False)
    description = Column(String(500), default="")

    items = relationship("Item", back_populates="category")


class Item(TimestampMixin, Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), default="")
    category_id = Column(Integer,
                         ForeignKey("categories.id"),
                         nullable=False,
                         index=True)
    unit = Column(String(50), default="unit")
    price = Column(Money, nullable=True)

    category = relationship("Category", back_populates="items")
