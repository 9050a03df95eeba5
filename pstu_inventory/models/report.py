from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from pstu_inventory.db.base import Base, TimestampMixin


class Report(TimestampMixin, Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    report_type = Column(String(100), nullable=False, default="")
    generated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    generated_at = Column(DateTime, default=datetime.utcnow, nullable=True)
