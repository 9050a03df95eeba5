# pstu_inventory/models/__init__.py
from .department import Department, Office
from .catalog import Supplier, Category, Item
from .user import User, UserRole
from .otp import OtpToken
from .stock import (
    StockIn,
    CurrentStockIn,
    StockOut,
    CurrentStockOut,
    DeadStock,
    StockHistory,
)
from .requests import DeadStockRequest, StockRequest, RequestStatus
from .report import Report
from .ledger import Block

__all__ = [
    "Department",
    "Office",
    "Supplier",
    "Category",
    "Item",
    "User",
    "UserRole",
    "OtpToken",
    "StockIn",
    "CurrentStockIn",
    "StockOut",
    "CurrentStockOut",
    "DeadStock",
    "StockHistory",
    "DeadStockRequest",
    "StockRequest",
    "RequestStatus",
    "Report",
    "Block",
]
