# pstu_inventory/api/router.py
from fastapi import APIRouter
from pstu_inventory.api import (
    # Masters
    routes_departments,
    routes_offices,
    routes_suppliers,
    routes_categories,
    routes_items,

    # Stock
    routes_stock_in,
    routes_current_stock_in,
    routes_stock_out,
    routes_current_stock_out,
    routes_dead_stock,
    routes_stock_history,

    # Requests
    routes_dead_stock_requests,
    routes_stock_requests,

    # Users / reports / ledger
    routes_users,
    routes_reports,
    routes_ledger,
)

api_router = APIRouter()

api_router.include_router(routes_departments.router, prefix="/departments", tags=["Departments"])
api_router.include_router(routes_offices.router, prefix="/offices", tags=["Offices"])
api_router.include_router(routes_suppliers.router, prefix="/suppliers", tags=["Suppliers"])
api_router.include_router(routes_categories.router, prefix="/categories", tags=["Categories"])
api_router.include_router(routes_items.router, prefix="/items", tags=["Items"])

api_router.include_router(routes_stock_in.router, prefix="/stockins", tags=["Stock In"])
api_router.include_router(routes_current_stock_in.router, prefix="/currentstockins", tags=["Current Stock In"])
api_router.include_router(routes_stock_out.router, prefix="/stockouts", tags=["Stock Out"])
api_router.include_router(routes_current_stock_out.router, prefix="/currentstockouts", tags=["Current Stock Out"])
api_router.include_router(routes_dead_stock.router, prefix="/deadstocks", tags=["Dead Stock"])
api_router.include_router(routes_stock_history.router, prefix="/stockhistories", tags=["Stock History"])

api_router.include_router(routes_dead_stock_requests.router, prefix="/deadstockrequests", tags=["Dead Stock Requests"])
api_router.include_router(routes_stock_requests.router, prefix="/stockInRequest", tags=["Stock In Requests"])

api_router.include_router(routes_users.router, prefix="/users", tags=["Users"])
api_router.include_router(routes_reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(routes_ledger.router, prefix="/blockchain", tags=["Blockchain"])
