"""API routes."""

from fastapi import APIRouter

from tailorshop.api.routes import (
    auth,
    catalog,
    customers,
    finance,
    materials,
    orders,
    purchase_orders,
    staff,
    suppliers,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(materials.router, prefix="/materials", tags=["materials", "inventory"])
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(catalog.styles_router, prefix="/styles", tags=["styles"])
api_router.include_router(catalog.item_types_router, prefix="/item-types", tags=["item-types"])
api_router.include_router(suppliers.router, prefix="/suppliers", tags=["suppliers"])
api_router.include_router(purchase_orders.router, prefix="/purchase-orders", tags=["purchase-orders"])
api_router.include_router(finance.router, prefix="/finance", tags=["finance"])
api_router.include_router(staff.employees_router, prefix="/employees", tags=["employees"])
api_router.include_router(staff.jobs_router, prefix="/jobs", tags=["jobs"])
