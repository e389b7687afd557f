"""Supplier routes."""

from fastapi import APIRouter, Request, status

from tailorshop.core.exceptions import SupplierNotFound
from tailorshop.core.rate_limit import limiter
from tailorshop.core.rbac import CurrentUser, RequireManager
from tailorshop.db.session import DbSession
from tailorshop.models.supplier import Supplier
from tailorshop.schemas.supplier import SupplierCreate, SupplierResponse

router = APIRouter()


@router.get("/", response_model=list[SupplierResponse])
@limiter.limit("60/minute")
def list_suppliers(request: Request, db: DbSession, current_user: CurrentUser):
    """List all suppliers."""
    return db.query(Supplier).filter(Supplier.not_deleted()).order_by(Supplier.name).limit(500).all()


@router.get("/{supplier_id}", response_model=SupplierResponse)
@limiter.limit("60/minute")
def get_supplier(request: Request, supplier_id: str, db: DbSession, current_user: CurrentUser):
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id, Supplier.not_deleted()).first()
    if supplier is None:
        raise SupplierNotFound(supplier_id)
    return supplier


@router.post("/", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_supplier(request: Request, supplier_data: SupplierCreate, db: DbSession, current_user: RequireManager):
    supplier = Supplier(**supplier_data.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier
