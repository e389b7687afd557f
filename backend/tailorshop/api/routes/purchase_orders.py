"""Purchase order routes."""

from fastapi import APIRouter, Request, status

from tailorshop.api.deps import CurrentActor
from tailorshop.core.rate_limit import limiter
from tailorshop.core.rbac import CurrentUser, RequireAdmin, RequireManager
from tailorshop.db.session import DbSession
from tailorshop.schemas.purchase_order import (
    PurchaseOrderCreate,
    PurchaseOrderPayRequest,
    PurchaseOrderResponse,
    PurchaseOrderStatusUpdate,
)
from tailorshop.services.purchase_order_service import PurchaseOrderService

router = APIRouter()


@router.get("/", response_model=list[PurchaseOrderResponse])
@limiter.limit("60/minute")
def list_purchase_orders(request: Request, db: DbSession, current_user: CurrentUser):
    return PurchaseOrderService(db).list()


@router.get("/trash", response_model=list[PurchaseOrderResponse])
@limiter.limit("60/minute")
def list_deleted_purchase_orders(request: Request, db: DbSession, current_user: CurrentUser):
    return PurchaseOrderService(db).trash()


@router.get("/{po_id}", response_model=PurchaseOrderResponse)
@limiter.limit("60/minute")
def get_purchase_order(request: Request, po_id: str, db: DbSession, current_user: CurrentUser):
    return PurchaseOrderService(db).get(po_id)


@router.post("/", response_model=PurchaseOrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_purchase_order(
    request: Request, po_data: PurchaseOrderCreate, db: DbSession,
    current_user: RequireManager, actor: CurrentActor,
):
    return PurchaseOrderService(db, actor=actor).create(po_data)


@router.put("/{po_id}/status", response_model=PurchaseOrderResponse)
@limiter.limit("30/minute")
def update_purchase_order_status(
    request: Request, po_id: str, status_update: PurchaseOrderStatusUpdate, db: DbSession,
    current_user: RequireManager, actor: CurrentActor,
):
    """Change status. Moving to Received adds every line to stock."""
    return PurchaseOrderService(db, actor=actor).update_status(po_id, status_update.status)


@router.put("/{po_id}/pay", response_model=PurchaseOrderResponse)
@limiter.limit("30/minute")
def pay_purchase_order(
    request: Request, po_id: str, payment: PurchaseOrderPayRequest, db: DbSession,
    current_user: RequireManager, actor: CurrentActor,
):
    return PurchaseOrderService(db, actor=actor).pay(po_id, payment.payment_method)


@router.delete("/{po_id}")
@limiter.limit("30/minute")
def delete_purchase_order(
    request: Request, po_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    PurchaseOrderService(db, actor=actor).soft_delete(po_id)
    return {"message": "Purchase order moved to trash"}


@router.put("/{po_id}/restore", response_model=PurchaseOrderResponse)
@limiter.limit("30/minute")
def restore_purchase_order(
    request: Request, po_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    return PurchaseOrderService(db, actor=actor).restore(po_id)


@router.delete("/{po_id}/force")
@limiter.limit("30/minute")
def force_delete_purchase_order(
    request: Request, po_id: str, db: DbSession, current_user: RequireAdmin, actor: CurrentActor,
):
    PurchaseOrderService(db, actor=actor).force_delete(po_id)
    return {"message": "Purchase order permanently deleted"}
