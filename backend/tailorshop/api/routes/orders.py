"""Order routes.

Stock reservation, measurement history and notifications are handled by
``OrderService``; routes only translate HTTP into service calls.
"""

from fastapi import APIRouter, BackgroundTasks, Request, status

from tailorshop.api.deps import CurrentActor, Notifier
from tailorshop.core.rate_limit import limiter
from tailorshop.core.rbac import CurrentUser, RequireAdmin, RequireManager
from tailorshop.db.session import DbSession
from tailorshop.schemas.order import (
    OrderCreate,
    OrderPaymentRequest,
    OrderResponse,
    OrderTrackResponse,
    OrderUpdate,
)
from tailorshop.services.order_service import OrderService

router = APIRouter()


@router.get("/", response_model=list[OrderResponse])
@limiter.limit("60/minute")
def list_orders(request: Request, db: DbSession, current_user: CurrentUser):
    """List active orders, newest first."""
    return OrderService(db).list()


@router.get("/trash", response_model=list[OrderResponse])
@limiter.limit("60/minute")
def list_deleted_orders(request: Request, db: DbSession, current_user: CurrentUser):
    return OrderService(db).trash()


@router.get("/track/{order_id}", response_model=OrderTrackResponse)
@limiter.limit("30/minute")
def track_order(request: Request, order_id: str, db: DbSession):
    """Public order tracking. No authentication required."""
    return OrderService(db).track(order_id)


@router.get("/{order_id}", response_model=OrderResponse)
@limiter.limit("60/minute")
def get_order(request: Request, order_id: str, db: DbSession, current_user: CurrentUser):
    return OrderService(db).get(order_id)


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_order(
    request: Request,
    order_data: OrderCreate,
    background_tasks: BackgroundTasks,
    db: DbSession,
    actor: CurrentActor,
    notifier: Notifier,
):
    """Create an order. Reserved statuses deduct stock immediately."""
    service = OrderService(db, actor=actor, notifier=notifier)
    order = service.create(order_data)
    background_tasks.add_task(service.after_commit.run)
    return order


@router.put("/{order_id}", response_model=OrderResponse)
@limiter.limit("30/minute")
def update_order(
    request: Request,
    order_id: str,
    order_data: OrderUpdate,
    background_tasks: BackgroundTasks,
    db: DbSession,
    actor: CurrentActor,
    notifier: Notifier,
):
    """Update an order, reconciling stock with the new status and materials."""
    service = OrderService(db, actor=actor, notifier=notifier)
    order = service.update(order_id, order_data)
    background_tasks.add_task(service.after_commit.run)
    return order


@router.post("/{order_id}/payments", response_model=OrderResponse)
@limiter.limit("30/minute")
def record_order_payment(
    request: Request,
    order_id: str,
    payment: OrderPaymentRequest,
    db: DbSession,
    actor: CurrentActor,
):
    """Mark an order paid and book the income."""
    return OrderService(db, actor=actor).record_payment(order_id, payment)


@router.delete("/{order_id}")
@limiter.limit("30/minute")
def delete_order(
    request: Request, order_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    """Move an order to the trash. Reserved stock stays reserved."""
    OrderService(db, actor=actor).soft_delete(order_id)
    return {"message": "Order moved to trash"}


@router.put("/{order_id}/restore", response_model=OrderResponse)
@limiter.limit("30/minute")
def restore_order(
    request: Request, order_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    return OrderService(db, actor=actor).restore(order_id)


@router.delete("/{order_id}/force")
@limiter.limit("30/minute")
def force_delete_order(
    request: Request, order_id: str, db: DbSession, current_user: RequireAdmin, actor: CurrentActor,
):
    """Permanently delete an order and release any reserved stock."""
    OrderService(db, actor=actor).force_delete(order_id)
    return {"message": "Order permanently deleted"}
