"""Order lifecycle: create/update/delete orders while keeping stock consistent.

Reservation rule: an order whose status is reserved (anything but Draft and
Cancelled) has had each of its material lines deducted from stock exactly
once; an unreserved order has nothing outstanding.

Every mutating method runs in one unit of work on ``self.db``. Stock
changes, the order row and the customer's measurement history are committed
together or rolled back together, and the triggering error is re-raised.
Notifications, low-stock alerts and audit entries happen only after commit
and can never fail the operation.
"""

import logging
import re
from functools import partial
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from tailorshop.core.exceptions import (
    AlreadyPaidError,
    CustomerNotFound,
    OrderNotFound,
    StyleNotFound,
)
from tailorshop.core.rbac import UserRole
from tailorshop.db.base import new_object_id
from tailorshop.models.catalog import Style
from tailorshop.models.customer import Customer
from tailorshop.models.order import Order, OrderMaterial, OrderStatus, PaymentStatus, is_reserved
from tailorshop.models.transaction import Transaction, TransactionType
from tailorshop.models.user import User
from tailorshop.schemas.order import OrderCreate, OrderPaymentRequest, OrderUpdate
from tailorshop.services.audit_service import audit_after_commit
from tailorshop.services.inventory_service import MaterialLine, StockLedger, as_lines, order_reference
from tailorshop.services.measurement_service import upsert_history, validate_snapshot
from tailorshop.services.notification_service import (
    Contact,
    MaterialAlert,
    OrderNotice,
    OrderNotifier,
)
from tailorshop.services.post_commit import Actor, AfterCommit, best_effort

logger = logging.getLogger(__name__)

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")

# Scalar fields copied from an update when provided
_SCALAR_FIELDS = (
    "customer_id",
    "style_id",
    "delivery_date",
    "fit_on_date",
    "price",
    "discount",
    "description",
)


class OrderService:
    """Order Lifecycle Manager."""

    def __init__(
        self,
        db: Session,
        actor: Optional[Actor] = None,
        notifier: Optional[OrderNotifier] = None,
        after_commit: Optional[AfterCommit] = None,
    ):
        self.db = db
        self.actor = actor or Actor()
        self.notifier = notifier
        self.after_commit = after_commit if after_commit is not None else AfterCommit()
        self.ledger = StockLedger(db)

    # ===== QUERIES =====

    def list(self) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.not_deleted())
            .order_by(Order.created_at.desc())
            .all()
        )

    def trash(self) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.only_deleted())
            .order_by(Order.deleted_at.desc())
            .all()
        )

    def get(self, order_id: str) -> Order:
        return self._active_order(order_id)

    def track(self, order_id: str) -> dict:
        """Public read-only projection. Malformed ids are reported as not found."""
        if not OBJECT_ID_RE.match(order_id or ""):
            raise OrderNotFound(order_id)
        order = self._active_order(order_id)
        return {
            "id": order.id,
            "status": order.status,
            "delivery_date": order.delivery_date,
            "price": order.price,
            "description": order.description,
            "style_name": order.style.name if order.style else None,
            "customer_name": order.customer.first_name if order.customer else None,
            "image": order.style.image if order.style else None,
        }

    # ===== LIFECYCLE =====

    def create(self, data: OrderCreate) -> Order:
        order_id = new_object_id()
        lines = as_lines(data.materials_used)
        snapshot = dict(data.measurement_snapshot or {})

        try:
            self._require_customer(data.customer_id)
            self._require_style(data.style_id)

            if is_reserved(data.status):
                self.ledger.deduct(lines, order_id, self.actor.user_id)

            if snapshot:
                validate_snapshot(self.db, data.style_id, snapshot)

            order = Order(
                id=order_id,
                customer_id=data.customer_id,
                style_id=data.style_id,
                delivery_date=data.delivery_date,
                fit_on_date=data.fit_on_date,
                price=data.price,
                discount=data.discount,
                description=data.description,
                status=data.status,
                measurement_snapshot=snapshot,
                materials_used=_order_lines(lines),
                created_by=self.actor.user_id,
            )
            self.db.add(order)

            if snapshot:
                upsert_history(self.db, data.customer_id, order_id, snapshot, notes=data.description)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order_id} created with status {data.status.value}")

        if data.status != OrderStatus.DRAFT:
            self._queue_customer_notice("order_created", order)
        if lines:
            self._queue_low_stock(line.material_id for line in lines)
        self._audit("CREATE", order_id, {
            "customer": data.customer_id,
            "style": data.style_id,
            "price": data.price,
            "status": data.status.value,
        })
        return order

    def update(self, order_id: str, data: OrderUpdate) -> Order:
        try:
            order = self._active_order(order_id, lock=True)

            old_status = order.status
            new_status = data.status or old_status
            was_reserved = is_reserved(old_status)
            will_be_reserved = is_reserved(new_status)

            replacing = data.materials_used is not None
            old_lines = as_lines(order.materials_used)
            new_lines = as_lines(data.materials_used) if replacing else old_lines

            # Revert the old lines before deducting the new ones so that a
            # material kept across the change nets out instead of double counting.
            if was_reserved and (replacing or not will_be_reserved):
                self.ledger.revert(old_lines, order.id, self.actor.user_id)
            if will_be_reserved and (replacing or not was_reserved):
                self.ledger.deduct(new_lines, order.id, self.actor.user_id)
            if replacing:
                order.materials_used = _order_lines(new_lines)

            if data.customer_id is not None and data.customer_id != order.customer_id:
                self._require_customer(data.customer_id)
            if data.style_id is not None and data.style_id != order.style_id:
                self._require_style(data.style_id)
            for field in _SCALAR_FIELDS:
                value = getattr(data, field)
                if value is not None:
                    setattr(order, field, value)
            order.status = new_status

            if data.measurement_snapshot is not None:
                snapshot = dict(data.measurement_snapshot)
                validate_snapshot(self.db, order.style_id, snapshot)
                order.measurement_snapshot = snapshot
                # History goes to the order's current customer. An entry already
                # recorded under a previous customer stays with that customer.
                if snapshot:
                    upsert_history(
                        self.db, order.customer_id, order.id, snapshot, notes=order.description,
                    )

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order_id} updated: {old_status.value} -> {new_status.value}")

        if new_status != old_status:
            if new_status == OrderStatus.READY:
                self._queue_customer_notice("order_ready", order)
            elif new_status != OrderStatus.DRAFT:
                if old_status == OrderStatus.DRAFT and new_status == OrderStatus.PENDING:
                    self._queue_customer_notice("order_created", order)
                else:
                    self._queue_customer_notice("order_status_changed", order)
        if replacing and new_lines:
            self._queue_low_stock(line.material_id for line in new_lines)
        self._audit("UPDATE", order_id, {"status": new_status.value, "price": order.price})
        return order

    def soft_delete(self, order_id: str) -> None:
        """Move an order to the trash. Stock stays reserved."""
        try:
            order = self._active_order(order_id)
            order.soft_delete()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self._audit("DELETE", order_id)

    def restore(self, order_id: str) -> Order:
        """Bring an order back from the trash. Stock is not touched."""
        try:
            order = (
                self.db.query(Order)
                .filter(Order.id == order_id, Order.only_deleted())
                .first()
            )
            if order is None:
                raise OrderNotFound(order_id)
            order.restore()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self._audit("RESTORE", order_id)
        return order

    def force_delete(self, order_id: str) -> None:
        """Permanently remove an order, releasing any outstanding reservation.

        Works on trashed and live orders alike. The stock reversal and the
        delete commit together.
        """
        try:
            order = (
                self.db.query(Order)
                .filter(Order.id == order_id)
                .with_for_update()
                .first()
            )
            if order is None:
                raise OrderNotFound(order_id)
            if is_reserved(order.status):
                self.ledger.revert(as_lines(order.materials_used), order.id, self.actor.user_id)
            self.db.delete(order)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Order {order_id} permanently deleted")
        self._audit("FORCE_DELETE", order_id)

    def record_payment(self, order_id: str, data: OrderPaymentRequest) -> Order:
        """Mark an order paid and book the income in the same transaction."""
        try:
            order = self._active_order(order_id, lock=True)
            if order.payment_status == PaymentStatus.PAID:
                raise AlreadyPaidError("Order is already paid")

            order.payment_status = PaymentStatus.PAID
            order.payment_method = data.payment_method.value
            order.transaction_id = data.transaction_id
            self.db.add(Transaction(
                type=TransactionType.INCOME,
                category="Sales",
                amount=order.amount_due,
                reference=order_reference(order.id),
                description=f"Payment for order #{order.id[-6:]}",
                payment_method=data.payment_method,
                recorded_by=self.actor.user_id,
            ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self._audit("PAYMENT", order_id, {"amount": order.amount_due, "method": data.payment_method.value})
        return order

    # ===== HELPERS =====

    def _active_order(self, order_id: str, lock: bool = False) -> Order:
        query = self.db.query(Order).filter(Order.id == order_id, Order.not_deleted())
        if lock:
            query = query.with_for_update()
        order = query.first()
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def _require_customer(self, customer_id: str) -> None:
        exists = (
            self.db.query(Customer.id)
            .filter(Customer.id == customer_id, Customer.not_deleted())
            .first()
        )
        if exists is None:
            raise CustomerNotFound(customer_id)

    def _require_style(self, style_id: str) -> None:
        exists = (
            self.db.query(Style.id)
            .filter(Style.id == style_id, Style.not_deleted())
            .first()
        )
        if exists is None:
            raise StyleNotFound(style_id)

    def _queue_customer_notice(self, kind: str, order: Order) -> None:
        if self.notifier is None:
            return
        with best_effort(f"{kind} notice for order {order.id}"):
            customer = self.db.get(Customer, order.customer_id)
            if customer is None:
                return
            contact = Contact(customer.first_name, customer.email, customer.phone)
            notice = OrderNotice(
                order_id=order.id,
                status=order.status.value,
                price=order.price,
                delivery_date=order.delivery_date,
                description=order.description,
            )
            self.after_commit.defer(
                f"{kind} {order.id}", partial(getattr(self.notifier, kind), contact, notice),
            )

    def _queue_low_stock(self, material_ids: Iterable[str]) -> None:
        if self.notifier is None:
            return
        with best_effort("low-stock scan"):
            low = self.ledger.low_stock(material_ids)
            if not low:
                return
            admins = [
                Contact(u.name or u.email, u.email, u.phone)
                for u in self.db.query(User).filter(
                    User.role == UserRole.ADMIN, User.is_active.is_(True)
                )
            ]
            for material in low:
                alert = MaterialAlert(
                    material_id=material.id,
                    name=material.name,
                    quantity=material.quantity,
                    unit=material.unit.value,
                    threshold=material.low_stock_threshold,
                )
                self.after_commit.defer(
                    f"low stock {material.id}", partial(self.notifier.low_stock, alert, admins),
                )

    def _audit(self, action: str, order_id: str, details: Optional[dict] = None) -> None:
        audit_after_commit(self.db, self.actor, action, "Order", order_id, details)


def _order_lines(lines: List[MaterialLine]) -> List[OrderMaterial]:
    return [OrderMaterial(material_id=line.material_id, quantity=line.quantity) for line in lines]
