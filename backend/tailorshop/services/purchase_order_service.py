"""Purchase orders: creation, receiving into stock, and payment."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from tailorshop.core.exceptions import (
    AlreadyPaidError,
    FinalizedRecordError,
    PurchaseOrderNotFound,
    SupplierNotFound,
)
from tailorshop.models.purchase_order import (
    POPaymentStatus,
    POStatus,
    PurchaseOrder,
    PurchaseOrderItem,
)
from tailorshop.models.supplier import Supplier
from tailorshop.models.transaction import PaymentMethod, Transaction, TransactionType
from tailorshop.schemas.purchase_order import PurchaseOrderCreate
from tailorshop.services.audit_service import audit_after_commit
from tailorshop.services.inventory_service import StockLedger
from tailorshop.services.post_commit import Actor

logger = logging.getLogger(__name__)


def po_reference(po_id: str) -> str:
    return f"PO #{po_id}"


class PurchaseOrderService:
    def __init__(self, db: Session, actor: Optional[Actor] = None):
        self.db = db
        self.actor = actor or Actor()
        self.ledger = StockLedger(db)

    def list(self) -> List[PurchaseOrder]:
        return (
            self.db.query(PurchaseOrder)
            .filter(PurchaseOrder.not_deleted())
            .order_by(PurchaseOrder.created_at.desc())
            .all()
        )

    def trash(self) -> List[PurchaseOrder]:
        return (
            self.db.query(PurchaseOrder)
            .filter(PurchaseOrder.only_deleted())
            .order_by(PurchaseOrder.deleted_at.desc())
            .all()
        )

    def get(self, po_id: str, lock: bool = False) -> PurchaseOrder:
        query = self.db.query(PurchaseOrder).filter(
            PurchaseOrder.id == po_id, PurchaseOrder.not_deleted()
        )
        if lock:
            query = query.with_for_update()
        po = query.first()
        if po is None:
            raise PurchaseOrderNotFound(po_id)
        return po

    def create(self, data: PurchaseOrderCreate) -> PurchaseOrder:
        """Create a Draft purchase order with computed line and order totals."""
        supplier = (
            self.db.query(Supplier)
            .filter(Supplier.id == data.supplier_id, Supplier.not_deleted())
            .first()
        )
        if supplier is None:
            raise SupplierNotFound(data.supplier_id)

        items = [
            PurchaseOrderItem(
                material_id=item.material_id,
                quantity=item.quantity,
                unit_cost=item.unit_cost,
                total=item.quantity * item.unit_cost,
            )
            for item in data.items
        ]
        po = PurchaseOrder(
            supplier_id=data.supplier_id,
            items=items,
            total_amount=sum(item.total for item in items),
            expected_date=data.expected_date,
            notes=data.notes,
            status=POStatus.DRAFT,
            created_by=self.actor.user_id,
        )
        try:
            self.db.add(po)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self._audit("CREATE_PO", po.id, {"supplier": data.supplier_id, "total_amount": po.total_amount})
        return po

    def update_status(self, po_id: str, status: POStatus) -> PurchaseOrder:
        """Move a purchase order to ``status``.

        Received is final. Receiving adds every line to stock in the same
        transaction as the status change; lines for materials that no longer
        exist are skipped.
        """
        try:
            po = self.get(po_id, lock=True)
            if po.status == POStatus.RECEIVED:
                raise FinalizedRecordError("Cannot change status of received order")

            if status == POStatus.RECEIVED:
                reference = po_reference(po.id)
                for item in po.items:
                    self.ledger.receive(item.material_id, item.quantity, reference, self.actor.user_id)
                po.received_date = datetime.now(timezone.utc)
            po.status = status
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        action = "RECEIVE_PO" if status == POStatus.RECEIVED else "UPDATE_PO_STATUS"
        self._audit(action, po_id, {"status": status.value})
        return po

    def pay(self, po_id: str, payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER) -> PurchaseOrder:
        """Mark paid and book the expense in the ledger atomically."""
        try:
            po = self.get(po_id, lock=True)
            if po.payment_status == POPaymentStatus.PAID:
                raise AlreadyPaidError("Order is already paid")

            po.payment_status = POPaymentStatus.PAID
            self.db.add(Transaction(
                type=TransactionType.EXPENSE,
                category="Procurement",
                amount=po.total_amount,
                reference=po_reference(po.id),
                description=f"Payment for Purchase Order #{po.id}",
                payment_method=payment_method,
                recorded_by=self.actor.user_id,
            ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self._audit("PAY_PO", po_id, {"payment_method": payment_method.value, "amount": po.total_amount})
        return po

    def soft_delete(self, po_id: str) -> None:
        po = self.get(po_id)
        if po.status == POStatus.RECEIVED:
            raise FinalizedRecordError("Cannot delete a received purchase order")
        po.soft_delete()
        self.db.commit()
        self._audit("DELETE_PO", po_id)

    def restore(self, po_id: str) -> PurchaseOrder:
        po = (
            self.db.query(PurchaseOrder)
            .filter(PurchaseOrder.id == po_id, PurchaseOrder.only_deleted())
            .first()
        )
        if po is None:
            raise PurchaseOrderNotFound(po_id)
        po.restore()
        self.db.commit()
        self._audit("RESTORE_PO", po_id)
        return po

    def force_delete(self, po_id: str) -> None:
        """Remove a purchase order for good. Received stock stays in inventory."""
        po = self.db.query(PurchaseOrder).filter(PurchaseOrder.id == po_id).first()
        if po is None:
            raise PurchaseOrderNotFound(po_id)
        self.db.delete(po)
        self.db.commit()
        self._audit("FORCE_DELETE_PO", po_id)

    def _audit(self, action: str, po_id: str, details: Optional[dict] = None) -> None:
        audit_after_commit(self.db, self.actor, action, "PurchaseOrder", po_id, details)
