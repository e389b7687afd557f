"""SQLAlchemy models."""

from tailorshop.models.user import User
from tailorshop.models.material import Material, MaterialType, MaterialUnit
from tailorshop.models.stock import MovementReason, MovementType, StockMovement
from tailorshop.models.catalog import ItemType, Style
from tailorshop.models.customer import Customer, MeasurementHistoryEntry
from tailorshop.models.order import (
    Order,
    OrderMaterial,
    OrderStatus,
    PaymentStatus,
    is_reserved,
)
from tailorshop.models.supplier import Supplier
from tailorshop.models.purchase_order import (
    POPaymentStatus,
    POStatus,
    PurchaseOrder,
    PurchaseOrderItem,
)
from tailorshop.models.transaction import PaymentMethod, Transaction, TransactionType
from tailorshop.models.staff import Employee, Job, JobStatus
from tailorshop.models.audit import AuditLogEntry

__all__ = [
    "User",
    "Material",
    "MaterialType",
    "MaterialUnit",
    "StockMovement",
    "MovementType",
    "MovementReason",
    "Style",
    "ItemType",
    "Customer",
    "MeasurementHistoryEntry",
    "Order",
    "OrderMaterial",
    "OrderStatus",
    "PaymentStatus",
    "is_reserved",
    "Supplier",
    "PurchaseOrder",
    "PurchaseOrderItem",
    "POStatus",
    "POPaymentStatus",
    "Transaction",
    "TransactionType",
    "PaymentMethod",
    "Employee",
    "Job",
    "JobStatus",
    "AuditLogEntry",
]
