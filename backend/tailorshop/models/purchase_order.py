"""Purchase order models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, Float, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tailorshop.db.base import Base, ObjectIdMixin, SoftDeleteMixin, TimestampMixin
from tailorshop.models.validators import non_negative, positive


class POStatus(str, Enum):
    """Status of a purchase order. RECEIVED is final."""

    DRAFT = "Draft"
    ORDERED = "Ordered"
    RECEIVED = "Received"
    CANCELLED = "Cancelled"


class POPaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"


class PurchaseOrder(Base, ObjectIdMixin, TimestampMixin, SoftDeleteMixin):
    """A purchase order to a supplier."""

    __tablename__ = "purchase_orders"

    supplier_id: Mapped[str] = mapped_column(
        ForeignKey("suppliers.id"), nullable=False, index=True
    )
    total_amount: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    status: Mapped[POStatus] = mapped_column(
        SQLEnum(POStatus), default=POStatus.DRAFT, nullable=False
    )
    payment_status: Mapped[POPaymentStatus] = mapped_column(
        SQLEnum(POPaymentStatus), default=POPaymentStatus.PENDING, nullable=False
    )
    order_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    expected_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    received_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    supplier: Mapped["Supplier"] = relationship("Supplier")
    items: Mapped[list["PurchaseOrderItem"]] = relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )


class PurchaseOrderItem(Base):
    """A single material line in a purchase order."""

    __tablename__ = "purchase_order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    purchase_order_id: Mapped[str] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    material_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    unit_cost: Mapped[float] = mapped_column(Float, nullable=False)
    total: Mapped[float] = mapped_column(Float, nullable=False)

    purchase_order: Mapped["PurchaseOrder"] = relationship("PurchaseOrder", back_populates="items")

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return positive(key, value)

    @validates("unit_cost", "total")
    def _validate_cost(self, key, value):
        return non_negative(key, value)


from tailorshop.models.supplier import Supplier  # noqa: E402
