"""Customer order models and the stock reservation rule."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tailorshop.db.base import Base, ObjectIdMixin, SoftDeleteMixin, TimestampMixin
from tailorshop.models.validators import non_negative, positive, validate_string_map


class OrderStatus(str, Enum):
    """Lifecycle status of a tailoring order."""

    DRAFT = "Draft"
    PENDING = "Pending"
    MEASURED = "Measured"
    CUTTING = "Cutting"
    STITCHING = "Stitching"
    TRIAL = "Trial"
    READY = "Ready"
    DELIVERED = "Delivered"
    IN_PROGRESS = "In Progress"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"


UNRESERVED_STATUSES = frozenset({OrderStatus.DRAFT, OrderStatus.CANCELLED})


def is_reserved(status: OrderStatus) -> bool:
    """True when an order in ``status`` holds its materials out of stock."""
    return OrderStatus(status) not in UNRESERVED_STATUSES


class Order(Base, ObjectIdMixin, TimestampMixin, SoftDeleteMixin):
    """A tailoring order (aggregate root for stock reservations)."""

    __tablename__ = "orders"

    customer_id: Mapped[str] = mapped_column(
        ForeignKey("customers.id"), nullable=False, index=True
    )
    style_id: Mapped[str] = mapped_column(ForeignKey("styles.id"), nullable=False, index=True)
    order_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    fit_on_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    delivery_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    discount: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True
    )
    measurement_snapshot: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    customer: Mapped["Customer"] = relationship("Customer")
    style: Mapped["Style"] = relationship("Style")
    materials_used: Mapped[list["OrderMaterial"]] = relationship(
        "OrderMaterial",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderMaterial.id",
    )

    @validates("price", "discount")
    def _validate_amounts(self, key, value):
        return non_negative(key, value)

    @validates("measurement_snapshot")
    def _validate_snapshot(self, key, value):
        return validate_string_map(key, value)

    @property
    def amount_due(self) -> float:
        return max(self.price - (self.discount or 0), 0)


class OrderMaterial(Base):
    """One material line reserved by an order."""

    __tablename__ = "order_materials"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[str] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # No foreign key: lines may point at materials that were since removed
    material_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="materials_used")

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return positive(key, value)


from tailorshop.models.catalog import Style  # noqa: E402
from tailorshop.models.customer import Customer  # noqa: E402
