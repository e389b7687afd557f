"""Customer model with per-order measurement history."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tailorshop.db.base import Base, ObjectIdMixin, SoftDeleteMixin, TimestampMixin
from tailorshop.models.validators import validate_string_map


class Customer(Base, ObjectIdMixin, TimestampMixin, SoftDeleteMixin):
    """A shop customer."""

    __tablename__ = "customers"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    nic: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)

    measurement_history: Mapped[list["MeasurementHistoryEntry"]] = relationship(
        "MeasurementHistoryEntry",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="MeasurementHistoryEntry.id",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class MeasurementHistoryEntry(Base):
    """Measurements captured for one order, at most one row per (customer, order)."""

    __tablename__ = "measurement_history"
    __table_args__ = (
        UniqueConstraint("customer_id", "order_id", name="uq_measurement_customer_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[str] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Plain column: history outlives a force-deleted order
    order_id: Mapped[Optional[str]] = mapped_column(String(24), nullable=True, index=True)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    measurements: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    customer: Mapped["Customer"] = relationship("Customer", back_populates="measurement_history")

    @validates("measurements")
    def _validate_measurements(self, key, value):
        return validate_string_map(key, value)
