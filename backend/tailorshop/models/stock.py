"""Append-only stock movement ledger."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, Float, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tailorshop.db.base import Base
from tailorshop.models.validators import non_negative


class MovementType(str, Enum):
    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"


class MovementReason:
    """Reason strings written by the stock ledger."""

    ORDER_CREATION = "Order Creation"
    ORDER_REVERSAL = "Order Cancellation/Draft"
    MANUAL_ADJUSTMENT = "Manual Adjustment"
    MANUAL_UPDATE = "Manual Update"
    INITIAL_STOCK = "Initial Stock"
    PURCHASE_RECEIVED = "Purchase Order Received"


class StockMovement(Base):
    """One quantity change to a material (single source of truth).

    Rows are written once and never updated; ``quantity`` is the magnitude
    of the change and ``type`` its direction.
    """

    __tablename__ = "stock_movements"

    id: Mapped[int] = mapped_column(primary_key=True)
    material_id: Mapped[str] = mapped_column(
        ForeignKey("materials.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[MovementType] = mapped_column(SQLEnum(MovementType), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str] = mapped_column(String(100), nullable=False)
    reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    performed_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    material: Mapped["Material"] = relationship("Material", back_populates="movements")

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return non_negative(key, value)


from tailorshop.models.material import Material  # noqa: E402
