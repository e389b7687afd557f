"""Material (fabric and trims) inventory model."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy import Enum as SQLEnum, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tailorshop.db.base import Base, ObjectIdMixin, SoftDeleteMixin, TimestampMixin
from tailorshop.models.validators import non_negative


class MaterialType(str, Enum):
    FABRIC = "Fabric"
    BUTTON = "Button"
    THREAD = "Thread"
    ZIPPER = "Zipper"
    LINING = "Lining"
    OTHER = "Other"


class MaterialUnit(str, Enum):
    METERS = "Meters"
    YARDS = "Yards"
    PIECES = "Pieces"
    SPOOLS = "Spools"
    BOX = "Box"


class Material(Base, ObjectIdMixin, TimestampMixin, SoftDeleteMixin):
    """A stocked material. ``quantity`` only changes alongside a StockMovement."""

    __tablename__ = "materials"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[MaterialType] = mapped_column(SQLEnum(MaterialType), nullable=False)
    color: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    quantity: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    unit: Mapped[MaterialUnit] = mapped_column(SQLEnum(MaterialUnit), nullable=False)
    cost_per_unit: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    supplier: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    low_stock_threshold: Mapped[float] = mapped_column(Float, default=10, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sku: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)

    movements: Mapped[list["StockMovement"]] = relationship(
        "StockMovement",
        back_populates="material",
        cascade="all, delete-orphan",
    )

    @validates("quantity", "cost_per_unit", "low_stock_threshold")
    def _validate_non_negative(self, key, value):
        return non_negative(key, value)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold


from tailorshop.models.stock import StockMovement  # noqa: E402
