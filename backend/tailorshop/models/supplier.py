"""Supplier model."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from tailorshop.db.base import Base, ObjectIdMixin, SoftDeleteMixin, TimestampMixin


class Supplier(Base, ObjectIdMixin, TimestampMixin, SoftDeleteMixin):
    """Supplier of materials."""

    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_person: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    payment_terms: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # "Net 30", "Cash on Delivery"
