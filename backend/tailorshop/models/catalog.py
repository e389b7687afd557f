"""Style catalogue and item-type measurement templates."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import JSON, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from tailorshop.db.base import Base, ObjectIdMixin, SoftDeleteMixin, TimestampMixin
from tailorshop.models.validators import non_negative, validate_string_list

# Common categories; any string is accepted and matched against ItemType.name
STYLE_CATEGORIES = ("Shirt", "Trouser", "Suit", "Other")


class Style(Base, ObjectIdMixin, TimestampMixin, SoftDeleteMixin):
    """A garment style offered by the shop."""

    __tablename__ = "styles"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    base_price: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(100), default="Other", nullable=False, index=True)

    @validates("base_price")
    def _validate_price(self, key, value):
        return non_negative(key, value)


class ItemType(Base, ObjectIdMixin, TimestampMixin, SoftDeleteMixin):
    """Measurement template: the field names allowed for a style category."""

    __tablename__ = "item_types"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    fields: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    @validates("fields")
    def _validate_fields(self, key, value):
        return validate_string_list(key, value)
