"""SQLAlchemy declarative base and common utilities."""

import os
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


def new_object_id() -> str:
    """Return a 24-hex-character id: 4-byte seconds timestamp + 8 random bytes."""
    return f"{int(time.time()):08x}{os.urandom(8).hex()}"


class ObjectIdMixin:
    """String primary key in the 24-hex-character document id format."""

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class SoftDeleteMixin:
    """Soft-delete support via ``is_deleted`` flag and ``deleted_at`` timestamp.

    Instead of physically removing rows, call ``soft_delete()`` to set
    ``is_deleted = True`` and ``deleted_at`` to the current UTC time.
    Use ``not_deleted()`` / ``only_deleted()`` as query filters. Call
    ``restore()`` to undo.
    """

    is_deleted: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="0", nullable=False, index=True,
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None,
    )

    def soft_delete(self) -> None:
        """Mark this row as deleted."""
        self.is_deleted = True
        self.deleted_at = datetime.now(timezone.utc)

    def restore(self) -> None:
        """Restore a soft-deleted row."""
        self.is_deleted = False
        self.deleted_at = None

    @classmethod
    def not_deleted(cls):
        """SQLAlchemy filter expression: ``WHERE is_deleted = FALSE``."""
        return cls.is_deleted.is_(False)

    @classmethod
    def only_deleted(cls):
        """SQLAlchemy filter expression: ``WHERE is_deleted = TRUE``."""
        return cls.is_deleted.is_(True)
