"""Workshop staff and the jobs assigned to them."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, Float, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tailorshop.db.base import Base, ObjectIdMixin, SoftDeleteMixin, TimestampMixin
from tailorshop.models.validators import non_negative


class JobStatus(str, Enum):
    """Progress of a job card."""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"


class Employee(Base, ObjectIdMixin, TimestampMixin, SoftDeleteMixin):
    """A tailor, cutter or other member of the workshop staff."""

    __tablename__ = "employees"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    nic: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)  # "Tailor", "Cutter"
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    salary: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="Active", nullable=False)

    @validates("salary")
    def _validate_salary(self, key, value):
        return non_negative(key, value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Job(Base, ObjectIdMixin, TimestampMixin, SoftDeleteMixin):
    """An order handed to an employee with a deadline."""

    __tablename__ = "jobs"

    order_id: Mapped[str] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    employee_id: Mapped[str] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[JobStatus] = mapped_column(
        SQLEnum(JobStatus), default=JobStatus.PENDING, nullable=False, index=True
    )

    order: Mapped["Order"] = relationship("Order")
    employee: Mapped["Employee"] = relationship("Employee")

    @property
    def employee_name(self) -> Optional[str]:
        return self.employee.full_name if self.employee else None


from tailorshop.models.order import Order  # noqa: E402
