"""Teacher and employee models."""

import uuid
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Index, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class EmployeeStatus(str, Enum):
    """Employment status used by payroll."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Teacher(BaseModel):
    """Teaching staff member."""

    __tablename__ = "teachers"
    __table_args__ = (
        Index("idx_teachers_department", "department"),
    )

    employee_no: Mapped[str | None] = mapped_column(String(30), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    employment_type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # full_time, part_time
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    profile_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    profile = relationship("Profile", lazy="selectin")

    @property
    def full_name(self) -> str:
        """Get the teacher's full name."""
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Employee(BaseModel):
    """Payroll employee record (teaching and non-teaching)."""

    __tablename__ = "employees"
    __table_args__ = (
        Index("idx_employees_status", "status"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    employee_no: Mapped[str | None] = mapped_column(String(30), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    basic_salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EmployeeStatus.ACTIVE.value
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    profile_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    @property
    def is_payroll_active(self) -> bool:
        """Check if the employee is included in payroll runs."""
        return self.status == EmployeeStatus.ACTIVE.value
