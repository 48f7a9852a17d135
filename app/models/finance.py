"""Finance models: payments, invoices, expenses, fee structures and payroll runs."""

import datetime as dt
import uuid
from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class PaymentStatus(str, Enum):
    """Payment status options."""

    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class InvoiceStatus(str, Enum):
    """Invoice status options."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class ExpenseStatus(str, Enum):
    """Expense approval status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PayrollRunStatus(str, Enum):
    """Payroll run lifecycle."""

    DRAFT = "draft"
    PROCESSING = "processing"
    PAID = "paid"
    VOID = "void"


PAYROLL_EXPENSE_CATEGORY = "Payroll"


class Payment(BaseModel):
    """A fee payment received from (or expected of) a student."""

    __tablename__ = "payments"
    __table_args__ = (
        Index("idx_payments_status", "status"),
        Index("idx_payments_date", "date"),
        Index("idx_payments_reference", "reference", unique=True),
    )

    # student_name is the value printed on receipts, student_id links when known
    student_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    student_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("student_records.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)  # Tuition, Books, ...
    payment_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    reference: Mapped[str | None] = mapped_column(String(30), nullable=True)
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PAID.value
    )
    received_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    invoice_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("invoices.id", ondelete="SET NULL"),
        nullable=True,
    )


class Invoice(BaseModel):
    """A bill issued to a student, possibly paid in instalments."""

    __tablename__ = "invoices"
    __table_args__ = (
        Index("idx_invoices_status", "status"),
        Index("idx_invoices_due_date", "due_date"),
        Index("idx_invoices_invoice_no", "invoice_no", unique=True),
    )

    invoice_no: Mapped[str | None] = mapped_column(String(30), nullable=True)
    student_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    student_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("student_records.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvoiceStatus.PENDING.value
    )
    # [{"description": "Tuition", "amount": 1000}]
    items: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    @property
    def balance(self) -> Decimal:
        """Get the amount still owed."""
        return (self.amount or Decimal("0")) - (self.paid_amount or Decimal("0"))


class Expense(BaseModel):
    """An outgoing expense awaiting or holding approval."""

    __tablename__ = "expenses"
    __table_args__ = (
        Index("idx_expenses_status", "status"),
        Index("idx_expenses_date", "date"),
    )

    description: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    vendor: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ExpenseStatus.PENDING.value
    )
    approved_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    receipt_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    payroll_run_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("payroll_runs.id", ondelete="SET NULL"),
        nullable=True,
    )

    payroll_run = relationship("PayrollRun", back_populates="expense", lazy="selectin")


class FeeStructure(BaseModel):
    """A named fee charged per grade level and academic year."""

    __tablename__ = "fee_structures"
    __table_args__ = (
        Index("idx_fee_structures_school_year", "school_year_id"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    grade_level_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("grade_levels.id", ondelete="SET NULL"),
        nullable=True,
    )
    school_year_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("academic_years.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    grade_level = relationship("GradeLevel", lazy="selectin")


class PayrollRun(BaseModel):
    """One processed payroll for a period, with its booked expense."""

    __tablename__ = "payroll_runs"
    __table_args__ = (
        Index("idx_payroll_runs_period", "period_start", "period_end"),
    )

    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PayrollRunStatus.PAID.value
    )
    processed_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    expense = relationship(
        "Expense",
        back_populates="payroll_run",
        uselist=False,
        lazy="selectin",
    )

    @property
    def period_label(self) -> str:
        """Get a display label such as "March 2026"."""
        return self.period_start.strftime("%B %Y")
