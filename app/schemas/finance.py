"""Pydantic schemas for payments, invoices, expenses, employees and payroll."""

import datetime as dt
import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from app.models.finance import ExpenseStatus, PaymentStatus
from app.models.staff import EmployeeStatus
from app.schemas.common import BaseSchema


# === Payments ===

class PaymentCreate(BaseModel):
    """Record a received payment."""

    student_name: str = Field(..., min_length=1, max_length=200)
    student_id: uuid.UUID | None = None
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    type: str | None = Field("Tuition", max_length=50)
    payment_method: str | None = Field("Cash", max_length=30)
    date: dt.date | None = None
    received_by: str | None = Field(None, max_length=100)
    notes: str | None = None
    invoice_id: uuid.UUID | None = None


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus


class PaymentResponse(BaseSchema):
    id: uuid.UUID
    student_name: str | None = None
    student_id: uuid.UUID | None = None
    amount: float
    type: str | None = None
    payment_method: str | None = None
    reference: str | None = None
    date: dt.date | None = None
    status: str
    received_by: str | None = None
    notes: str | None = None
    invoice_id: uuid.UUID | None = None
    created_at: datetime


# === Invoices ===

class InvoiceItem(BaseModel):
    description: str
    amount: Decimal = Field(..., ge=0)


class InvoiceCreate(BaseModel):
    """Issue an invoice. amount defaults to the sum of the items."""

    student_name: str = Field(..., min_length=1, max_length=200)
    student_id: uuid.UUID | None = None
    amount: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    due_date: date | None = None
    items: list[InvoiceItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_amount(self):
        if self.amount is None:
            total = sum((item.amount for item in self.items), Decimal("0"))
            if total <= 0:
                raise ValueError("amount or items with a positive total are required")
            self.amount = total
        return self


class InvoicePaymentCreate(BaseModel):
    """Record a payment against an invoice."""

    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_method: str | None = Field("Cash", max_length=30)
    date: dt.date | None = None


class InvoiceResponse(BaseSchema):
    id: uuid.UUID
    invoice_no: str | None = None
    student_name: str | None = None
    student_id: uuid.UUID | None = None
    amount: float
    paid_amount: float
    balance: float
    due_date: date | None = None
    status: str
    items: list | None = None
    created_at: datetime


# === Expenses ===

class ExpenseCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    category: str | None = Field(None, max_length=50)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    date: dt.date | None = None
    vendor: str | None = Field(None, max_length=200)
    receipt_url: str | None = None
    notes: str | None = None


class ExpenseResponse(BaseSchema):
    id: uuid.UUID
    description: str
    category: str | None = None
    amount: float
    date: dt.date | None = None
    vendor: str | None = None
    status: str
    approved_by: str | None = None
    receipt_url: str | None = None
    notes: str | None = None
    payroll_run_id: uuid.UUID | None = None
    created_at: datetime


# === Employees ===

class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    employee_no: str | None = Field(None, max_length=30)
    position: str | None = Field(None, max_length=100)
    department: str | None = Field(None, max_length=100)
    salary: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    currency: str | None = Field(None, max_length=3)
    status: EmployeeStatus = EmployeeStatus.ACTIVE


class EmployeeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    position: str | None = None
    department: str | None = None
    salary: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    status: EmployeeStatus | None = None


class EmployeeResponse(BaseSchema):
    id: uuid.UUID
    name: str
    employee_no: str | None = None
    position: str | None = None
    department: str | None = None
    salary: float | None = None
    currency: str | None = None
    status: str


# === Payroll ===

class PayrollRunCreate(BaseModel):
    """Process payroll for a period. Defaults to the current month."""

    period_start: date | None = None
    period_end: date | None = None


class PayrollRunResponse(BaseSchema):
    id: uuid.UUID
    period_start: date
    period_end: date
    period_label: str
    employee_count: int
    total_amount: float
    status: str
    expense_id: uuid.UUID | None = None
    created_at: datetime


# === Fee structures ===

class FeeStructureCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    grade_level_id: uuid.UUID | None = None


class FeeStructureResponse(BaseSchema):
    id: uuid.UUID
    name: str
    description: str | None = None
    amount: float
    grade_level_id: uuid.UUID | None = None
    school_year_id: uuid.UUID | None = None
    is_active: bool


# === Overview ===

class FinanceOverview(BaseModel):
    """Finance KPI totals."""

    currency: str
    total_collected: float
    total_pending: float
    total_overdue: float
    total_expenses: float
    total_payroll: float
    average_salary: float
    active_employees: int
    net_income: float
    display: dict[str, str]
