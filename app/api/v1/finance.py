"""Finance API endpoints: payments, invoices, expenses, employees and payroll."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_academic_year_scope
from app.database import get_db
from app.models.finance import ExpenseStatus, InvoiceStatus, PaymentStatus
from app.models.staff import EmployeeStatus
from app.models.user import UserRole
from app.schemas.common import APIResponse, PaginationMeta
from app.schemas.finance import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ExpenseCreate,
    ExpenseResponse,
    FeeStructureCreate,
    FeeStructureResponse,
    FinanceOverview,
    InvoiceCreate,
    InvoicePaymentCreate,
    InvoiceResponse,
    PaymentCreate,
    PaymentResponse,
    PaymentStatusUpdate,
    PayrollRunCreate,
    PayrollRunResponse,
)
from app.services.academic_year_service import AcademicYearScope
from app.services.finance_service import get_finance_service
from app.utils.permissions import FINANCE_ROLES, require_role

router = APIRouter()


def _payroll_response(run) -> PayrollRunResponse:
    return PayrollRunResponse(
        id=run.id,
        period_start=run.period_start,
        period_end=run.period_end,
        period_label=run.period_label,
        employee_count=run.employee_count,
        total_amount=float(run.total_amount),
        status=run.status,
        expense_id=run.expense.id if run.expense else None,
        created_at=run.created_at,
    )


@router.get("/overview", response_model=APIResponse[FinanceOverview])
@require_role(*FINANCE_ROLES)
async def get_overview(db: AsyncSession = Depends(get_db)):
    """Collected, pending and overdue payments, expenses and payroll totals."""
    overview = await get_finance_service().get_overview(db)
    return APIResponse(data=FinanceOverview(**overview))


# === Payments ===

@router.get("/payments", response_model=APIResponse[list[PaymentResponse]])
@require_role(*FINANCE_ROLES)
async def list_payments(
    search: str | None = Query(None, description="Search by student name or reference"),
    status: PaymentStatus | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    payments, total = await get_finance_service().get_payments(
        db,
        search=search,
        status=status.value if status else None,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[PaymentResponse.model_validate(p) for p in payments],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("/payments", response_model=APIResponse[PaymentResponse])
@require_role(*FINANCE_ROLES)
async def create_payment(
    data: PaymentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record a received payment."""
    payment = await get_finance_service().create_payment(db, data)
    return APIResponse(
        data=PaymentResponse.model_validate(payment),
        message=f"Payment {payment.reference} recorded",
    )


@router.patch("/payments/{payment_id}", response_model=APIResponse[PaymentResponse])
@require_role(*FINANCE_ROLES)
async def update_payment_status(
    payment_id: uuid.UUID,
    data: PaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    payment = await get_finance_service().update_payment_status(db, payment_id, data.status)
    return APIResponse(data=PaymentResponse.model_validate(payment))


@router.delete("/payments/{payment_id}", response_model=APIResponse[None])
@require_role(UserRole.PRINCIPAL, UserRole.ACCOUNTING)
async def delete_payment(
    payment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_finance_service().delete_payment(db, payment_id)
    return APIResponse(message="Payment deleted successfully")


# === Invoices ===

@router.get("/invoices", response_model=APIResponse[list[InvoiceResponse]])
@require_role(*FINANCE_ROLES)
async def list_invoices(
    search: str | None = Query(None, description="Search by student name or invoice number"),
    status: InvoiceStatus | None = Query(None),
    due_from: date | None = Query(None),
    due_to: date | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    invoices, total = await get_finance_service().get_invoices(
        db,
        search=search,
        status=status.value if status else None,
        due_from=due_from,
        due_to=due_to,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[InvoiceResponse.model_validate(i) for i in invoices],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("/invoices", response_model=APIResponse[InvoiceResponse])
@require_role(*FINANCE_ROLES)
async def create_invoice(
    data: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
):
    invoice = await get_finance_service().create_invoice(db, data)
    return APIResponse(
        data=InvoiceResponse.model_validate(invoice),
        message=f"Invoice {invoice.invoice_no} issued",
    )


@router.post("/invoices/{invoice_id}/payments", response_model=APIResponse[PaymentResponse])
@require_role(*FINANCE_ROLES)
async def record_invoice_payment(
    invoice_id: uuid.UUID,
    data: InvoicePaymentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record a payment against an invoice."""
    payment = await get_finance_service().record_invoice_payment(db, invoice_id, data)
    return APIResponse(
        data=PaymentResponse.model_validate(payment),
        message=f"Payment {payment.reference} applied",
    )


# === Expenses ===

@router.get("/expenses", response_model=APIResponse[list[ExpenseResponse]])
@require_role(*FINANCE_ROLES)
async def list_expenses(
    search: str | None = Query(None, description="Search description, category or vendor"),
    status: ExpenseStatus | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    expenses, total = await get_finance_service().get_expenses(
        db,
        search=search,
        status=status.value if status else None,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[ExpenseResponse.model_validate(e) for e in expenses],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("/expenses", response_model=APIResponse[ExpenseResponse])
@require_role(*FINANCE_ROLES)
async def create_expense(
    data: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
):
    expense = await get_finance_service().create_expense(db, data)
    return APIResponse(
        data=ExpenseResponse.model_validate(expense),
        message="Expense submitted for approval",
    )


@router.post("/expenses/{expense_id}/approve", response_model=APIResponse[ExpenseResponse])
@require_role(UserRole.PRINCIPAL, UserRole.ACCOUNTING)
async def approve_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    expense = await get_finance_service().approve_expense(db, expense_id)
    return APIResponse(data=ExpenseResponse.model_validate(expense), message="Expense approved")


@router.post("/expenses/{expense_id}/reject", response_model=APIResponse[ExpenseResponse])
@require_role(UserRole.PRINCIPAL, UserRole.ACCOUNTING)
async def reject_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    expense = await get_finance_service().reject_expense(db, expense_id)
    return APIResponse(data=ExpenseResponse.model_validate(expense), message="Expense rejected")


@router.delete("/expenses/{expense_id}", response_model=APIResponse[None])
@require_role(UserRole.PRINCIPAL, UserRole.ACCOUNTING)
async def delete_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_finance_service().delete_expense(db, expense_id)
    return APIResponse(message="Expense deleted successfully")


# === Employees ===

@router.get("/employees", response_model=APIResponse[list[EmployeeResponse]])
@require_role(*FINANCE_ROLES)
async def list_employees(
    status: EmployeeStatus | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    employees = await get_finance_service().get_employees(db, status.value if status else None)
    return APIResponse(data=[EmployeeResponse.model_validate(e) for e in employees])


@router.post("/employees", response_model=APIResponse[EmployeeResponse])
@require_role(*FINANCE_ROLES)
async def create_employee(
    data: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
):
    employee = await get_finance_service().create_employee(db, data)
    return APIResponse(data=EmployeeResponse.model_validate(employee), message="Employee added")


@router.put("/employees/{employee_id}", response_model=APIResponse[EmployeeResponse])
@require_role(*FINANCE_ROLES)
async def update_employee(
    employee_id: uuid.UUID,
    data: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
):
    employee = await get_finance_service().update_employee(db, employee_id, data)
    return APIResponse(data=EmployeeResponse.model_validate(employee), message="Employee updated")


# === Payroll ===

@router.get("/payroll", response_model=APIResponse[list[PayrollRunResponse]])
@require_role(*FINANCE_ROLES)
async def list_payroll_runs(db: AsyncSession = Depends(get_db)):
    runs = await get_finance_service().get_payroll_runs(db)
    return APIResponse(data=[_payroll_response(r) for r in runs])


@router.post("/payroll", response_model=APIResponse[PayrollRunResponse])
@require_role(UserRole.PRINCIPAL, UserRole.ACCOUNTING)
async def run_payroll(
    data: PayrollRunCreate,
    db: AsyncSession = Depends(get_db),
):
    """Pay all active employees for a period and book the payroll expense."""
    run = await get_finance_service().run_payroll(db, data.period_start, data.period_end)
    return APIResponse(
        data=_payroll_response(run),
        message=f"Payroll processed for {run.employee_count} employees",
    )


# === Fee structures ===

@router.get("/fee-structures", response_model=APIResponse[list[FeeStructureResponse]])
@require_role(*FINANCE_ROLES)
async def list_fee_structures(
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    fees = await get_finance_service().get_fee_structures(db, scope)
    return APIResponse(data=[FeeStructureResponse.model_validate(f) for f in fees])


@router.post("/fee-structures", response_model=APIResponse[FeeStructureResponse])
@require_role(*FINANCE_ROLES)
async def create_fee_structure(
    data: FeeStructureCreate,
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    fee = await get_finance_service().create_fee_structure(db, data, scope)
    return APIResponse(data=FeeStructureResponse.model_validate(fee), message="Fee structure created")
