"""Finance service for payments, invoices, expenses, employees and payroll."""

import logging
import re
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import ConflictException, NotFoundException, ValidationException
from app.models import (
    Employee,
    Expense,
    FeeStructure,
    Invoice,
    Payment,
    PayrollRun,
)
from app.models.finance import (
    PAYROLL_EXPENSE_CATEGORY,
    ExpenseStatus,
    InvoiceStatus,
    PaymentStatus,
    PayrollRunStatus,
)
from app.models.staff import EmployeeStatus
from app.schemas.finance import (
    EmployeeCreate,
    EmployeeUpdate,
    ExpenseCreate,
    FeeStructureCreate,
    InvoiceCreate,
    InvoicePaymentCreate,
    PaymentCreate,
)
from app.services.academic_year_service import AcademicYearScope
from app.services.realtime_service import get_connection_manager
from app.utils.display import format_currency, round_half_up
from app.utils.request_context import get_current_user_id_or_none, get_current_user_name

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
SYSTEM_APPROVER = "System"
DEFAULT_APPROVER = "Admin"


def next_reference(prefix: str, year: int, existing: Iterable[str | None]) -> str:
    """Next sequential reference "<PREFIX>-<year>-NNN" after the highest existing one."""
    pattern = re.compile(rf"^{re.escape(prefix)}-{year}-(\d+)$")
    highest = 0
    for reference in existing:
        match = pattern.match(reference or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}-{year}-{highest + 1:03d}"


def employee_salary(employee: Any) -> Decimal:
    """Monthly salary of an employee, falling back to the basic salary."""
    return Decimal(employee.salary or employee.basic_salary or 0)


def compute_finance_totals(
    payments: Iterable[Any],
    expenses: Iterable[Any],
    employees: Iterable[Any],
) -> dict[str, Any]:
    """Finance KPI totals as plain sums over status subsets.

    Each total only depends on the multiset of rows, never their order.
    """
    collected = pending = overdue = ZERO
    for payment in payments:
        amount = Decimal(payment.amount or 0)
        if payment.status == PaymentStatus.PAID.value:
            collected += amount
        elif payment.status == PaymentStatus.PENDING.value:
            pending += amount
        elif payment.status == PaymentStatus.OVERDUE.value:
            overdue += amount

    total_expenses = sum(
        (Decimal(e.amount or 0) for e in expenses if e.status == ExpenseStatus.APPROVED.value),
        ZERO,
    )

    salaries = [employee_salary(e) for e in employees if e.status == EmployeeStatus.ACTIVE.value]
    total_payroll = sum(salaries, ZERO)
    average_salary = total_payroll / len(salaries) if salaries else ZERO

    return {
        "total_collected": collected,
        "total_pending": pending,
        "total_overdue": overdue,
        "total_expenses": total_expenses,
        "total_payroll": total_payroll,
        "average_salary": average_salary,
        "active_employees": len(salaries),
        "net_income": collected - total_expenses,
    }


def month_bounds(day: date) -> tuple[date, date]:
    """First and last day of the month containing `day`."""
    start = day.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)


def invoice_status_for(amount: Decimal, paid_amount: Decimal) -> str:
    if paid_amount <= 0:
        return InvoiceStatus.PENDING.value
    if paid_amount >= amount:
        return InvoiceStatus.PAID.value
    return InvoiceStatus.PARTIAL.value


class FinanceService:
    """Service for school finance records."""

    # === Payments ===

    async def get_payments(
        self,
        db: AsyncSession,
        search: str | None = None,
        status: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Payment], int]:
        """Get payments with optional filters, newest first."""
        query = select(Payment)

        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Payment.student_name.ilike(search_term),
                    Payment.reference.ilike(search_term),
                )
            )
        if status:
            query = query.where(Payment.status == status)
        if date_from:
            query = query.where(Payment.date >= date_from)
        if date_to:
            query = query.where(Payment.date <= date_to)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = query.order_by(Payment.date.desc().nulls_last(), Payment.created_at.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def get_payment(self, db: AsyncSession, payment_id: uuid.UUID) -> Payment:
        payment = await db.get(Payment, payment_id)
        if not payment:
            raise NotFoundException("Payment")
        return payment

    async def _next_payment_reference(self, db: AsyncSession, year: int) -> str:
        result = await db.execute(
            select(Payment.reference).where(Payment.reference.like(f"PAY-{year}-%"))
        )
        return next_reference("PAY", year, result.scalars().all())

    async def _get_invoice(self, db: AsyncSession, invoice_id: uuid.UUID) -> Invoice:
        invoice = await db.get(Invoice, invoice_id)
        if not invoice:
            raise NotFoundException("Invoice")
        return invoice

    def _apply_to_invoice(self, invoice: Invoice, amount: Decimal) -> None:
        if amount > invoice.balance:
            raise ValidationException([
                {"field": "amount", "message": f"Amount exceeds the invoice balance of {invoice.balance}"}
            ])
        invoice.paid_amount = (invoice.paid_amount or ZERO) + amount
        invoice.status = invoice_status_for(invoice.amount, invoice.paid_amount)

    async def create_payment(self, db: AsyncSession, data: PaymentCreate) -> Payment:
        """Record a received payment with the next PAY-<year>-NNN reference."""
        payment_date = data.date or date.today()
        invoice = await self._get_invoice(db, data.invoice_id) if data.invoice_id else None

        payment = Payment(
            student_name=data.student_name,
            student_id=data.student_id or (invoice.student_id if invoice else None),
            amount=data.amount,
            type=data.type,
            payment_method=data.payment_method,
            reference=await self._next_payment_reference(db, payment_date.year),
            date=payment_date,
            status=PaymentStatus.PAID.value,
            received_by=data.received_by or get_current_user_name(),
            notes=data.notes,
            invoice_id=data.invoice_id,
        )
        if invoice:
            self._apply_to_invoice(invoice, data.amount)
        db.add(payment)

        await db.commit()
        await db.refresh(payment)

        manager = get_connection_manager()
        await manager.notify_change("payments", "insert", payment.id)
        if invoice:
            await manager.notify_change("invoices", "update", invoice.id)
        return payment

    async def update_payment_status(
        self, db: AsyncSession, payment_id: uuid.UUID, status: PaymentStatus
    ) -> Payment:
        payment = await self.get_payment(db, payment_id)
        payment.status = status.value

        await db.commit()
        await db.refresh(payment)

        await get_connection_manager().notify_change("payments", "update", payment.id)
        return payment

    async def delete_payment(self, db: AsyncSession, payment_id: uuid.UUID) -> None:
        payment = await self.get_payment(db, payment_id)
        await db.delete(payment)
        await db.commit()

        await get_connection_manager().notify_change("payments", "delete", payment_id)

    # === Invoices ===

    async def get_invoices(
        self,
        db: AsyncSession,
        search: str | None = None,
        status: str | None = None,
        due_from: date | None = None,
        due_to: date | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Invoice], int]:
        query = select(Invoice)

        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Invoice.student_name.ilike(search_term),
                    Invoice.invoice_no.ilike(search_term),
                )
            )
        if status:
            query = query.where(Invoice.status == status)
        if due_from:
            query = query.where(Invoice.due_date >= due_from)
        if due_to:
            query = query.where(Invoice.due_date <= due_to)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = query.order_by(Invoice.created_at.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def create_invoice(self, db: AsyncSession, data: InvoiceCreate) -> Invoice:
        """Issue an invoice with the next INV-<year>-NNN number."""
        year = date.today().year
        result = await db.execute(
            select(Invoice.invoice_no).where(Invoice.invoice_no.like(f"INV-{year}-%"))
        )

        invoice = Invoice(
            invoice_no=next_reference("INV", year, result.scalars().all()),
            student_name=data.student_name,
            student_id=data.student_id,
            amount=data.amount,
            paid_amount=ZERO,
            due_date=data.due_date,
            status=InvoiceStatus.PENDING.value,
            items=[
                {"description": item.description, "amount": float(item.amount)}
                for item in data.items
            ] or None,
        )
        db.add(invoice)
        await db.commit()
        await db.refresh(invoice)

        await get_connection_manager().notify_change("invoices", "insert", invoice.id)
        return invoice

    async def record_invoice_payment(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        data: InvoicePaymentCreate,
    ) -> Payment:
        """Record a payment against an invoice; the invoice becomes partial or paid."""
        invoice = await self._get_invoice(db, invoice_id)
        if invoice.status == InvoiceStatus.PAID.value:
            raise ConflictException("Invoice is already paid")

        return await self.create_payment(
            db,
            PaymentCreate(
                student_name=invoice.student_name or "Unknown",
                student_id=invoice.student_id,
                amount=data.amount,
                type="Invoice",
                payment_method=data.payment_method,
                date=data.date,
                notes=f"Payment for {invoice.invoice_no}",
                invoice_id=invoice.id,
            ),
        )

    # === Expenses ===

    async def get_expenses(
        self,
        db: AsyncSession,
        search: str | None = None,
        status: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Expense], int]:
        query = select(Expense)

        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Expense.description.ilike(search_term),
                    Expense.category.ilike(search_term),
                    Expense.vendor.ilike(search_term),
                )
            )
        if status:
            query = query.where(Expense.status == status)
        if date_from:
            query = query.where(Expense.date >= date_from)
        if date_to:
            query = query.where(Expense.date <= date_to)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = query.order_by(Expense.date.desc().nulls_last(), Expense.created_at.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def get_expense(self, db: AsyncSession, expense_id: uuid.UUID) -> Expense:
        expense = await db.get(Expense, expense_id)
        if not expense:
            raise NotFoundException("Expense")
        return expense

    async def create_expense(self, db: AsyncSession, data: ExpenseCreate) -> Expense:
        expense = Expense(
            **data.model_dump(exclude={"date"}),
            date=data.date or date.today(),
            status=ExpenseStatus.PENDING.value,
        )
        db.add(expense)
        await db.commit()
        await db.refresh(expense)

        await get_connection_manager().notify_change("expenses", "insert", expense.id)
        return expense

    async def _review_expense(
        self, db: AsyncSession, expense_id: uuid.UUID, status: ExpenseStatus
    ) -> Expense:
        expense = await self.get_expense(db, expense_id)
        if expense.status != ExpenseStatus.PENDING.value:
            raise ConflictException(f"Expense is already {expense.status}")

        expense.status = status.value
        if status == ExpenseStatus.APPROVED:
            expense.approved_by = get_current_user_name() or DEFAULT_APPROVER

        await db.commit()
        await db.refresh(expense)

        await get_connection_manager().notify_change("expenses", "update", expense.id)
        return expense

    async def approve_expense(self, db: AsyncSession, expense_id: uuid.UUID) -> Expense:
        return await self._review_expense(db, expense_id, ExpenseStatus.APPROVED)

    async def reject_expense(self, db: AsyncSession, expense_id: uuid.UUID) -> Expense:
        return await self._review_expense(db, expense_id, ExpenseStatus.REJECTED)

    async def delete_expense(self, db: AsyncSession, expense_id: uuid.UUID) -> None:
        expense = await self.get_expense(db, expense_id)
        if expense.payroll_run_id:
            raise ConflictException("Payroll expenses are removed with their payroll run")
        await db.delete(expense)
        await db.commit()

        await get_connection_manager().notify_change("expenses", "delete", expense_id)

    # === Employees ===

    async def get_employees(self, db: AsyncSession, status: str | None = None) -> list[Employee]:
        query = select(Employee)
        if status:
            query = query.where(Employee.status == status)
        result = await db.execute(query.order_by(Employee.name))
        return list(result.scalars().all())

    async def create_employee(self, db: AsyncSession, data: EmployeeCreate) -> Employee:
        employee = Employee(
            name=data.name,
            full_name=data.name,
            employee_no=data.employee_no,
            position=data.position,
            department=data.department,
            salary=data.salary,
            currency=data.currency or settings.currency,
            status=data.status.value,
            is_active=data.status == EmployeeStatus.ACTIVE,
        )
        db.add(employee)
        await db.commit()
        await db.refresh(employee)

        await get_connection_manager().notify_change("employees", "insert", employee.id)
        return employee

    async def update_employee(
        self, db: AsyncSession, employee_id: uuid.UUID, data: EmployeeUpdate
    ) -> Employee:
        employee = await db.get(Employee, employee_id)
        if not employee:
            raise NotFoundException("Employee")

        updates = data.model_dump(exclude_unset=True)
        if updates.get("status") is not None:
            status = updates.pop("status")
            employee.status = status.value
            employee.is_active = status == EmployeeStatus.ACTIVE
        if updates.get("name"):
            employee.full_name = updates["name"]

        for key, value in updates.items():
            if value is not None:
                setattr(employee, key, value)

        await db.commit()
        await db.refresh(employee)

        await get_connection_manager().notify_change("employees", "update", employee.id)
        return employee

    # === Overview ===

    async def get_overview(self, db: AsyncSession) -> dict[str, Any]:
        """Finance KPIs over all payments, expenses and employees."""
        payments = (await db.execute(select(Payment))).scalars().all()
        expenses = (await db.execute(select(Expense))).scalars().all()
        employees = (await db.execute(select(Employee))).scalars().all()

        totals = compute_finance_totals(payments, expenses, employees)
        currency = settings.currency

        overview: dict[str, Any] = {"currency": currency}
        display = {}
        for key, value in totals.items():
            if isinstance(value, Decimal):
                overview[key] = round_half_up(value, 2)
                display[key] = format_currency(value, currency)
            else:
                overview[key] = value
        overview["display"] = display
        return overview

    # === Payroll ===

    async def get_payroll_runs(self, db: AsyncSession) -> list[PayrollRun]:
        result = await db.execute(select(PayrollRun).order_by(PayrollRun.period_start.desc()))
        return list(result.scalars().all())

    async def run_payroll(
        self,
        db: AsyncSession,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> PayrollRun:
        """Process payroll for a period in one unit of work.

        The payroll run and its approved "Payroll" expense are committed
        together or not at all.
        """
        default_start, default_end = month_bounds(period_start or date.today())
        period_start = period_start or default_start
        period_end = period_end or default_end
        if period_end < period_start:
            raise ValidationException([{"field": "period_end", "message": "period_end must not precede period_start"}])

        existing = await db.execute(
            select(PayrollRun.id).where(
                PayrollRun.period_start == period_start,
                PayrollRun.period_end == period_end,
                PayrollRun.status != PayrollRunStatus.VOID.value,
            )
        )
        if existing.first():
            raise ConflictException("Payroll has already been processed for this period")

        employees = await self.get_employees(db, status=EmployeeStatus.ACTIVE.value)
        total = sum((employee_salary(e) for e in employees), ZERO)
        if not employees or total <= 0:
            raise ValidationException("No active employees with a salary to pay")

        try:
            run = PayrollRun(
                period_start=period_start,
                period_end=period_end,
                employee_count=len(employees),
                total_amount=total,
                status=PayrollRunStatus.PAID.value,
                processed_by=get_current_user_id_or_none(),
            )
            db.add(run)
            await db.flush()

            db.add(Expense(
                description=f"Payroll for {run.period_label}",
                category=PAYROLL_EXPENSE_CATEGORY,
                amount=total,
                date=period_end,
                vendor=settings.app_name,
                status=ExpenseStatus.APPROVED.value,
                approved_by=SYSTEM_APPROVER,
                payroll_run_id=run.id,
            ))
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception(f"Payroll run for {period_start} - {period_end} failed")
            raise

        await db.refresh(run)
        logger.info(f"Processed payroll {run.period_label}: {len(employees)} employees, {total}")

        manager = get_connection_manager()
        await manager.notify_change("payroll_runs", "insert", run.id)
        await manager.notify_change("expenses", "insert", run.expense.id if run.expense else None)
        return run

    # === Fee structures ===

    async def get_fee_structures(self, db: AsyncSession, scope: AcademicYearScope) -> list[FeeStructure]:
        query = select(FeeStructure).where(FeeStructure.is_active.is_(True))
        if scope.id is not None:
            query = query.where(
                or_(FeeStructure.school_year_id == scope.id, FeeStructure.school_year_id.is_(None))
            )
        else:
            query = query.where(FeeStructure.school_year_id.is_(None))
        result = await db.execute(query.order_by(FeeStructure.name))
        return list(result.scalars().all())

    async def create_fee_structure(
        self, db: AsyncSession, data: FeeStructureCreate, scope: AcademicYearScope
    ) -> FeeStructure:
        fee = FeeStructure(**data.model_dump(), school_year_id=scope.id, is_active=True)
        db.add(fee)
        await db.commit()
        await db.refresh(fee)

        await get_connection_manager().notify_change("fee_structures", "insert", fee.id)
        return fee


# Singleton instance
_finance_service: FinanceService | None = None


def get_finance_service() -> FinanceService:
    """Get the finance service singleton."""
    global _finance_service
    if _finance_service is None:
        _finance_service = FinanceService()
    return _finance_service
