# /tests/test_finance.py

import random
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import ConflictException, ValidationException
from app.models import Expense, PayrollRun
from app.services.finance_service import (
    FinanceService,
    compute_finance_totals,
    employee_salary,
    invoice_status_for,
    month_bounds,
    next_reference,
)


def _payment(amount, status):
    return SimpleNamespace(amount=Decimal(amount), status=status)


def _expense(amount, status):
    return SimpleNamespace(amount=Decimal(amount), status=status)


def _employee(salary, status="active", basic_salary=None):
    return SimpleNamespace(
        salary=Decimal(salary) if salary is not None else None,
        basic_salary=Decimal(basic_salary) if basic_salary is not None else None,
        status=status,
    )


def test_next_reference_continues_after_highest():
    """References continue from the highest number used for that year."""
    existing = ["PAY-2026-001", "PAY-2026-007", "PAY-2025-099", None, "manual"]
    assert next_reference("PAY", 2026, existing) == "PAY-2026-008"
    assert next_reference("INV", 2026, []) == "INV-2026-001"


def test_employee_salary_falls_back_to_basic():
    assert employee_salary(_employee(None, basic_salary="4200")) == Decimal("4200")
    assert employee_salary(_employee("5000", basic_salary="4200")) == Decimal("5000")


def test_finance_totals_by_status():
    payments = [
        _payment("1000", "paid"),
        _payment("250.50", "paid"),
        _payment("400", "pending"),
        _payment("300", "overdue"),
        _payment("999", "cancelled"),
    ]
    expenses = [_expense("500", "approved"), _expense("80", "pending"), _expense("70", "rejected")]
    employees = [_employee("6000"), _employee("4000"), _employee("9000", status="inactive")]

    totals = compute_finance_totals(payments, expenses, employees)

    assert totals["total_collected"] == Decimal("1250.50")
    assert totals["total_pending"] == Decimal("400")
    assert totals["total_overdue"] == Decimal("300")
    assert totals["total_expenses"] == Decimal("500")
    assert totals["total_payroll"] == Decimal("10000")
    assert totals["average_salary"] == Decimal("5000")
    assert totals["active_employees"] == 2
    assert totals["net_income"] == Decimal("750.50")


def test_finance_totals_ignore_row_order():
    """Shuffling the rows never changes any total."""
    payments = [_payment(str(n), status) for n, status in
                [(10, "paid"), (20, "pending"), (30, "paid"), (40, "overdue"), (50, "paid")]]
    expenses = [_expense(str(n), "approved") for n in (5, 15, 25)]
    employees = [_employee(str(n)) for n in (3000, 3500, 4100)]

    expected = compute_finance_totals(payments, expenses, employees)
    rng = random.Random(7)
    for _ in range(5):
        rng.shuffle(payments)
        rng.shuffle(expenses)
        rng.shuffle(employees)
        assert compute_finance_totals(payments, expenses, employees) == expected


def test_finance_totals_without_employees():
    totals = compute_finance_totals([], [], [])
    assert totals["average_salary"] == Decimal("0")
    assert totals["net_income"] == Decimal("0")


def test_month_bounds():
    assert month_bounds(date(2026, 2, 14)) == (date(2026, 2, 1), date(2026, 2, 28))
    assert month_bounds(date(2028, 2, 29)) == (date(2028, 2, 1), date(2028, 2, 29))
    assert month_bounds(date(2026, 12, 31)) == (date(2026, 12, 1), date(2026, 12, 31))


def test_invoice_status_for():
    assert invoice_status_for(Decimal("100"), Decimal("0")) == "pending"
    assert invoice_status_for(Decimal("100"), Decimal("40")) == "partial"
    assert invoice_status_for(Decimal("100"), Decimal("100")) == "paid"


# === Payroll runs ===

def _session(existing_run=None):
    """An AsyncSession stand-in whose duplicate-period lookup returns `existing_run`."""
    db = MagicMock()
    lookup = MagicMock()
    lookup.first.return_value = existing_run
    db.execute = AsyncMock(return_value=lookup)
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    return db


@pytest.fixture
def connection_manager():
    manager = MagicMock()
    manager.notify_change = AsyncMock()
    with patch("app.services.finance_service.get_connection_manager", return_value=manager):
        yield manager


async def test_run_payroll_rejects_duplicate_period(connection_manager):
    """A second payroll for the same period is a conflict."""
    service = FinanceService()
    db = _session(existing_run=("existing-id",))

    with pytest.raises(ConflictException):
        await service.run_payroll(db, date(2026, 3, 1), date(2026, 3, 31))

    db.add.assert_not_called()
    connection_manager.notify_change.assert_not_awaited()


async def test_run_payroll_books_expense(connection_manager):
    """The payroll run and its approved Payroll expense are committed together."""
    service = FinanceService()
    db = _session()
    employees = [_employee("6000"), _employee(None, basic_salary="4000")]

    with patch.object(service, "get_employees", AsyncMock(return_value=employees)):
        run = await service.run_payroll(db, date(2026, 3, 1), date(2026, 3, 31))

    assert isinstance(run, PayrollRun)
    assert run.total_amount == Decimal("10000")
    assert run.employee_count == 2
    assert run.status == "paid"

    added = [call.args[0] for call in db.add.call_args_list]
    expense = next(obj for obj in added if isinstance(obj, Expense))
    assert expense.category == "Payroll"
    assert expense.amount == Decimal("10000")
    assert expense.status == "approved"
    assert expense.approved_by == "System"
    assert expense.description == "Payroll for March 2026"
    assert expense.date == date(2026, 3, 31)

    db.commit.assert_awaited_once()
    assert connection_manager.notify_change.await_count == 2


async def test_run_payroll_defaults_to_current_month(connection_manager):
    service = FinanceService()
    db = _session()

    with patch.object(service, "get_employees", AsyncMock(return_value=[_employee("3000")])):
        run = await service.run_payroll(db)

    start, end = month_bounds(date.today())
    assert (run.period_start, run.period_end) == (start, end)


async def test_run_payroll_rolls_back_on_failure(connection_manager):
    """Nothing is kept when the commit fails."""
    service = FinanceService()
    db = _session()
    db.commit.side_effect = SQLAlchemyError("boom")

    with patch.object(service, "get_employees", AsyncMock(return_value=[_employee("3000")])):
        with pytest.raises(SQLAlchemyError):
            await service.run_payroll(db, date(2026, 4, 1), date(2026, 4, 30))

    db.rollback.assert_awaited_once()
    connection_manager.notify_change.assert_not_awaited()


async def test_run_payroll_requires_salaried_employees(connection_manager):
    service = FinanceService()
    db = _session()

    with patch.object(service, "get_employees", AsyncMock(return_value=[])):
        with pytest.raises(ValidationException):
            await service.run_payroll(db, date(2026, 4, 1), date(2026, 4, 30))

    db.add.assert_not_called()


async def test_run_payroll_rejects_inverted_period(connection_manager):
    service = FinanceService()
    with pytest.raises(ValidationException):
        await service.run_payroll(_session(), date(2026, 4, 30), date(2026, 4, 1))
