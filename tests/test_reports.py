# /tests/test_reports.py

import csv
import io
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.models import Invoice
from app.models.student import Gender
from app.services.report_service import (
    ReportType,
    build_academic_report,
    build_enrollment_report,
    build_financial_report,
    build_teacher_report,
    grade_bucket,
    report_to_csv,
)

GRADE_ORDER = ["Kindergarten 1", "Kindergarten 2", "Grade 1", "Grade 2"]


@pytest.mark.parametrize(
    "score, label",
    [(100, "90-100"), (90, "90-100"), (89.9, "80-89"), (75, "75-79"), (74.5, "70-74"), (69.99, "Below 70"), (0, "Below 70")],
)
def test_grade_bucket_boundaries(score, label):
    assert grade_bucket(score) == label


def test_enrollment_report_normalises_levels():
    """Short level names are counted under their grade level, unknown levels go last."""
    rows = [
        ("Kinder 1", "M"),
        ("Kindergarten 1", "female"),
        ("Grade 2", "Female"),
        (None, "male"),
        ("Grade 1", None),
        ("Special Ed", "f"),
    ]

    report = build_enrollment_report(rows, GRADE_ORDER)

    assert report["total"] == 6
    assert (report["male"], report["female"], report["other"]) == (2, 3, 0)
    assert report["male_pct"] == 33.3
    assert [row["grade"] for row in report["by_grade"]] == [
        "Kindergarten 1", "Grade 1", "Grade 2", "Special Ed", "Unassigned",
    ]
    assert report["by_grade"][0]["count"] == 2
    assert report["by_grade"][0]["capacity_status"] == "Available"


def test_enrollment_report_skips_blank_genders():
    """Students without a recorded gender count towards enrollment but not the gender split."""
    rows = [("Grade 1", "M"), ("Grade 1", ""), ("Grade 1", "   "), ("Grade 1", None), ("Grade 2", "nonbinary")]

    report = build_enrollment_report(rows, GRADE_ORDER)

    assert report["total"] == 5
    assert (report["male"], report["female"], report["other"]) == (1, 0, 1)
    assert report["gender_ratio"]["total"] == 2
    assert report["by_grade"][0] == {
        "grade": "Grade 1", "count": 4, "percentage": 80.0, "capacity_status": "Available",
    }


@pytest.mark.parametrize(
    "raw, bucket",
    [("M", Gender.MALE), (" female ", Gender.FEMALE), ("x", Gender.OTHER), ("", None), ("  ", None), (None, None)],
)
def test_gender_normalize(raw, bucket):
    assert Gender.normalize(raw) is bucket


def test_enrollment_report_near_full_grade():
    report = build_enrollment_report([("Grade 1", "m")] * 45, GRADE_ORDER)
    assert report["by_grade"] == [
        {"grade": "Grade 1", "count": 45, "percentage": 100.0, "capacity_status": "Near Full"},
    ]


def test_enrollment_report_empty():
    report = build_enrollment_report([], GRADE_ORDER)
    assert report["empty"] is True
    assert report["by_grade"] == []
    assert report["gender_ratio"]["empty"] is True


def test_academic_report_pass_rate_and_distribution():
    report = build_academic_report([95, 82, 76, 71, 50])

    assert report["graded_count"] == 5
    assert report["pass_rate"] == 60.0
    assert report["average_grade"] == 74.8
    assert [d["count"] for d in report["distribution"]] == [1, 1, 1, 1, 1]


def test_academic_report_empty():
    report = build_academic_report([])
    assert report["empty"] is True
    assert report["average_grade"] == 0.0
    assert report["pass_rate"] == 0.0


def test_financial_report_outstanding_uses_invoice_balance():
    created = datetime(2026, 1, 5, tzinfo=timezone.utc)
    payments = [
        SimpleNamespace(amount=Decimal("1500"), status="paid", date=date(2026, 1, 20), created_at=created),
        SimpleNamespace(amount=Decimal("500"), status="paid", date=None, created_at=created),
        SimpleNamespace(amount=Decimal("700"), status="pending", date=date(2026, 2, 2), created_at=created),
        SimpleNamespace(amount=Decimal("1000"), status="paid", date=date(2026, 2, 14), created_at=created),
    ]
    invoices = [
        Invoice(invoice_no="INV-2026-001", amount=Decimal("4000"), paid_amount=Decimal("1500"), status="partial"),
        Invoice(invoice_no="INV-2026-002", amount=Decimal("1000"), paid_amount=Decimal("1000"), status="paid"),
    ]

    report = build_financial_report(payments, invoices, "AED")

    assert report["total_collected"] == 3000.0
    assert report["total_expected"] == 5000.0
    assert report["outstanding"] == 2500.0
    assert report["collection_rate"] == 60.0
    assert [(m["label"], m["amount"]) for m in report["monthly_revenue"]] == [
        ("Jan 2026", 2000.0),
        ("Feb 2026", 1000.0),
    ]
    assert report["display"]["outstanding"] == "AED 2,500.00"


def test_teacher_report_counts_employment_types():
    teachers = [
        SimpleNamespace(employment_type="full_time", department="Science", is_active=True),
        SimpleNamespace(employment_type=None, department="Science", is_active=True),
        SimpleNamespace(employment_type="part_time", department=None, is_active=False),
        SimpleNamespace(employment_type="part_time", department="Arts", is_active=True),
    ]

    report = build_teacher_report(teachers)

    assert (report["full_time"], report["part_time"]) == (2, 2)
    assert report["active"] == 3
    assert report["full_time_pct"] == 50.0
    assert report["by_department"][0] == {"department": "Science", "count": 2}
    assert [d["department"] for d in report["by_department"][1:]] == ["Arts", "Unassigned"]


def test_report_to_csv_summary_then_table():
    """The CSV carries scalar metrics first, then a blank row and the report's table."""
    report = build_academic_report([95, 60])
    text = report_to_csv(ReportType.ACADEMIC, report)
    rows = list(csv.reader(io.StringIO(text)))

    assert rows[0] == ["metric", "value"]
    metrics = {row[0]: row[1] for row in rows[1:rows.index([])]}
    assert metrics["graded_count"] == "2"
    assert metrics["pass_rate"] == "50.0"
    assert "message" not in metrics

    header_at = rows.index([]) + 1
    assert rows[header_at] == ["range", "count", "percentage"]
    assert rows[header_at + 1] == ["90-100", "1", "50.0"]
    assert len(rows) == header_at + 1 + 5


def test_report_to_csv_without_table_rows():
    text = report_to_csv(ReportType.TEACHERS, build_teacher_report([]))
    rows = list(csv.reader(io.StringIO(text)))
    assert [] not in rows
    assert ["total", "0"] in rows
