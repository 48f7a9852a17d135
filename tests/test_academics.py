# /tests/test_academics.py

from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from app.exceptions import ValidationException
from app.services.academic_year_service import (
    AcademicYearScope,
    AcademicYearService,
    default_year_bounds,
    parse_year_name,
)
from app.services.class_service import build_class_code
from app.services.grade_level_service import (
    DEFAULT_GRADE_LEVELS,
    count_students_by_grade,
    normalize_level_name,
)
from app.services.student_service import application_errors, calculate_age, compose_student_name


# === Academic years ===

def test_parse_year_name():
    assert parse_year_name("2025-2026") == (2025, 2026)
    with pytest.raises(ValidationException):
        parse_year_name("2025/26")


def test_scope_without_stored_year_uses_default_bounds():
    """A year with no stored row runs from June 1st to May 31st."""
    scope = AcademicYearScope(name="2026-2027")
    assert scope.id is None
    assert scope.start_year == 2026
    assert (scope.start_date, scope.end_date) == (date(2026, 6, 1), date(2027, 5, 31))
    assert default_year_bounds("2025-2026") == (date(2025, 6, 1), date(2026, 5, 31))


async def test_resolve_scope_prefers_requested_year():
    service = AcademicYearService()
    with patch.object(service, "get_by_name", AsyncMock(return_value=None)) as get_by_name, \
         patch.object(service, "get_active", AsyncMock()) as get_active:
        scope = await service.resolve_scope(AsyncMock(), "2024-2025")

    assert scope.name == "2024-2025"
    get_by_name.assert_awaited_once()
    get_active.assert_not_awaited()


async def test_resolve_scope_falls_back_to_active_year():
    service = AcademicYearService()
    active = SimpleNamespace(name="2025-2026", id="year-id")
    with patch.object(service, "get_active", AsyncMock(return_value=active)):
        scope = await service.resolve_scope(AsyncMock())

    assert scope.name == "2025-2026"
    assert scope.year is active


async def test_resolve_scope_uses_configured_default():
    service = AcademicYearService()
    with patch.object(service, "get_active", AsyncMock(return_value=None)), \
         patch.object(service, "get_by_name", AsyncMock(return_value=None)), \
         patch("app.services.academic_year_service.settings") as settings:
        settings.default_academic_year = "2030-2031"
        scope = await service.resolve_scope(AsyncMock())

    assert scope.name == "2030-2031"
    assert scope.year is None


async def test_resolve_scope_rejects_malformed_year():
    with pytest.raises(ValidationException):
        await AcademicYearService().resolve_scope(AsyncMock(), "next year")


# === Grade levels and classes ===

def test_default_grade_levels():
    names = [level["name"] for level in DEFAULT_GRADE_LEVELS]
    assert names[:3] == ["Kindergarten 1", "Kindergarten 2", "Grade 1"]
    assert names[-1] == "Grade 12"
    senior = [level["name"] for level in DEFAULT_GRADE_LEVELS if level.get("is_senior_high")]
    assert senior == ["Grade 11", "Grade 12"]


def test_normalize_level_name():
    assert normalize_level_name("Kinder 1") == "Kindergarten 1"
    assert normalize_level_name("  k2 ") == "Kindergarten 2"
    assert normalize_level_name("Grade   3") == "Grade 3"
    assert normalize_level_name(None) == ""


def test_count_students_by_grade_merges_aliases():
    counts = count_students_by_grade([("Kinder 1", 4), ("Kindergarten 1", 3), ("Grade 1", 10)])
    assert counts["Kindergarten 1"] == 7
    assert counts["Grade 1"] == 10


def test_build_class_code_strips_whitespace():
    assert build_class_code("Grade 1", "Social Studies", 1760000000000) == "Grade1-SocialStudies-1760000000000"


def test_build_class_code_defaults_to_current_time():
    prefix, subject, stamp = build_class_code("Grade 10", "Math").split("-")
    assert (prefix, subject) == ("Grade10", "Math")
    assert stamp.isdigit() and len(stamp) >= 13


# === Students ===

def test_calculate_age_before_and_after_birthday():
    assert calculate_age(date(2019, 8, 25), date(2026, 8, 24)) == 6
    assert calculate_age(date(2019, 8, 25), date(2026, 8, 25)) == 7
    assert calculate_age(None) is None


def test_compose_student_name_skips_blank_parts():
    assert compose_student_name("Noah", "", "Dela Rosa") == "Noah Dela Rosa"
    assert compose_student_name(" Juan ", "P.", "Cruz", "Jr.") == "Juan P. Cruz Jr."


def test_application_errors_lists_missing_fields():
    """Every missing required field is reported, in a stable order."""
    errors = application_errors({"first_name": "Aisha", "gender": "female"})
    assert [e["field"] for e in errors] == ["last_name", "birth_date", "grade_level_id"]
    assert errors[0]["message"] == "Last name is required"

    complete = {
        "first_name": "Aisha",
        "last_name": "Khan",
        "birth_date": date(2019, 4, 17),
        "gender": "female",
        "grade_level_id": "gl-1",
    }
    assert application_errors(complete) == []
