"""Service layer for business logic."""

from app.services.academic_year_service import (
    AcademicYearScope,
    AcademicYearService,
    get_academic_year_service,
)
from app.services.announcement_service import AnnouncementService, get_announcement_service
from app.services.attendance_service import AttendanceService, get_attendance_service
from app.services.auth_service import AuthService, get_auth_service
from app.services.calendar_service import CalendarService, get_calendar_service
from app.services.class_service import ClassService, get_class_service
from app.services.dashboard_service import DashboardService, get_dashboard_service
from app.services.document_analysis_service import (
    DocumentAnalysisService,
    get_document_analysis_service,
)
from app.services.document_service import DocumentService, get_document_service
from app.services.finance_service import FinanceService, get_finance_service
from app.services.grade_level_service import GradeLevelService, get_grade_level_service
from app.services.realtime_service import ConnectionManager, get_connection_manager
from app.services.report_service import ReportService, get_report_service
from app.services.settings_service import SettingsService, get_settings_service
from app.services.student_service import StudentService, get_student_service

__all__ = [
    "AcademicYearScope",
    "AcademicYearService",
    "get_academic_year_service",
    "AnnouncementService",
    "get_announcement_service",
    "AttendanceService",
    "get_attendance_service",
    "AuthService",
    "get_auth_service",
    "CalendarService",
    "get_calendar_service",
    "ClassService",
    "get_class_service",
    "DashboardService",
    "get_dashboard_service",
    "DocumentAnalysisService",
    "get_document_analysis_service",
    "DocumentService",
    "get_document_service",
    "FinanceService",
    "get_finance_service",
    "GradeLevelService",
    "get_grade_level_service",
    "ConnectionManager",
    "get_connection_manager",
    "ReportService",
    "get_report_service",
    "SettingsService",
    "get_settings_service",
    "StudentService",
    "get_student_service",
]
