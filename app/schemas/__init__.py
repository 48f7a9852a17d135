"""Pydantic schemas for request/response validation."""

from app.schemas.academic import (
    AcademicYearCreate,
    AcademicYearResponse,
    GradeDetailResponse,
    GradeLevelResponse,
    SectionCreate,
    SectionResponse,
    SubjectClassCreate,
    SubjectClassResponse,
)
from app.schemas.announcement import AnnouncementCreate, AnnouncementResponse, AnnouncementUpdate
from app.schemas.attendance import AttendanceMark, AttendanceRecordResponse, BulkAttendanceCreate
from app.schemas.auth import LoginRequest, LoginResponse, ProfileResponse
from app.schemas.calendar import SchoolEventCreate, SchoolEventResponse, SchoolEventUpdate
from app.schemas.common import APIResponse, PaginationMeta
from app.schemas.document import (
    AnalysisMetadata,
    AnalyzeDocumentRequest,
    AnalyzeDocumentResponse,
    DocumentAnalysis,
    DocumentResponse,
)
from app.schemas.finance import (
    ExpenseCreate,
    ExpenseResponse,
    FinanceOverview,
    InvoiceCreate,
    InvoiceResponse,
    PaymentCreate,
    PaymentResponse,
    PayrollRunResponse,
)
from app.schemas.settings import SchoolSettingsResponse, SuggestionCreate, SuggestionResponse
from app.schemas.student import (
    PendingEnrollmentCreate,
    PendingEnrollmentResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
)

__all__ = [
    # Common
    "APIResponse",
    "PaginationMeta",
    # Auth
    "LoginRequest",
    "LoginResponse",
    "ProfileResponse",
    # Academic structure
    "AcademicYearCreate",
    "AcademicYearResponse",
    "GradeLevelResponse",
    "GradeDetailResponse",
    "SectionCreate",
    "SectionResponse",
    "SubjectClassCreate",
    "SubjectClassResponse",
    # Students
    "StudentCreate",
    "StudentUpdate",
    "StudentResponse",
    "PendingEnrollmentCreate",
    "PendingEnrollmentResponse",
    # Attendance
    "AttendanceMark",
    "BulkAttendanceCreate",
    "AttendanceRecordResponse",
    # Finance
    "PaymentCreate",
    "PaymentResponse",
    "InvoiceCreate",
    "InvoiceResponse",
    "ExpenseCreate",
    "ExpenseResponse",
    "PayrollRunResponse",
    "FinanceOverview",
    # Calendar and announcements
    "SchoolEventCreate",
    "SchoolEventUpdate",
    "SchoolEventResponse",
    "AnnouncementCreate",
    "AnnouncementUpdate",
    "AnnouncementResponse",
    # Documents
    "DocumentResponse",
    "AnalyzeDocumentRequest",
    "AnalysisMetadata",
    "DocumentAnalysis",
    "AnalyzeDocumentResponse",
    # Settings
    "SchoolSettingsResponse",
    "SuggestionCreate",
    "SuggestionResponse",
]
