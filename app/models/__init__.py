"""SQLAlchemy models for SchoolDesk."""

from app.models.base import Base, BaseModel, TimestampMixin
from app.models.user import Profile, UserRole, UserRoleAssignment, UserMenuPermission
from app.models.academic import AcademicYear, Subject, SubjectAssignment
from app.models.grade_level import GradeLevel, Section, Strand
from app.models.school_class import SchoolClass
from app.models.staff import Teacher, Employee, EmployeeStatus
from app.models.student import (
    StudentRecord,
    Parent,
    StudentParent,
    Enrollment,
    PendingEnrollment,
    Gender,
    StudentStatus,
    EnrollmentStatus,
    PendingEnrollmentStatus,
)
from app.models.attendance import AttendanceRecord, AttendanceStatus
from app.models.classroom import Assignment, Submission, SubmissionStatus
from app.models.finance import (
    Payment,
    Invoice,
    Expense,
    FeeStructure,
    PayrollRun,
    PaymentStatus,
    InvoiceStatus,
    ExpenseStatus,
    PayrollRunStatus,
    PAYROLL_EXPENSE_CATEGORY,
)
from app.models.calendar import SchoolEvent, EventType
from app.models.announcement import Announcement
from app.models.document import Document, DocumentType
from app.models.school_settings import SchoolSettings
from app.models.suggestion import SuggestionReview, SuggestionStatus, SuggestionType

__all__ = [
    # Base
    "Base",
    "BaseModel",
    "TimestampMixin",
    # User
    "Profile",
    "UserRole",
    "UserRoleAssignment",
    "UserMenuPermission",
    # Academic
    "AcademicYear",
    "Subject",
    "SubjectAssignment",
    "GradeLevel",
    "Section",
    "Strand",
    "SchoolClass",
    # Staff
    "Teacher",
    "Employee",
    "EmployeeStatus",
    # Student
    "StudentRecord",
    "Parent",
    "StudentParent",
    "Enrollment",
    "PendingEnrollment",
    "Gender",
    "StudentStatus",
    "EnrollmentStatus",
    "PendingEnrollmentStatus",
    # Attendance
    "AttendanceRecord",
    "AttendanceStatus",
    # Classroom
    "Assignment",
    "Submission",
    "SubmissionStatus",
    # Finance
    "Payment",
    "Invoice",
    "Expense",
    "FeeStructure",
    "PayrollRun",
    "PaymentStatus",
    "InvoiceStatus",
    "ExpenseStatus",
    "PayrollRunStatus",
    "PAYROLL_EXPENSE_CATEGORY",
    # Calendar
    "SchoolEvent",
    "EventType",
    # Announcements
    "Announcement",
    # Documents
    "Document",
    "DocumentType",
    # Settings
    "SchoolSettings",
    "SuggestionReview",
    "SuggestionStatus",
    "SuggestionType",
]
