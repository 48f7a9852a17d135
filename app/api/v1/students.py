"""Student record, enrollment and enrollment application API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_academic_year_scope
from app.database import get_db
from app.models.student import PendingEnrollmentStatus, StudentStatus
from app.models.user import UserRole
from app.schemas.common import APIResponse, PaginationMeta
from app.schemas.document import DocumentResponse
from app.schemas.student import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentStatusUpdate,
    PendingEnrollmentCreate,
    PendingEnrollmentResponse,
    PendingEnrollmentReview,
    StudentCreate,
    StudentListItem,
    StudentResponse,
    StudentUpdate,
)
from app.services.academic_year_service import AcademicYearScope
from app.services.document_service import get_document_service
from app.services.student_service import get_student_service
from app.utils.permissions import ACADEMIC_ROLES, REGISTRAR_ROLES, require_authenticated, require_role
from app.utils.request_context import get_current_user_id, get_current_user_id_or_none

router = APIRouter()


@router.get("", response_model=APIResponse[list[StudentListItem]])
@require_role(*ACADEMIC_ROLES)
async def list_students(
    level: str | None = Query(None, description='Grade name, e.g. "Grade 1"'),
    section_id: uuid.UUID | None = Query(None),
    status: StudentStatus | None = Query(None),
    search: str | None = Query(None, description="Search by name or LRN"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """List student records of the selected academic year."""
    students, total = await get_student_service().get_students(
        db,
        scope,
        level=level,
        section_id=section_id,
        status=status.value if status else None,
        search=search,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[StudentListItem.model_validate(s) for s in students],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("", response_model=APIResponse[StudentResponse])
@require_role(*REGISTRAR_ROLES)
async def create_student(
    data: StudentCreate,
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    student = await get_student_service().create_student(db, data, scope)
    return APIResponse(
        data=StudentResponse.model_validate(student),
        message="Student created successfully",
    )


# === Enrollments ===

@router.get("/enrollments", response_model=APIResponse[list[EnrollmentResponse]])
@require_role(*ACADEMIC_ROLES)
async def list_enrollments(
    section_id: uuid.UUID | None = Query(None),
    status: str | None = Query(None),
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    enrollments = await get_student_service().get_enrollments(db, scope, section_id, status)
    return APIResponse(data=[EnrollmentResponse.model_validate(e) for e in enrollments])


@router.post("/enrollments", response_model=APIResponse[EnrollmentResponse])
@require_role(*REGISTRAR_ROLES)
async def create_enrollment(
    data: EnrollmentCreate,
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """Enroll a student in a section for the selected year."""
    enrollment = await get_student_service().enroll_student(db, data.student_id, data.section_id, scope)
    return APIResponse(
        data=EnrollmentResponse.model_validate(enrollment),
        message="Student enrolled successfully",
    )


@router.patch("/enrollments/{enrollment_id}", response_model=APIResponse[EnrollmentResponse])
@require_role(*REGISTRAR_ROLES)
async def update_enrollment_status(
    enrollment_id: uuid.UUID,
    data: EnrollmentStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    enrollment = await get_student_service().update_enrollment_status(db, enrollment_id, data.status)
    return APIResponse(
        data=EnrollmentResponse.model_validate(enrollment),
        message=f"Enrollment marked {enrollment.status}",
    )


# === Enrollment applications ===

@router.get("/applications", response_model=APIResponse[list[PendingEnrollmentResponse]])
@require_role(*REGISTRAR_ROLES)
async def list_applications(
    status: PendingEnrollmentStatus | None = Query(PendingEnrollmentStatus.PENDING),
    db: AsyncSession = Depends(get_db),
):
    applications = await get_student_service().get_pending_enrollments(
        db, status.value if status else None
    )
    return APIResponse(data=[PendingEnrollmentResponse.model_validate(a) for a in applications])


@router.post("/applications", response_model=APIResponse[PendingEnrollmentResponse])
@require_authenticated()
async def submit_application(
    data: PendingEnrollmentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Submit an enrollment application for registrar review."""
    application = await get_student_service().submit_application(
        db, data, submitted_by=get_current_user_id_or_none()
    )
    message = "Application submitted" if application.is_complete else "Application saved with missing fields"
    return APIResponse(data=PendingEnrollmentResponse.model_validate(application), message=message)


@router.post("/applications/{application_id}/approve", response_model=APIResponse[PendingEnrollmentResponse])
@require_role(*REGISTRAR_ROLES)
async def approve_application(
    application_id: uuid.UUID,
    review: PendingEnrollmentReview,
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """Approve an application, creating the student record."""
    application = await get_student_service().approve_application(
        db,
        application_id,
        reviewer_id=get_current_user_id(),
        scope=scope,
        section_id=review.section_id,
    )
    return APIResponse(
        data=PendingEnrollmentResponse.model_validate(application),
        message="Application approved",
    )


@router.post("/applications/{application_id}/reject", response_model=APIResponse[PendingEnrollmentResponse])
@require_role(*REGISTRAR_ROLES)
async def reject_application(
    application_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    application = await get_student_service().reject_application(
        db, application_id, reviewer_id=get_current_user_id()
    )
    return APIResponse(
        data=PendingEnrollmentResponse.model_validate(application),
        message="Application rejected",
    )


# === Single student ===

@router.get("/{student_id}", response_model=APIResponse[StudentResponse])
@require_role(*ACADEMIC_ROLES)
async def get_student(
    student_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    student = await get_student_service().get_student(db, student_id)
    return APIResponse(data=StudentResponse.model_validate(student))


@router.put("/{student_id}", response_model=APIResponse[StudentResponse])
@require_role(*REGISTRAR_ROLES)
async def update_student(
    student_id: uuid.UUID,
    data: StudentUpdate,
    db: AsyncSession = Depends(get_db),
):
    student = await get_student_service().update_student(db, student_id, data)
    return APIResponse(
        data=StudentResponse.model_validate(student),
        message="Student updated successfully",
    )


@router.delete("/{student_id}", response_model=APIResponse[None])
@require_role(UserRole.PRINCIPAL, UserRole.REGISTRAR)
async def delete_student(
    student_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_student_service().delete_student(db, student_id)
    return APIResponse(message="Student deleted successfully")


@router.get("/{student_id}/documents", response_model=APIResponse[list[DocumentResponse]])
@require_role(*REGISTRAR_ROLES)
async def list_student_documents(
    student_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Documents on a student's file, newest first."""
    await get_student_service().get_student(db, student_id)
    documents = await get_document_service().get_student_documents(db, student_id)
    return APIResponse(data=[DocumentResponse.model_validate(d) for d in documents])
