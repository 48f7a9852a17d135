"""Grade level, section and subject API endpoints."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_academic_year_scope
from app.database import get_db
from app.exceptions import NotFoundException
from app.models.user import UserRole
from app.schemas.academic import (
    GradeDetailResponse,
    GradeLevelCreate,
    GradeLevelResponse,
    GradeLevelSummary,
    GradeLevelUpdate,
    SectionCreate,
    SectionResponse,
    SectionUpdate,
    SubjectClassCreate,
    SubjectClassResponse,
    SubjectClassUpdate,
)
from app.schemas.common import APIResponse
from app.services.academic_year_service import AcademicYearScope
from app.services.class_service import get_class_service
from app.services.grade_level_service import get_grade_level_service
from app.utils.permissions import ACADEMIC_ROLES, require_role

router = APIRouter()

MANAGER_ROLES = (UserRole.PRINCIPAL, UserRole.REGISTRAR)


@router.get("", response_model=APIResponse[list[GradeLevelSummary]])
@require_role(*ACADEMIC_ROLES)
async def list_grade_levels(
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """List grade levels with student, subject and section counts for the year."""
    grades = await get_grade_level_service().get_grade_levels_with_counts(db, scope)
    return APIResponse(data=[GradeLevelSummary(**g) for g in grades])


@router.post("", response_model=APIResponse[GradeLevelResponse])
@require_role(*MANAGER_ROLES)
async def create_grade_level(
    data: GradeLevelCreate,
    db: AsyncSession = Depends(get_db),
):
    grade = await get_grade_level_service().create_grade_level(db, **data.model_dump())
    return APIResponse(
        data=GradeLevelResponse.model_validate(grade),
        message="Grade level created successfully",
    )


@router.post("/seed", response_model=APIResponse[list[GradeLevelResponse]])
@require_role(UserRole.PRINCIPAL)
async def seed_grade_levels(db: AsyncSession = Depends(get_db)):
    """Create any missing Kindergarten 1 to Grade 12 levels."""
    created = await get_grade_level_service().seed_default_grade_levels(db)
    return APIResponse(
        data=[GradeLevelResponse.model_validate(g) for g in created],
        message=f"Created {len(created)} grade levels",
    )


@router.get("/{grade_level_id}", response_model=APIResponse[GradeLevelResponse])
@require_role(*ACADEMIC_ROLES)
async def get_grade_level(
    grade_level_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    grade = await get_grade_level_service().get_grade_level(db, grade_level_id)
    if not grade:
        raise NotFoundException("Grade level")
    return APIResponse(data=GradeLevelResponse.model_validate(grade))


@router.put("/{grade_level_id}", response_model=APIResponse[GradeLevelResponse])
@require_role(*MANAGER_ROLES)
async def update_grade_level(
    grade_level_id: uuid.UUID,
    data: GradeLevelUpdate,
    db: AsyncSession = Depends(get_db),
):
    grade = await get_grade_level_service().update_grade_level(
        db, grade_level_id, **data.model_dump(exclude_unset=True)
    )
    return APIResponse(
        data=GradeLevelResponse.model_validate(grade),
        message="Grade level updated successfully",
    )


@router.delete("/{grade_level_id}", response_model=APIResponse[None])
@require_role(UserRole.PRINCIPAL)
async def delete_grade_level(
    grade_level_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a grade level with its sections and classes."""
    await get_grade_level_service().delete_grade_level(db, grade_level_id)
    return APIResponse(message="Grade level deleted successfully")


@router.get("/{grade_level_id}/detail", response_model=APIResponse[GradeDetailResponse])
@require_role(*ACADEMIC_ROLES)
async def get_grade_detail(
    grade_level_id: uuid.UUID,
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """Grade detail: sections (or a placeholder) and their subjects."""
    detail = await get_class_service().get_grade_detail(db, grade_level_id, scope)
    return APIResponse(data=GradeDetailResponse(
        grade_level=GradeLevelResponse.model_validate(detail["grade_level"]),
        school_year=detail["school_year"],
        students_count=detail["students_count"],
        sections=[SectionResponse(**s) for s in detail["sections"]],
        subjects=[SubjectClassResponse(**s) for s in detail["subjects"]],
    ))


# === Sections ===

@router.get("/{grade_level_id}/sections", response_model=APIResponse[list[SectionResponse]])
@require_role(*ACADEMIC_ROLES)
async def list_sections(
    grade_level_id: uuid.UUID,
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    sections = await get_grade_level_service().get_sections(db, grade_level_id, scope)
    return APIResponse(data=[SectionResponse.model_validate(s) for s in sections])


@router.post("/{grade_level_id}/sections", response_model=APIResponse[SectionResponse])
@require_role(*MANAGER_ROLES)
async def create_section(
    grade_level_id: uuid.UUID,
    data: SectionCreate,
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    section = await get_grade_level_service().create_section(db, grade_level_id, scope, **data.model_dump())
    return APIResponse(
        data=SectionResponse.model_validate(section),
        message="Section created successfully",
    )


@router.put("/sections/{section_id}", response_model=APIResponse[SectionResponse])
@require_role(*MANAGER_ROLES)
async def update_section(
    section_id: uuid.UUID,
    data: SectionUpdate,
    db: AsyncSession = Depends(get_db),
):
    section = await get_grade_level_service().update_section(
        db, section_id, **data.model_dump(exclude_unset=True)
    )
    return APIResponse(
        data=SectionResponse.model_validate(section),
        message="Section updated successfully",
    )


@router.delete("/sections/{section_id}", response_model=APIResponse[None])
@require_role(*MANAGER_ROLES)
async def delete_section(
    section_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_grade_level_service().delete_section(db, section_id)
    return APIResponse(message="Section deleted successfully")


# === Subjects ===

@router.post("/{grade_level_id}/subjects", response_model=APIResponse[SubjectClassResponse])
@require_role(*MANAGER_ROLES)
async def create_subject(
    grade_level_id: uuid.UUID,
    data: SubjectClassCreate,
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """Add a subject to one of the grade's sections (the first one by default)."""
    school_class = await get_class_service().create_subject(
        db,
        grade_level_id,
        scope,
        subject_name=data.subject_name,
        section_id=data.section_id,
        room=data.room,
        schedule=data.schedule,
        color=data.color,
    )
    return APIResponse(
        data=SubjectClassResponse.model_validate(school_class),
        message="Subject created successfully",
    )


@router.put("/subjects/{class_id}", response_model=APIResponse[SubjectClassResponse])
@require_role(*MANAGER_ROLES)
async def update_subject(
    class_id: uuid.UUID,
    data: SubjectClassUpdate,
    db: AsyncSession = Depends(get_db),
):
    school_class = await get_class_service().update_subject(
        db, class_id, **data.model_dump(exclude_unset=True)
    )
    return APIResponse(
        data=SubjectClassResponse.model_validate(school_class),
        message="Subject updated successfully",
    )


@router.delete("/subjects/{class_id}", response_model=APIResponse[None])
@require_role(*MANAGER_ROLES)
async def delete_subject(
    class_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_class_service().delete_subject(db, class_id)
    return APIResponse(message="Subject deleted successfully")
