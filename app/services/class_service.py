"""Service for a grade's subject classes and the grade detail view."""

import logging
import re
import time
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundException, ValidationException
from app.models import GradeLevel, SchoolClass, Section
from app.services.academic_year_service import AcademicYearScope, get_academic_year_service
from app.services.grade_level_service import (
    DEFAULT_SECTION_NAME,
    get_grade_level_service,
)
from app.services.realtime_service import get_connection_manager

logger = logging.getLogger(__name__)

WHITESPACE = re.compile(r"\s+")


def build_class_code(grade_name: str, subject_name: str, timestamp_ms: int | None = None) -> str:
    """Class code "<Grade>-<Subject>-<epoch ms>" with all whitespace removed."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    grade_part = WHITESPACE.sub("", grade_name)
    subject_part = WHITESPACE.sub("", subject_name)
    return f"{grade_part}-{subject_part}-{timestamp_ms}"


class ClassService:
    """Service for managing the subject classes taught in sections."""

    async def get_classes_for_sections(
        self, db: AsyncSession, section_ids: list[uuid.UUID]
    ) -> list[SchoolClass]:
        if not section_ids:
            return []
        result = await db.execute(
            select(SchoolClass)
            .where(SchoolClass.section_id.in_(section_ids))
            .order_by(SchoolClass.subject_name)
        )
        return list(result.scalars().all())

    async def get_class(self, db: AsyncSession, class_id: uuid.UUID) -> SchoolClass | None:
        return await db.get(SchoolClass, class_id)

    async def get_grade_detail(
        self,
        db: AsyncSession,
        grade_level_id: uuid.UUID,
        scope: AcademicYearScope,
    ) -> dict:
        """Grade detail: its sections (or a placeholder) and the subjects taught in them."""
        grade_service = get_grade_level_service()
        grade = await grade_service.get_grade_level(db, grade_level_id)
        if not grade:
            raise NotFoundException("Grade level")

        sections = await grade_service.get_sections(db, grade_level_id, scope)
        student_counts = await grade_service.get_student_counts(db, scope)
        students_count = student_counts.get(grade.name, 0)

        if sections:
            section_views = [
                {
                    "id": s.id,
                    "name": s.name,
                    "grade_level_id": s.grade_level_id,
                    "school_year_id": s.school_year_id,
                    "room": s.room,
                    "capacity": s.capacity,
                    "is_placeholder": False,
                }
                for s in sections
            ]
        else:
            section_views = [{
                "id": None,
                "name": DEFAULT_SECTION_NAME,
                "grade_level_id": grade.id,
                "is_placeholder": True,
            }]

        classes = await self.get_classes_for_sections(db, [s.id for s in sections])
        subjects = [
            {
                "id": c.id,
                "subject_name": c.subject_name,
                "class_code": c.class_code,
                "section_id": c.section_id,
                "section_name": c.section_name or DEFAULT_SECTION_NAME,
                "school_year_id": c.school_year_id,
                "room": c.room,
                "schedule": c.schedule,
                "color": c.color,
                "is_active": c.is_active,
                "students_count": students_count,
            }
            for c in classes
        ]

        return {
            "grade_level": grade,
            "school_year": scope.name,
            "students_count": students_count,
            "sections": section_views,
            "subjects": subjects,
        }

    async def _resolve_section(
        self,
        db: AsyncSession,
        grade: GradeLevel,
        scope: AcademicYearScope,
        section_id: uuid.UUID | None,
    ) -> Section:
        if section_id is not None:
            section = await db.get(Section, section_id)
            if not section or section.grade_level_id != grade.id:
                raise ValidationException([
                    {"field": "section_id", "message": "Section does not belong to this grade level"}
                ])
            return section

        sections = await get_grade_level_service().get_sections(db, grade.id, scope)
        if not sections:
            raise ValidationException([{
                "field": "section_id",
                "message": "Cannot create subject: the grade level has no sections configured",
            }])
        return sections[0]

    async def create_subject(
        self,
        db: AsyncSession,
        grade_level_id: uuid.UUID,
        scope: AcademicYearScope,
        subject_name: str,
        section_id: uuid.UUID | None = None,
        teacher_id: uuid.UUID | None = None,
        room: str | None = None,
        schedule: str | None = None,
        color: str | None = None,
    ) -> SchoolClass:
        """Add a subject class to one of a grade's sections.

        The scope's academic year is created on demand.
        """
        grade = await get_grade_level_service().get_grade_level(db, grade_level_id)
        if not grade:
            raise NotFoundException("Grade level")

        section = await self._resolve_section(db, grade, scope, section_id)
        year = await get_academic_year_service().ensure_year(db, scope)

        school_class = SchoolClass(
            subject_name=subject_name,
            class_code=build_class_code(grade.name, subject_name),
            section_id=section.id,
            teacher_id=teacher_id,
            school_year_id=year.id,
            room=room,
            schedule=schedule,
            color=color,
            is_active=True,
        )
        db.add(school_class)
        await db.commit()
        await db.refresh(school_class)

        logger.info(f"Created class {school_class.class_code} in section {section.name}")
        await get_connection_manager().notify_change("classes", "insert", school_class.id)
        return school_class

    async def update_subject(
        self,
        db: AsyncSession,
        class_id: uuid.UUID,
        **kwargs,
    ) -> SchoolClass:
        """Rename a subject or move it to another section of the same grade."""
        school_class = await self.get_class(db, class_id)
        if not school_class:
            raise NotFoundException("Subject")

        new_section_id = kwargs.pop("section_id", None)
        if new_section_id is not None and new_section_id != school_class.section_id:
            new_section = await db.get(Section, new_section_id)
            current = school_class.section
            if not new_section or (current and new_section.grade_level_id != current.grade_level_id):
                raise ValidationException([
                    {"field": "section_id", "message": "Section does not belong to this grade level"}
                ])
            school_class.section_id = new_section_id

        for key, value in kwargs.items():
            if hasattr(school_class, key) and value is not None:
                setattr(school_class, key, value)

        await db.commit()
        await db.refresh(school_class)

        await get_connection_manager().notify_change("classes", "update", school_class.id)
        return school_class

    async def delete_subject(self, db: AsyncSession, class_id: uuid.UUID) -> None:
        school_class = await self.get_class(db, class_id)
        if not school_class:
            raise NotFoundException("Subject")

        await db.delete(school_class)
        await db.commit()

        await get_connection_manager().notify_change("classes", "delete", class_id)


# Singleton instance
_class_service: ClassService | None = None


def get_class_service() -> ClassService:
    """Get the class service singleton."""
    global _class_service
    if _class_service is None:
        _class_service = ClassService()
    return _class_service
