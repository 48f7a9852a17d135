"""Service for managing grade levels and their sections."""

import logging
import uuid
from collections import Counter
from typing import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictException, NotFoundException
from app.models import GradeLevel, SchoolClass, Section, StudentRecord
from app.services.academic_year_service import AcademicYearScope
from app.services.realtime_service import get_connection_manager

logger = logging.getLogger(__name__)


# Curriculum grade levels, Kindergarten 1 through Grade 12
DEFAULT_GRADE_LEVELS = [
    {"name": "Kindergarten 1", "short_name": "K1", "order_index": 0},
    {"name": "Kindergarten 2", "short_name": "K2", "order_index": 1},
    *[
        {
            "name": f"Grade {n}",
            "short_name": f"G{n}",
            "order_index": n + 1,
            "is_senior_high": n >= 11,
        }
        for n in range(1, 13)
    ],
]

DEFAULT_SECTION_NAME = "Section A"

# Short forms used on student records
LEVEL_ALIASES = {
    "kinder 1": "Kindergarten 1",
    "kindergarten 1": "Kindergarten 1",
    "k1": "Kindergarten 1",
    "kinder 2": "Kindergarten 2",
    "kindergarten 2": "Kindergarten 2",
    "k2": "Kindergarten 2",
}


def normalize_level_name(level: str | None) -> str:
    """Map a student record's level onto a grade level name ("Kinder 1" -> "Kindergarten 1")."""
    cleaned = " ".join((level or "").split())
    return LEVEL_ALIASES.get(cleaned.lower(), cleaned)


def count_students_by_grade(rows: Iterable[tuple[str | None, int]]) -> Counter:
    """Fold (level, count) rows into counts keyed by normalised grade name."""
    counts: Counter = Counter()
    for level, count in rows:
        counts[normalize_level_name(level)] += count
    return counts


def section_year_filter(scope: AcademicYearScope):
    """Sections belonging to the scope's year, plus sections not tied to any year."""
    if scope.id is None:
        return Section.school_year_id.is_(None)
    return or_(Section.school_year_id == scope.id, Section.school_year_id.is_(None))


class GradeLevelService:
    """Service for managing grade level configuration."""

    async def get_grade_levels(
        self,
        db: AsyncSession,
        is_active: bool | None = True,
    ) -> list[GradeLevel]:
        """Get grade levels in curriculum order."""
        query = select(GradeLevel)
        if is_active is not None:
            query = query.where(GradeLevel.is_active == is_active)
        query = query.order_by(GradeLevel.order_index, GradeLevel.name)

        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_student_counts(self, db: AsyncSession, scope: AcademicYearScope) -> Counter:
        """Count student records of the scope's year per grade name."""
        result = await db.execute(
            select(StudentRecord.level, func.count(StudentRecord.id))
            .where(StudentRecord.school_year == scope.name)
            .group_by(StudentRecord.level)
        )
        return count_students_by_grade(result.all())

    async def get_grade_levels_with_counts(
        self,
        db: AsyncSession,
        scope: AcademicYearScope,
    ) -> list[dict]:
        """Grade level cards with student, subject and section counts for a year."""
        grade_levels = await self.get_grade_levels(db)
        student_counts = await self.get_student_counts(db, scope)

        class_rows = await db.execute(
            select(Section.grade_level_id, func.count(SchoolClass.id))
            .join(SchoolClass, SchoolClass.section_id == Section.id)
            .where(section_year_filter(scope))
            .group_by(Section.grade_level_id)
        )
        subjects_by_grade = dict(class_rows.all())

        section_rows = await db.execute(
            select(Section.grade_level_id, func.count(Section.id))
            .where(section_year_filter(scope))
            .group_by(Section.grade_level_id)
        )
        sections_by_grade = dict(section_rows.all())

        return [
            {
                "id": gl.id,
                "name": gl.name,
                "short_name": gl.short_name,
                "order_index": gl.order_index,
                "is_senior_high": gl.is_senior_high,
                "is_active": gl.is_active,
                "students_count": student_counts.get(gl.name, 0),
                "subjects_count": subjects_by_grade.get(gl.id, 0),
                "sections_count": sections_by_grade.get(gl.id, 0),
            }
            for gl in grade_levels
        ]

    async def get_grade_level(
        self, db: AsyncSession, grade_level_id: uuid.UUID
    ) -> GradeLevel | None:
        """Get a grade level by ID."""
        return await db.get(GradeLevel, grade_level_id)

    async def get_grade_level_by_name(self, db: AsyncSession, name: str) -> GradeLevel | None:
        result = await db.execute(select(GradeLevel).where(GradeLevel.name == name))
        return result.scalar_one_or_none()

    async def create_grade_level(
        self,
        db: AsyncSession,
        name: str,
        short_name: str,
        order_index: int = 0,
        is_senior_high: bool = False,
    ) -> GradeLevel:
        """Create a new grade level."""
        if await self.get_grade_level_by_name(db, name):
            raise ConflictException(f"Grade level '{name}' already exists")

        grade_level = GradeLevel(
            name=name,
            short_name=short_name,
            order_index=order_index,
            is_senior_high=is_senior_high,
            is_active=True,
        )
        db.add(grade_level)
        await db.commit()
        await db.refresh(grade_level)

        await get_connection_manager().notify_change("grade_levels", "insert", grade_level.id)
        return grade_level

    async def update_grade_level(
        self,
        db: AsyncSession,
        grade_level_id: uuid.UUID,
        **kwargs,
    ) -> GradeLevel:
        """Update a grade level."""
        grade_level = await self.get_grade_level(db, grade_level_id)
        if not grade_level:
            raise NotFoundException("Grade level")

        new_name = kwargs.get("name")
        if new_name and new_name != grade_level.name:
            existing = await self.get_grade_level_by_name(db, new_name)
            if existing and existing.id != grade_level_id:
                raise ConflictException(f"Grade level '{new_name}' already exists")

        for key, value in kwargs.items():
            if hasattr(grade_level, key) and value is not None:
                setattr(grade_level, key, value)

        await db.commit()
        await db.refresh(grade_level)

        await get_connection_manager().notify_change("grade_levels", "update", grade_level.id)
        return grade_level

    async def delete_grade_level(self, db: AsyncSession, grade_level_id: uuid.UUID) -> None:
        """Delete a grade level and, by cascade, its sections and their classes."""
        grade_level = await self.get_grade_level(db, grade_level_id)
        if not grade_level:
            raise NotFoundException("Grade level")

        await db.delete(grade_level)
        await db.commit()

        await get_connection_manager().notify_change("grade_levels", "delete", grade_level_id)

    async def seed_default_grade_levels(self, db: AsyncSession) -> list[GradeLevel]:
        """Create any missing curriculum grade levels."""
        existing = {gl.name for gl in await self.get_grade_levels(db, is_active=None)}

        created = []
        for config in DEFAULT_GRADE_LEVELS:
            if config["name"] in existing:
                continue
            grade_level = GradeLevel(
                name=config["name"],
                short_name=config["short_name"],
                order_index=config["order_index"],
                is_senior_high=config.get("is_senior_high", False),
                is_active=True,
            )
            db.add(grade_level)
            created.append(grade_level)

        await db.commit()
        logger.info(f"Seeded {len(created)} grade levels")
        return created

    # === Sections ===

    async def get_sections(
        self,
        db: AsyncSession,
        grade_level_id: uuid.UUID,
        scope: AcademicYearScope,
    ) -> list[Section]:
        """Get a grade level's sections for a year, ordered by name."""
        result = await db.execute(
            select(Section)
            .where(Section.grade_level_id == grade_level_id, section_year_filter(scope))
            .order_by(Section.name)
        )
        return list(result.scalars().all())

    async def get_section(self, db: AsyncSession, section_id: uuid.UUID) -> Section | None:
        return await db.get(Section, section_id)

    async def create_section(
        self,
        db: AsyncSession,
        grade_level_id: uuid.UUID,
        scope: AcademicYearScope,
        name: str,
        room: str | None = None,
        capacity: int | None = None,
        adviser_id: uuid.UUID | None = None,
    ) -> Section:
        """Add a section to a grade level in the scope's year."""
        if not await self.get_grade_level(db, grade_level_id):
            raise NotFoundException("Grade level")

        existing = await self.get_sections(db, grade_level_id, scope)
        if any(section.name.lower() == name.lower() for section in existing):
            raise ConflictException(f"Section '{name}' already exists")

        section = Section(
            name=name,
            grade_level_id=grade_level_id,
            school_year_id=scope.id,
            room=room,
            capacity=capacity,
            adviser_id=adviser_id,
        )
        db.add(section)
        await db.commit()
        await db.refresh(section)

        await get_connection_manager().notify_change("sections", "insert", section.id)
        return section

    async def update_section(self, db: AsyncSession, section_id: uuid.UUID, **kwargs) -> Section:
        section = await self.get_section(db, section_id)
        if not section:
            raise NotFoundException("Section")

        for key, value in kwargs.items():
            if hasattr(section, key) and value is not None:
                setattr(section, key, value)

        await db.commit()
        await db.refresh(section)

        await get_connection_manager().notify_change("sections", "update", section.id)
        return section

    async def delete_section(self, db: AsyncSession, section_id: uuid.UUID) -> None:
        section = await self.get_section(db, section_id)
        if not section:
            raise NotFoundException("Section")

        await db.delete(section)
        await db.commit()

        await get_connection_manager().notify_change("sections", "delete", section_id)


# Singleton instance
_grade_level_service: GradeLevelService | None = None


def get_grade_level_service() -> GradeLevelService:
    """Get the grade level service singleton."""
    global _grade_level_service
    if _grade_level_service is None:
        _grade_level_service = GradeLevelService()
    return _grade_level_service
