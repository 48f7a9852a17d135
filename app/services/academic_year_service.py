"""Service for academic years and the per-request academic-year scope."""

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import ConflictException, NotFoundException, ValidationException
from app.models import AcademicYear
from app.services.realtime_service import get_connection_manager

logger = logging.getLogger(__name__)

YEAR_NAME_PATTERN = re.compile(r"^(\d{4})-(\d{4})$")


def parse_year_name(name: str) -> tuple[int, int]:
    """Split "2025-2026" into (2025, 2026)."""
    match = YEAR_NAME_PATTERN.match(name or "")
    if not match:
        raise ValidationException([{"field": "year", "message": f"Invalid academic year '{name}'"}])
    return int(match.group(1)), int(match.group(2))


def default_year_bounds(name: str) -> tuple[date, date]:
    """Default span of an academic year: June 1st to May 31st of the next year."""
    start_year, _ = parse_year_name(name)
    return date(start_year, 6, 1), date(start_year + 1, 5, 31)


@dataclass(frozen=True)
class AcademicYearScope:
    """The academic year a request operates on.

    `name` is always set ("2025-2026"); `year` is the stored row when one exists.
    """

    name: str
    year: AcademicYear | None = None

    @property
    def id(self) -> uuid.UUID | None:
        return self.year.id if self.year else None

    @property
    def start_year(self) -> int:
        return parse_year_name(self.name)[0]

    @property
    def start_date(self) -> date:
        return self.year.start_date if self.year else default_year_bounds(self.name)[0]

    @property
    def end_date(self) -> date:
        return self.year.end_date if self.year else default_year_bounds(self.name)[1]


class AcademicYearService:
    """Service for managing academic years."""

    async def get_years(self, db: AsyncSession) -> list[AcademicYear]:
        """Get all academic years, newest first."""
        result = await db.execute(select(AcademicYear).order_by(AcademicYear.start_date.desc()))
        return list(result.scalars().all())

    async def get_year(self, db: AsyncSession, year_id: uuid.UUID) -> AcademicYear | None:
        return await db.get(AcademicYear, year_id)

    async def get_by_name(self, db: AsyncSession, name: str) -> AcademicYear | None:
        result = await db.execute(select(AcademicYear).where(AcademicYear.name == name))
        return result.scalar_one_or_none()

    async def get_active(self, db: AsyncSession) -> AcademicYear | None:
        result = await db.execute(select(AcademicYear).where(AcademicYear.is_active.is_(True)))
        return result.scalar_one_or_none()

    async def resolve_scope(self, db: AsyncSession, requested: str | None = None) -> AcademicYearScope:
        """Resolve the academic year a request works in.

        Order: the explicitly requested name, then the active year, then the
        configured default name.
        """
        if requested:
            parse_year_name(requested)
            return AcademicYearScope(name=requested, year=await self.get_by_name(db, requested))

        active = await self.get_active(db)
        if active:
            return AcademicYearScope(name=active.name, year=active)

        name = settings.default_academic_year
        return AcademicYearScope(name=name, year=await self.get_by_name(db, name))

    async def ensure_year(self, db: AsyncSession, scope: AcademicYearScope) -> AcademicYear:
        """Get the stored academic year for a scope, creating it with default bounds.

        A created year becomes the active one only when no year is active yet.
        """
        if scope.year:
            return scope.year

        existing = await self.get_by_name(db, scope.name)
        if existing:
            return existing

        start, end = default_year_bounds(scope.name)
        is_active = await self.get_active(db) is None
        year = AcademicYear(name=scope.name, start_date=start, end_date=end, is_active=is_active)
        db.add(year)
        await db.flush()
        logger.info(f"Created academic year {scope.name}")
        return year

    async def create_year(
        self,
        db: AsyncSession,
        name: str,
        start_date: date,
        end_date: date,
        is_active: bool = False,
    ) -> AcademicYear:
        """Create an academic year; activating it deactivates the others."""
        parse_year_name(name)
        if await self.get_by_name(db, name):
            raise ConflictException(f"Academic year '{name}' already exists")

        if is_active:
            await db.execute(update(AcademicYear).values(is_active=False))

        year = AcademicYear(name=name, start_date=start_date, end_date=end_date, is_active=is_active)
        db.add(year)
        await db.commit()
        await db.refresh(year)

        await get_connection_manager().notify_change("academic_years", "insert", year.id)
        return year

    async def update_year(self, db: AsyncSession, year_id: uuid.UUID, **kwargs) -> AcademicYear:
        year = await self.get_year(db, year_id)
        if not year:
            raise NotFoundException("Academic year")

        for key, value in kwargs.items():
            if value is not None and hasattr(year, key):
                setattr(year, key, value)

        if year.end_date <= year.start_date:
            raise ValidationException([{"field": "end_date", "message": "end_date must be after start_date"}])

        await db.commit()
        await db.refresh(year)

        await get_connection_manager().notify_change("academic_years", "update", year.id)
        return year

    async def activate_year(self, db: AsyncSession, year_id: uuid.UUID) -> AcademicYear:
        """Make one academic year the active one."""
        year = await self.get_year(db, year_id)
        if not year:
            raise NotFoundException("Academic year")

        await db.execute(
            update(AcademicYear).where(AcademicYear.id != year_id).values(is_active=False)
        )
        year.is_active = True
        await db.commit()
        await db.refresh(year)

        logger.info(f"Activated academic year {year.name}")
        await get_connection_manager().notify_change("academic_years", "update", year.id)
        return year


# Singleton instance
_academic_year_service: AcademicYearService | None = None


def get_academic_year_service() -> AcademicYearService:
    """Get the academic year service singleton."""
    global _academic_year_service
    if _academic_year_service is None:
        _academic_year_service = AcademicYearService()
    return _academic_year_service
