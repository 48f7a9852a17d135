"""Shared FastAPI dependencies."""

from fastapi import Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.academic_year_service import AcademicYearScope, get_academic_year_service


async def get_academic_year_scope(
    year: str | None = Query(None, description='Academic year name, e.g. "2025-2026"'),
    x_academic_year: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> AcademicYearScope:
    """Resolve the academic year from ?year=, the X-Academic-Year header, or the active year."""
    service = get_academic_year_service()
    return await service.resolve_scope(db, year or x_academic_year)
