"""API v1 router aggregator."""

from fastapi import APIRouter

from app.api.v1 import (
    academic_years,
    analyze_document,
    announcements,
    attendance,
    auth,
    calendar,
    dashboard,
    documents,
    finance,
    grade_levels,
    reports,
    settings,
    students,
    suggestions,
    websocket,
)

api_router = APIRouter(tags=["API v1"])

# Include all API routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(academic_years.router, prefix="/academic-years", tags=["Academic Years"])
api_router.include_router(grade_levels.router, prefix="/grade-levels", tags=["Grade Levels"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(finance.router, prefix="/finance", tags=["Finance"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["Calendar"])
api_router.include_router(announcements.router, prefix="/announcements", tags=["Announcements"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(settings.router, prefix="/settings", tags=["Settings"])
api_router.include_router(suggestions.router, prefix="/suggestions", tags=["Suggestions"])
api_router.include_router(analyze_document.router, tags=["AI"])
api_router.include_router(websocket.router)
