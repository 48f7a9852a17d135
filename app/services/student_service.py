"""Student service for student records, enrollments and enrollment applications."""

import logging
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictException, NotFoundException, ValidationException
from app.models import (
    Enrollment,
    EnrollmentStatus,
    GradeLevel,
    PendingEnrollment,
    PendingEnrollmentStatus,
    Section,
    StudentRecord,
    StudentStatus,
)
from app.schemas.student import PendingEnrollmentCreate, StudentCreate, StudentUpdate
from app.services.academic_year_service import AcademicYearScope, get_academic_year_service
from app.services.realtime_service import get_connection_manager

logger = logging.getLogger(__name__)

# Fields an application needs before it can be approved
REQUIRED_APPLICATION_FIELDS = ("first_name", "last_name", "birth_date", "gender", "grade_level_id")


def calculate_age(birth_date: date | None, today: date | None = None) -> int | None:
    """Age in whole years on a given day."""
    if birth_date is None:
        return None
    today = today or date.today()
    had_birthday = (today.month, today.day) >= (birth_date.month, birth_date.day)
    return today.year - birth_date.year - (0 if had_birthday else 1)


def compose_student_name(first: str | None, middle: str | None, last: str | None, suffix: str | None = None) -> str:
    """Display name "First Middle Last Suffix" from the parts that are present."""
    return " ".join(part.strip() for part in (first, middle, last, suffix) if part and part.strip())


def application_errors(data: dict) -> list[dict]:
    """Field errors for an incomplete enrollment application."""
    return [
        {"field": field, "message": f"{field.replace('_', ' ').capitalize()} is required"}
        for field in REQUIRED_APPLICATION_FIELDS
        if not data.get(field)
    ]


class StudentService:
    """Service for managing student records."""

    async def get_students(
        self,
        db: AsyncSession,
        scope: AcademicYearScope,
        level: str | None = None,
        section_id: uuid.UUID | None = None,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[StudentRecord], int]:
        """Get student records of a year with optional filters."""
        query = select(StudentRecord).where(StudentRecord.school_year == scope.name)

        if level:
            query = query.where(StudentRecord.level == level)
        if section_id:
            query = query.where(StudentRecord.section_id == section_id)
        if status:
            query = query.where(StudentRecord.status == status)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    StudentRecord.student_name.ilike(search_term),
                    StudentRecord.lrn.ilike(search_term),
                )
            )

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = query.order_by(StudentRecord.student_name)
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def get_student(self, db: AsyncSession, student_id: uuid.UUID) -> StudentRecord:
        """Get a single student record by ID."""
        student = await db.get(StudentRecord, student_id)
        if not student:
            raise NotFoundException("Student")
        return student

    async def _check_lrn_unique(
        self, db: AsyncSession, lrn: str | None, exclude_id: uuid.UUID | None = None
    ) -> None:
        if not lrn:
            return
        query = select(StudentRecord.id).where(StudentRecord.lrn == lrn)
        if exclude_id:
            query = query.where(StudentRecord.id != exclude_id)
        if (await db.execute(query)).first():
            raise ConflictException(f"A student with LRN '{lrn}' already exists")

    async def _level_name(self, db: AsyncSession, grade_level_id: uuid.UUID | None) -> str | None:
        if not grade_level_id:
            return None
        grade = await db.get(GradeLevel, grade_level_id)
        if not grade:
            raise ValidationException([{"field": "grade_level_id", "message": "Unknown grade level"}])
        return grade.name

    async def create_student(
        self,
        db: AsyncSession,
        data: StudentCreate,
        scope: AcademicYearScope,
    ) -> StudentRecord:
        """Create a new student record in the given (or scope's) school year."""
        await self._check_lrn_unique(db, data.lrn)

        values = data.model_dump(exclude_unset=False)
        student_name = values.pop("student_name") or compose_student_name(
            data.first_name, data.middle_name, data.last_name, data.suffix
        )
        if not student_name:
            raise ValidationException([{"field": "student_name", "message": "A student name is required"}])

        values["school_year"] = values.get("school_year") or scope.name
        values["status"] = data.status.value
        if not values.get("level"):
            values["level"] = await self._level_name(db, data.grade_level_id)

        student = StudentRecord(
            student_name=student_name,
            age=calculate_age(data.birth_date),
            **values,
        )
        db.add(student)
        await db.commit()
        await db.refresh(student)

        await get_connection_manager().notify_change("student_records", "insert", student.id)
        return student

    async def update_student(
        self,
        db: AsyncSession,
        student_id: uuid.UUID,
        data: StudentUpdate,
    ) -> StudentRecord:
        """Update a student record."""
        student = await self.get_student(db, student_id)
        updates = data.model_dump(exclude_unset=True)

        if "lrn" in updates:
            await self._check_lrn_unique(db, updates["lrn"], exclude_id=student_id)
        if isinstance(updates.get("status"), StudentStatus):
            updates["status"] = updates["status"].value
        if updates.get("grade_level_id") and not updates.get("level"):
            updates["level"] = await self._level_name(db, updates["grade_level_id"])

        for key, value in updates.items():
            setattr(student, key, value)

        name_parts = {"first_name", "middle_name", "last_name", "suffix"}
        if name_parts & updates.keys() and "student_name" not in updates:
            student.student_name = compose_student_name(
                student.first_name, student.middle_name, student.last_name, student.suffix
            ) or student.student_name
        if "birth_date" in updates:
            student.age = calculate_age(student.birth_date)

        await db.commit()
        await db.refresh(student)

        await get_connection_manager().notify_change("student_records", "update", student.id)
        return student

    async def delete_student(self, db: AsyncSession, student_id: uuid.UUID) -> None:
        student = await self.get_student(db, student_id)
        await db.delete(student)
        await db.commit()

        await get_connection_manager().notify_change("student_records", "delete", student_id)

    # === Enrollments ===

    async def get_enrollments(
        self,
        db: AsyncSession,
        scope: AcademicYearScope,
        section_id: uuid.UUID | None = None,
        status: str | None = None,
    ) -> list[Enrollment]:
        """Get enrollments of the scope's academic year."""
        if scope.id is None:
            return []
        query = select(Enrollment).where(Enrollment.school_year_id == scope.id)
        if section_id:
            query = query.where(Enrollment.section_id == section_id)
        if status:
            query = query.where(Enrollment.status == status)
        result = await db.execute(query.order_by(Enrollment.created_at))
        return list(result.scalars().all())

    async def enroll_student(
        self,
        db: AsyncSession,
        student_id: uuid.UUID,
        section_id: uuid.UUID,
        scope: AcademicYearScope,
    ) -> Enrollment:
        """Enroll a student in a section for the scope's year (one enrollment per year)."""
        student = await self.get_student(db, student_id)
        section = await db.get(Section, section_id)
        if not section:
            raise NotFoundException("Section")

        year = await get_academic_year_service().ensure_year(db, scope)
        existing = await db.execute(
            select(Enrollment).where(
                Enrollment.student_id == student_id,
                Enrollment.school_year_id == year.id,
            )
        )
        if existing.scalar_one_or_none():
            raise ConflictException("Student is already enrolled for this academic year")

        enrollment = Enrollment(
            student_id=student_id,
            section_id=section_id,
            school_year_id=year.id,
            status=EnrollmentStatus.ENROLLED.value,
            enrolled_at=datetime.now(timezone.utc),
        )
        db.add(enrollment)

        student.section_id = section_id
        student.grade_level_id = section.grade_level_id
        student.school_year = year.name

        await db.commit()
        await db.refresh(enrollment)

        await get_connection_manager().notify_change("enrollments", "insert", enrollment.id)
        return enrollment

    async def update_enrollment_status(
        self,
        db: AsyncSession,
        enrollment_id: uuid.UUID,
        status: EnrollmentStatus,
    ) -> Enrollment:
        enrollment = await db.get(Enrollment, enrollment_id)
        if not enrollment:
            raise NotFoundException("Enrollment")

        enrollment.status = status.value
        if status in (EnrollmentStatus.DROPPED, EnrollmentStatus.TRANSFERRED):
            enrollment.dropped_at = datetime.now(timezone.utc)

        await db.commit()
        await db.refresh(enrollment)

        await get_connection_manager().notify_change("enrollments", "update", enrollment.id)
        return enrollment

    # === Pending enrollments ===

    async def get_pending_enrollments(
        self, db: AsyncSession, status: str | None = PendingEnrollmentStatus.PENDING.value
    ) -> list[PendingEnrollment]:
        query = select(PendingEnrollment)
        if status:
            query = query.where(PendingEnrollment.status == status)
        result = await db.execute(query.order_by(PendingEnrollment.submitted_at.desc()))
        return list(result.scalars().all())

    async def submit_application(
        self,
        db: AsyncSession,
        data: PendingEnrollmentCreate,
        submitted_by: uuid.UUID | None = None,
    ) -> PendingEnrollment:
        """Store an enrollment application, flagging missing fields."""
        values = data.model_dump()
        errors = application_errors(values)
        student_name = values.pop("student_name") or compose_student_name(
            data.first_name, data.middle_name, data.last_name
        )
        if not student_name:
            raise ValidationException([{"field": "student_name", "message": "A student name is required"}])

        application = PendingEnrollment(
            student_name=student_name,
            age=calculate_age(data.birth_date),
            is_complete=not errors,
            validation_errors=errors or None,
            status=PendingEnrollmentStatus.PENDING.value,
            submitted_at=datetime.now(timezone.utc),
            submitted_by=submitted_by,
            **values,
        )
        db.add(application)
        await db.commit()
        await db.refresh(application)

        await get_connection_manager().notify_change("pending_enrollments", "insert", application.id)
        return application

    async def _get_pending(self, db: AsyncSession, application_id: uuid.UUID) -> PendingEnrollment:
        application = await db.get(PendingEnrollment, application_id)
        if not application:
            raise NotFoundException("Pending enrollment")
        if application.status != PendingEnrollmentStatus.PENDING.value:
            raise ConflictException(f"Application is already {application.status}")
        return application

    async def approve_application(
        self,
        db: AsyncSession,
        application_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        scope: AcademicYearScope,
        section_id: uuid.UUID | None = None,
    ) -> PendingEnrollment:
        """Approve an application: create the student record and, given a section, enroll it."""
        application = await self._get_pending(db, application_id)
        if not application.is_complete:
            raise ValidationException(application.validation_errors or "Application is incomplete")

        level = await self._level_name(db, application.grade_level_id)
        student = StudentRecord(
            student_name=application.student_name,
            first_name=application.first_name,
            middle_name=application.middle_name,
            last_name=application.last_name,
            lrn=application.lrn,
            gender=application.gender,
            birth_date=application.birth_date,
            age=application.age,
            level=level,
            grade_level_id=application.grade_level_id,
            strand_id=application.strand_id,
            school_year=scope.name,
            status=StudentStatus.ACTIVE.value,
            father_contact=application.father_contact,
            mother_contact=application.mother_contact,
            phil_address=application.phil_address,
            uae_address=application.uae_address,
            previous_school=application.previous_school,
        )
        db.add(student)
        await db.flush()

        if section_id:
            section = await db.get(Section, section_id)
            if not section:
                raise NotFoundException("Section")
            year = await get_academic_year_service().ensure_year(db, scope)
            db.add(Enrollment(
                student_id=student.id,
                section_id=section_id,
                school_year_id=year.id,
                status=EnrollmentStatus.ENROLLED.value,
                enrolled_at=datetime.now(timezone.utc),
            ))
            student.section_id = section_id

        application.status = PendingEnrollmentStatus.APPROVED.value
        application.reviewed_at = datetime.now(timezone.utc)
        application.reviewed_by = reviewer_id
        application.student_id = student.id

        await db.commit()
        await db.refresh(application)

        logger.info(f"Approved enrollment application {application_id} as student {student.id}")
        manager = get_connection_manager()
        await manager.notify_change("pending_enrollments", "update", application.id)
        await manager.notify_change("student_records", "insert", student.id)
        return application

    async def reject_application(
        self,
        db: AsyncSession,
        application_id: uuid.UUID,
        reviewer_id: uuid.UUID,
    ) -> PendingEnrollment:
        application = await self._get_pending(db, application_id)
        application.status = PendingEnrollmentStatus.REJECTED.value
        application.reviewed_at = datetime.now(timezone.utc)
        application.reviewed_by = reviewer_id

        await db.commit()
        await db.refresh(application)

        await get_connection_manager().notify_change("pending_enrollments", "update", application.id)
        return application


# Singleton instance
_student_service: StudentService | None = None


def get_student_service() -> StudentService:
    """Get the student service singleton."""
    global _student_service
    if _student_service is None:
        _student_service = StudentService()
    return _student_service
