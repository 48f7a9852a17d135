#!/usr/bin/env python3
"""
Development seed data script.

Creates test data for development:
- the default academic year and Kindergarten 1 to Grade 12
- 1 admin, 1 registrar, 1 accountant and 2 teachers
- 1 section (Grade 1 - Section A) with 2 subjects and 5 students
- payroll employees, payments, an invoice, expenses and calendar events

Usage:
    python scripts/seed.py

All test users have password: "password123"
"""

import asyncio
import sys
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.config import settings
from app.database import close_db, session_scope
from app.models import (
    Announcement,
    AttendanceRecord,
    AttendanceStatus,
    Employee,
    EventType,
    Expense,
    Invoice,
    Payment,
    Profile,
    SchoolClass,
    SchoolEvent,
    SchoolSettings,
    Section,
    StudentRecord,
    Teacher,
    UserRole,
    UserRoleAssignment,
)
from app.services.academic_year_service import get_academic_year_service
from app.services.class_service import build_class_code
from app.services.grade_level_service import get_grade_level_service
from app.services.student_service import calculate_age, compose_student_name
from app.utils.security import hash_password

TEST_PASSWORD = "password123"
SEED_ADMIN_EMAIL = "admin@schooldesk.test"

USERS = [
    (SEED_ADMIN_EMAIL, "Amina Rahman", UserRole.ADMIN, date(1980, 3, 14)),
    ("registrar@schooldesk.test", "Rosa Villanueva", UserRole.REGISTRAR, date(1988, 7, 2)),
    ("accounts@schooldesk.test", "Omar Haddad", UserRole.ACCOUNTING, date(1985, 11, 23)),
    ("maria.santos@schooldesk.test", "Maria Santos", UserRole.TEACHER, date(1990, 5, 9)),
    ("john.reyes@schooldesk.test", "John Reyes", UserRole.TEACHER, date(1987, 1, 30)),
]

STUDENTS = [
    ("Liam", "Cruz", "male", date(2019, 2, 11)),
    ("Sofia", "Garcia", "female", date(2019, 8, 25)),
    ("Noah", "Dela Rosa", "male", date(2018, 12, 3)),
    ("Aisha", "Khan", "female", date(2019, 4, 17)),
    ("Mateo", "Lim", "male", date(2019, 10, 6)),
]


async def seed_database():
    """Seed the database with test data."""
    print("\n" + "=" * 50)
    print("SchoolDesk - Seeding Development Data")
    print("=" * 50 + "\n")

    async with session_scope() as session:
        result = await session.execute(select(Profile).where(Profile.email == SEED_ADMIN_EMAIL))
        if result.scalar_one_or_none():
            print(f"Seed data already exists ({SEED_ADMIN_EMAIL} found). Aborting.")
            return False

        year_service = get_academic_year_service()
        scope = await year_service.resolve_scope(session, settings.default_academic_year)
        year = await year_service.ensure_year(session, scope)
        print(f"Academic year: {year.name}")

        print("Creating grade levels...")
        await get_grade_level_service().seed_default_grade_levels(session)
        grade_1 = await get_grade_level_service().get_grade_level_by_name(session, "Grade 1")

        print("Creating users...")
        profiles = {}
        for email, name, role, birth_date in USERS:
            profile = Profile(
                email=email,
                password_hash=hash_password(TEST_PASSWORD),
                full_name=name,
                role=role.value,
                birth_date=birth_date,
                is_active=True,
            )
            profile.roles.append(UserRoleAssignment(role=role.value))
            session.add(profile)
            profiles[email] = profile
        await session.flush()

        teachers = []
        for index, email in enumerate(["maria.santos@schooldesk.test", "john.reyes@schooldesk.test"], start=1):
            first, last = profiles[email].full_name.split(" ", 1)
            teacher = Teacher(
                employee_no=f"T-{index:03d}",
                first_name=first,
                last_name=last,
                email=email,
                department="Primary",
                position="Class Teacher",
                employment_type="full_time",
                profile_id=profiles[email].id,
            )
            session.add(teacher)
            teachers.append(teacher)
        await session.flush()

        print("Creating section: Grade 1 - Section A...")
        section = Section(
            name="Section A",
            grade_level_id=grade_1.id,
            school_year_id=year.id,
            adviser_id=teachers[0].id,
            room="Room 101",
            capacity=30,
        )
        session.add(section)
        await session.flush()

        for subject, teacher_email, color in (("English", "maria.santos@schooldesk.test", "#2563eb"),
                                              ("Mathematics", "john.reyes@schooldesk.test", "#16a34a")):
            session.add(SchoolClass(
                subject_name=subject,
                class_code=build_class_code(grade_1.name, subject),
                section_id=section.id,
                teacher_id=profiles[teacher_email].id,
                school_year_id=year.id,
                room=section.room,
                color=color,
            ))

        print("Creating students...")
        students = []
        for first, last, gender, birth_date in STUDENTS:
            student = StudentRecord(
                student_name=compose_student_name(first, None, last),
                first_name=first,
                last_name=last,
                gender=gender,
                birth_date=birth_date,
                age=calculate_age(birth_date),
                level=grade_1.name,
                school_year=year.name,
                grade_level_id=grade_1.id,
                section_id=section.id,
                status="active",
            )
            session.add(student)
            students.append(student)
        await session.flush()

        today = date.today()
        for offset in range(5):
            day = today - timedelta(days=offset)
            for index, student in enumerate(students):
                status = AttendanceStatus.ABSENT if (index + offset) % 7 == 0 else AttendanceStatus.PRESENT
                session.add(AttendanceRecord(
                    student_id=student.id,
                    section_id=section.id,
                    date=day,
                    status=status.value,
                    recorded_by=profiles["maria.santos@schooldesk.test"].id,
                ))

        print("Creating finance records...")
        for name, position, salary in (("Maria Santos", "Class Teacher", "9500.00"),
                                       ("John Reyes", "Class Teacher", "9000.00"),
                                       ("Omar Haddad", "Accountant", "8000.00")):
            session.add(Employee(
                name=name,
                full_name=name,
                position=position,
                salary=Decimal(salary),
                currency=settings.currency,
                status="active",
                is_active=True,
            ))

        session.add(Invoice(
            invoice_no=f"INV-{today.year}-001",
            student_name=students[0].student_name,
            student_id=students[0].id,
            amount=Decimal("4500.00"),
            paid_amount=Decimal("1500.00"),
            due_date=today + timedelta(days=30),
            status="partial",
            items=[{"description": "Tuition", "amount": 4500}],
        ))
        for index, (student, amount, status) in enumerate(
            [(students[0], "1500.00", "paid"), (students[1], "4500.00", "paid"), (students[2], "4500.00", "pending")],
            start=1,
        ):
            session.add(Payment(
                student_name=student.student_name,
                student_id=student.id,
                amount=Decimal(amount),
                type="Tuition",
                payment_method="bank_transfer",
                reference=f"PAY-{today.year}-{index:03d}",
                date=today - timedelta(days=index),
                status=status,
            ))

        session.add(Expense(
            description="Classroom supplies",
            category="Supplies",
            amount=Decimal("850.00"),
            date=today - timedelta(days=3),
            vendor="Office Mart",
            status="approved",
            approved_by=profiles[SEED_ADMIN_EMAIL].full_name,
        ))
        session.add(Expense(
            description="Air conditioning repair",
            category="Maintenance",
            amount=Decimal("1200.00"),
            date=today - timedelta(days=1),
            vendor="CoolAir Services",
            status="pending",
        ))

        print("Creating calendar and announcements...")
        session.add(SchoolEvent(
            title="Parent-Teacher Conference",
            start_date=today + timedelta(days=7),
            event_type=EventType.MEETING.value,
            location="Main Hall",
        ))
        session.add(SchoolEvent(
            title="Quarterly Exams",
            start_date=today + timedelta(days=14),
            end_date=today + timedelta(days=16),
            event_type=EventType.EXAM.value,
        ))
        session.add(Announcement(
            title="Welcome back!",
            content=f"Classes for {year.name} start next week.",
            priority="normal",
            is_published=True,
            published_at=datetime.now(timezone.utc),
            created_by=profiles[SEED_ADMIN_EMAIL].id,
        ))
        session.add(SchoolSettings(name=settings.app_name, principal="Amina Rahman"))

        await session.commit()

        print("\n" + "=" * 50)
        print("Seed Data Created Successfully!")
        print("=" * 50)
        print(f"\nUsers (all have password: {TEST_PASSWORD}):")
        for email, _, role, _ in USERS:
            print(f"  {role.value.title()}: {email}")
        print(f"\nSection: {grade_1.name} - {section.name}")
        print(f"  Students: {len(students)}")
        print("=" * 50 + "\n")
        return True


async def main():
    try:
        success = await seed_database()
        sys.exit(0 if success else 1)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
