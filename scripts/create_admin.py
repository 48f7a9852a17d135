#!/usr/bin/env python3
"""
CLI script to create an admin user.

Usage (interactive):
    python scripts/create_admin.py

Usage (non-interactive, for deployments):
    python scripts/create_admin.py --email admin@example.com --password yourpassword --name "Jane Doe"
"""

import argparse
import asyncio
import sys
from getpass import getpass
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.database import close_db, session_scope
from app.models import Profile, UserRole, UserRoleAssignment
from app.utils.security import hash_password


def _prompt_email() -> str:
    while True:
        email = input("Enter email address: ").strip().lower()
        if "@" in email and "." in email:
            return email
        print("Please enter a valid email address.")


def _prompt_password() -> str | None:
    while True:
        password = getpass("Enter password (min 8 characters): ")
        if len(password) >= 8:
            break
        print("Password must be at least 8 characters.")

    if password != getpass("Confirm password: "):
        print("\nPasswords do not match. Aborting.")
        return None
    return password


async def create_admin(
    email: str | None = None,
    password: str | None = None,
    name: str | None = None,
    force: bool = False,
) -> bool:
    """Create an admin profile with an explicit admin role grant."""
    print("\n" + "=" * 50)
    print("SchoolDesk - Admin Setup")
    print("=" * 50 + "\n")

    email = (email or _prompt_email()).strip().lower()
    if "@" not in email or "." not in email:
        print("Invalid email address.")
        return False

    if not password:
        password = _prompt_password()
        if password is None:
            return False
    elif len(password) < 8:
        print("Password must be at least 8 characters.")
        return False

    name = (name or "").strip() or "Administrator"

    async with session_scope() as session:
        result = await session.execute(select(Profile).where(Profile.role == UserRole.ADMIN.value))
        existing = result.scalars().first()
        if existing and not force:
            print(f"\nAn admin already exists: {existing.email}")
            print("Use --force to create another admin.")
            return False

        result = await session.execute(select(Profile).where(Profile.email == email))
        if result.scalar_one_or_none():
            print(f"\nUser with email {email} already exists.")
            return False

        profile = Profile(
            email=email,
            password_hash=hash_password(password),
            full_name=name,
            role=UserRole.ADMIN.value,
            is_active=True,
        )
        profile.roles.append(UserRoleAssignment(role=UserRole.ADMIN.value))
        session.add(profile)
        await session.commit()
        await session.refresh(profile)

        print("\n" + "=" * 50)
        print("Admin Created Successfully!")
        print("=" * 50)
        print(f"  Email: {profile.email}")
        print(f"  Name: {profile.full_name}")
        print(f"  ID: {profile.id}")
        print("=" * 50 + "\n")

        return True


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Create a SchoolDesk admin user")
    parser.add_argument("--email", "-e", help="Admin email address")
    parser.add_argument("--password", "-p", help="Admin password (min 8 chars)")
    parser.add_argument("--name", "-n", help="Full name", default="Administrator")
    parser.add_argument("--force", action="store_true", help="Create even if an admin exists")

    args = parser.parse_args()

    try:
        success = await create_admin(
            email=args.email,
            password=args.password,
            name=args.name,
            force=args.force,
        )
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\nAborted by user.")
        sys.exit(1)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
