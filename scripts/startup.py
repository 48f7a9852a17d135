#!/usr/bin/env python3
"""
Startup script for container deployments.
Runs migrations, creates the first admin if configured, then starts uvicorn.
"""

import os
import subprocess


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and return success status."""
    print(f"\n=== {description} ===")
    try:
        subprocess.run(cmd, check=True)
        return True
    except subprocess.CalledProcessError as e:
        print(f"Warning: {description} failed with code {e.returncode}")
        return False


def main():
    print("\n" + "=" * 50)
    print("SchoolDesk Startup Script")
    print("=" * 50)

    run_command(["alembic", "upgrade", "head"], "Running database migrations")

    email = os.environ.get("ADMIN_EMAIL", "").strip()
    password = os.environ.get("ADMIN_PASSWORD", "").strip()

    if email and password:
        name = os.environ.get("ADMIN_NAME", "Administrator").strip()
        # Non-zero when an admin already exists
        if not run_command(
            ["python", "scripts/create_admin.py", "--email", email, "--password", password, "--name", name],
            "Creating admin",
        ):
            print("Note: admin creation skipped (may already exist)")
    else:
        print("\nSkipping admin creation (ADMIN_EMAIL/ADMIN_PASSWORD not set)")

    port = os.environ.get("PORT", "8000")
    print(f"\n=== Starting uvicorn on port {port} ===\n")

    os.execvp("uvicorn", [
        "uvicorn",
        "app.main:app",
        "--host", "0.0.0.0",
        "--port", port,
    ])


if __name__ == "__main__":
    main()
