#!/usr/bin/env python
"""Seed script to create the first system administrator.

System administrators can list every organisation and user account. Run once
during initial setup, after the migrations. An existing account with the same
email is promoted instead of duplicated.

Usage:
    python backend/scripts/seed_admin.py

Environment Variables:
    DATABASE_URL: Database connection string (read through crewbook settings)
    PASSWORD_PEPPER: Password hashing pepper (required)
    ADMIN_EMAIL: Email for the admin (default: admin@example.com)
    ADMIN_PASSWORD: Password for the admin (required)
    ADMIN_NAME: Display name (default: System Administrator)
"""

import os
import sys

from crewbook.auth.password import hash_password
from crewbook.auth.password_policy import PasswordValidationError, check_password_strength
from crewbook.auth.roles import SystemRole
from crewbook.database import get_db_session
from crewbook.users.repository import UserRepository


def main():
    """Create or promote the system administrator."""
    admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower()
    admin_name = os.getenv("ADMIN_NAME", "System Administrator")
    admin_password = os.getenv("ADMIN_PASSWORD")

    if not admin_password:
        print("ERROR: ADMIN_PASSWORD environment variable is required")
        sys.exit(1)

    try:
        check_password_strength(admin_password, user_context=[admin_email.split("@")[0], admin_name])
    except PasswordValidationError as e:
        print(f"ERROR: {e.message}")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)

    with get_db_session() as session:
        users = UserRepository(session)
        user = users.get_by_email(admin_email)

        if user:
            user.role = SystemRole.ADMIN.value
            print("SUCCESS: Existing user promoted to system admin")
        else:
            user = users.create(
                name=admin_name,
                email=admin_email,
                password_hash=hash_password(admin_password),
                role=SystemRole.ADMIN.value,
            )
            print("SUCCESS: System admin created")

        print(f"  ID:    {user.id}")
        print(f"  Email: {user.email}")
        print(f"  Name:  {user.name}")
        print(f"  Role:  {user.role}")


if __name__ == "__main__":
    main()
