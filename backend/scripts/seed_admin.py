#!/usr/bin/env python
"""Seed script to create the initial staff/admin account.

Data subject requests are routed to the oldest admin account, so at least
one must exist before members can submit correction or deletion requests.
Run once during initial setup.

Usage:
    python backend/scripts/seed_admin.py

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    PASSWORD_PEPPER: Password hashing pepper (required)
    ADMIN_EMAIL: Email for admin account (default: admin@example.com)
    ADMIN_PASSWORD: Password for admin account (default: AdminP@ss123)
    ADMIN_FIRST_NAME: First name (default: Portal)
    ADMIN_LAST_NAME: Last name (default: Administrator)
"""

import os
import sys
from pathlib import Path

# Add backend/ to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from memberportal.auth.password import hash_password, validate_password_strength
from memberportal.database import SessionLocal
from memberportal.models.member import ACTIVE_STATUS, Member


def main():
    """Create initial admin account."""
    admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    admin_password = os.getenv("ADMIN_PASSWORD", "AdminP@ss123")
    first_name = os.getenv("ADMIN_FIRST_NAME", "Portal")
    last_name = os.getenv("ADMIN_LAST_NAME", "Administrator")

    # Validate password strength
    is_valid, error_msg = validate_password_strength(admin_password)
    if not is_valid:
        print(f"ERROR: Password does not meet strength requirements: {error_msg}")
        sys.exit(1)

    session = SessionLocal()

    try:
        existing = session.query(Member).filter(
            Member.email == admin_email.lower()
        ).first()

        if existing:
            print(f"ERROR: Member with email {admin_email} already exists")
            sys.exit(1)

        admin = Member(
            email=admin_email,
            first_name=first_name,
            last_name=last_name,
            password_hash=hash_password(admin_password),
            membership_status=ACTIVE_STATUS,
            is_admin=True,
            marketing_opt_in=False,
        )

        session.add(admin)
        session.commit()

        print("SUCCESS: Admin account created")
        print(f"  ID:    {admin.id}")
        print(f"  Email: {admin.email}")
        print(f"  Name:  {admin.full_name}")

    except Exception as e:
        session.rollback()
        print(f"ERROR: Failed to create admin account: {e}")
        sys.exit(1)

    finally:
        session.close()


if __name__ == "__main__":
    main()
