#!/usr/bin/env python3
"""
Create a user (e.g. the first admin). Run from project root:
  python scripts/create_user.py EMAIL PASSWORD [--name NAME] [--role user|admin]
Example:
  python scripts/create_user.py admin@example.com your-secure-password --role admin
"""

import argparse
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wemanage.config import get_settings
from wemanage.database import SessionLocal
from wemanage.models.enums import UserRole
from wemanage.models.user import User
from wemanage.services.auth import default_avatar_url
from wemanage.services.passwords import get_password_hash


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a WeManage user from the command line.")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("--name", default=None, help="Display name (defaults to the email local part)")
    parser.add_argument("--role", default="user", choices=["user", "admin"])
    args = parser.parse_args()

    email = args.email.strip()
    if "@" not in email or len(email) > 255:
        print("Invalid email address.", file=sys.stderr)
        return 1
    min_length = get_settings().password_min_length
    if len(args.password) < min_length or len(args.password) > 128:
        print(f"Password must be {min_length}-128 characters.", file=sys.stderr)
        return 1

    role = UserRole(args.role.upper())
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            email=email,
            name=args.name or email.split("@")[0],
            password_hash=get_password_hash(args.password),
            role=role,
            avatar_url=default_avatar_url(email),
        )
        db.add(user)
        db.commit()
        print(f"Created user '{email}' with role '{role.value}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
