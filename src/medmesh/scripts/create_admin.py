# src/medmesh/scripts/create_admin.py
"""Create or promote a moderator account and print a bearer token for it.

Typical usage:
  python -m medmesh.scripts.create_admin --email reviewer@example.org --name "Dr. Reviewer"
"""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.orm import Session

from medmesh.core.security import create_access_token
from medmesh.db.session import SessionLocal, create_tables, transaction
from medmesh.models import User, UserRole


def ensure_admin(db: Session, email: str, display_name: str | None = None) -> User:
    """Return the account for ``email`` with the ADMIN role, creating it if needed."""
    user = db.query(User).filter(User.email == email).first()
    with transaction(db):
        if user is None:
            user = User(email=email, display_name=display_name, role=UserRole.ADMIN)
            db.add(user)
        else:
            user.role = UserRole.ADMIN
            if display_name:
                user.display_name = display_name
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote a MedMesh moderator")
    parser.add_argument("--email", required=True, help="Account email address")
    parser.add_argument("--name", default=None, help="Display name for a new account")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (development databases only).",
    )
    args = parser.parse_args(argv)

    if args.create_tables:
        create_tables()

    db = SessionLocal()
    try:
        user = ensure_admin(db, args.email.strip().lower(), args.name)
        print(f"[create_admin] {user.email} is an admin (id={user.id})")
        print(create_access_token(user.id))
    except Exception as exc:
        print(f"[create_admin] ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
