#!/usr/bin/env python3
"""Bootstrap access control from the command line.

Promote an account to admin, or give a regular account read access to
tagged notebooks:

    python scripts/promote_admin.py alice@firm.example
    python scripts/promote_admin.py bob@firm.example --grant ClientA --grant Litigation --days 30
    python scripts/promote_admin.py --list
"""
import argparse
import logging
import os
import sys
from datetime import timedelta
from typing import Iterable, List, Optional

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import func  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from legal_insights.database import get_session_local  # noqa: E402
from legal_insights.models.permission import UserPermission  # noqa: E402
from legal_insights.models.tag import Tag  # noqa: E402
from legal_insights.models.user import User, UserRole  # noqa: E402
from legal_insights.services.access import utcnow  # noqa: E402
from legal_insights.services.errors import NotFound, ServiceError, ValidationFailed  # noqa: E402
from legal_insights.services.permission_service import PermissionService  # noqa: E402

logger = logging.getLogger(__name__)


def find_user(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None:
        raise NotFound(f"No account registered for {email}")
    return user


def find_tags(db: Session, names: Iterable[str]) -> List[Tag]:
    tags = []
    for name in names:
        tag = db.query(Tag).filter(func.lower(Tag.name) == name.strip().lower()).first()
        if tag is None:
            raise NotFound(f"Tag '{name}' not found")
        tags.append(tag)
    return tags


def promote(db: Session, email: str) -> User:
    user = find_user(db, email)
    if user.role == UserRole.ADMIN:
        logger.info(f"{user.email} is already an admin")
        return user
    user.role = UserRole.ADMIN
    db.commit()
    logger.info(f"Promoted {user.email} to admin")
    return user


def grant_tags(
    db: Session,
    email: str,
    tag_names: Iterable[str],
    days: Optional[int] = None,
) -> List[UserPermission]:
    """Grant read access by tag. Every tag is resolved before any grant is written."""
    user = find_user(db, email)
    if user.is_admin:
        raise ValidationFailed(f"{user.email} is an admin and already sees every notebook")
    tags = find_tags(db, tag_names)
    expires_at = utcnow() + timedelta(days=days) if days is not None else None

    service = PermissionService(db)
    return [service.grant(user.id, tag.id, granted_by=None, expires_at=expires_at) for tag in tags]


def describe_access(db: Session) -> List[str]:
    now = utcnow()
    lines = []
    for user in db.query(User).order_by(User.email).all():
        if user.is_admin:
            access = "all notebooks"
        else:
            names = sorted(p.tag.name for p in user.permissions if PermissionService.is_active(p, now))
            access = ", ".join(names) or "own and public notebooks"
        state = "" if user.is_active else " (inactive)"
        lines.append(f"{user.email} [{user.role.value}]{state}: {access}")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Promote admins or grant tag access.")
    parser.add_argument("email", nargs="?", help="Account to change.")
    parser.add_argument(
        "--grant",
        action="append",
        default=[],
        metavar="TAG",
        help="Grant read access to notebooks with this tag instead of promoting.",
    )
    parser.add_argument("--days", type=int, default=None, help="Expire granted access after N days.")
    parser.add_argument("--list", action="store_true", help="Show what each account can read.")
    args = parser.parse_args(argv)

    if not args.email and not args.list:
        parser.error("an email or --list is required")
    if args.days is not None and not args.grant:
        parser.error("--days only applies together with --grant")

    db = get_session_local()()
    try:
        if args.email and args.grant:
            grant_tags(db, args.email, args.grant, args.days)
        elif args.email:
            promote(db, args.email)
        if args.list:
            for line in describe_access(db):
                print(line)
    except ServiceError as e:
        logger.error(str(e))
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    sys.exit(main())
