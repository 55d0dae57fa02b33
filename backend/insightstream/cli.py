"""
Command-line administration.

Usage:
    insightstream init-db
    insightstream create-admin --email admin@example.com --name Admin --password secret123
    insightstream refresh
    insightstream cleanup-sessions
"""

import argparse
import getpass
import sys
import logging

from pydantic import ValidationError

from insightstream.database import SessionLocal, init_db
from insightstream.models.schemas import UserCreate
from insightstream.models.user import ROLE_ADMIN
from insightstream.services.auth_service import AuthService
from insightstream.services.error_tracking import error_tracker
from insightstream.services.logging_service import configure_logging
from insightstream.services.refresh_service import run_daily_refresh

logger = logging.getLogger("insightstream.cli")


def cmd_init_db(args) -> int:
    init_db()
    logger.info("Database tables created")
    return 0


def cmd_create_admin(args) -> int:
    password = args.password or getpass.getpass("Password: ")
    try:
        user_data = UserCreate(email=args.email, name=args.name, role=ROLE_ADMIN, password=password)
    except ValidationError as e:
        logger.error(f"Invalid admin details: {e}")
        return 1

    init_db()
    db = SessionLocal()
    try:
        user, error = AuthService.create_user(db, user_data)
    finally:
        db.close()

    if error:
        logger.error(f"Could not create admin: {error}")
        return 1

    logger.info(f"Created admin {user.email} ({user.id})")
    return 0


def cmd_refresh(args) -> int:
    db = SessionLocal()
    try:
        summary = run_daily_refresh(db)
    finally:
        db.close()

    print(summary.model_dump_json(indent=2))
    return 0


def cmd_cleanup_sessions(args) -> int:
    db = SessionLocal()
    try:
        count = AuthService.cleanup_expired_sessions(db)
    finally:
        db.close()

    logger.info(f"Removed {count} expired session(s)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="insightstream", description="InsightStream administration")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.set_defaults(func=cmd_init_db)

    admin_parser = subparsers.add_parser("create-admin", help="Create an admin user")
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--name", required=True)
    admin_parser.add_argument("--password", help="Prompted for when omitted")
    admin_parser.set_defaults(func=cmd_create_admin)

    refresh_parser = subparsers.add_parser("refresh", help="Run the daily analytics refresh now")
    refresh_parser.set_defaults(func=cmd_refresh)

    cleanup_parser = subparsers.add_parser("cleanup-sessions", help="Delete expired login sessions")
    cleanup_parser.set_defaults(func=cmd_cleanup_sessions)

    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, fmt="text")
    error_tracker.init()

    try:
        sys.exit(args.func(args))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
