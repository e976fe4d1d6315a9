#!/usr/bin/env python3
"""
MedStock Database Initialization Script
Creates database tables and, optionally, the first user
"""
import argparse
import logging
import sys

from medstock.core.config import settings
from medstock.core.database import SessionLocal, check_db_connection, init_db
from medstock.core.exceptions import ValidationError
from medstock.services.auth_service import AuthService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create MedStock tables")
    parser.add_argument("--username", help="create an initial user with this name")
    parser.add_argument("--password", help="password for the initial user")
    args = parser.parse_args(argv)

    if not check_db_connection():
        logger.error(f"Cannot connect to {settings.DATABASE_URL}")
        return 1

    init_db()

    if args.username:
        if not args.password:
            parser.error("--password is required with --username")
        db = SessionLocal()
        try:
            AuthService(db).create_user(args.username, args.password)
            logger.info(f"Created user {args.username}")
        except ValidationError as e:
            logger.warning(e.message)
        finally:
            db.close()

    logger.info("Database initialization complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
