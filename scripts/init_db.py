#!/usr/bin/env python3
"""
Standalone database initialization script
Creates the FreshTrack tables in the database named by DATABASE_URL
"""

import sys
import os
import logging

# Ensure we're using the right Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from app.config import settings
from app.exceptions import PersistenceError
from repositories import SqlAlchemyStore

logger = logging.getLogger("freshtrack.scripts.init_db")


def main(database_url: str = None) -> int:
    url = database_url or settings.database_url
    store = SqlAlchemyStore(url, echo=settings.db_echo)
    try:
        store.init()
    except PersistenceError as exc:
        logger.error(f"Schema creation failed for {url}: {exc}")
        return 1
    finally:
        store.close()
    logger.info(f"Schema ready at {url}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=settings.log_format)
    print("\n" + "=" * 60)
    print("FreshTrack Database Initialization (Standalone)")
    print("=" * 60)
    print("\nThis will create/update the users, sessions, locations")
    print("and food_items tables.")
    print("\n" + "=" * 60 + "\n")

    exit_code = main(sys.argv[1] if len(sys.argv) > 1 else None)

    print("\n" + "=" * 60)
    print("SUCCESS! Your database is ready to use." if exit_code == 0 else "FAILED! Check the errors above.")
    print("=" * 60 + "\n")

    sys.exit(exit_code)
