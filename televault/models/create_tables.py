"""
Database table creation script.

Run this script to create all database tables for the Telegram bot.
"""

import os
import sys
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

from televault.core.logger import setup_logger
from televault.core.models import db, init_database
from televault.models import MODELS

# Load environment variables
load_dotenv()

log = setup_logger(level=logging.INFO)


def main():
    """Main execution function."""
    database_url = os.getenv("DATABASE_URL")

    if not database_url:
        log.error(
            "DATABASE_URL environment variable not set. "
            "Example: DATABASE_URL=sqlite:///televault.db"
        )
        sys.exit(1)

    try:
        log.info("=== Creating Tables ===")
        init_database(database_url)

        for model in MODELS:
            table = model._meta.table_name
            if db.table_exists(table):
                log.info(f"✓ Table '{table}' verified")
            else:
                log.error(f"✗ Table '{table}' verification failed")
                sys.exit(1)

        log.info("Database setup completed successfully!")

    except Exception as e:
        log.error(f"✗ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
