#!/usr/bin/env python3
"""
Create the database schema and the system app.

Creates every table if missing, then makes sure exactly one app is flagged
as the system app (the app used to send our own email). Optionally
provisions a first site admin.

Usage:
    python scripts/init_database.py
    python scripts/init_database.py --site-admin ops@example.com --name "Ops"
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from deliverywatch.database import Database
from deliverywatch.utils import Config, setup_logger


def main():
    """Initialize the database."""
    parser = argparse.ArgumentParser(
        description='Create tables and the system app'
    )
    parser.add_argument(
        '--db-path',
        type=str,
        default=None,
        help='Path to database file (default: DATABASE_PATH)'
    )
    parser.add_argument(
        '--site-admin',
        type=str,
        default=None,
        help='Email of a site admin to provision'
    )
    parser.add_argument(
        '--name',
        type=str,
        default='Site Admin',
        help='Display name of the provisioned site admin'
    )
    args = parser.parse_args()

    config = Config.load()
    config.validate()
    logger = setup_logger('init_database', level=config.LOG_LEVEL, log_dir=config.LOG_DIR)

    db = Database.from_config(config, args.db_path)
    db.create_tables()

    system_app_id = db.ensure_system_app(config.SYSTEM_APP_NAME)
    logger.info(f"System app id: {system_app_id}")

    if args.site_admin:
        admin_id = db.provision_site_admin(args.site_admin, name=args.name)
        logger.info(f"Sign in as admin id {admin_id}")

    logger.info(f"Database ready: {db.get_stats()}")


if __name__ == '__main__':
    main()
