#!/usr/bin/env python3
"""
Check whether an address is on the deny list.

Usage:
    python scripts/check_blocked_address.py --admin-id 1 bounce@example.com
    python scripts/check_blocked_address.py --admin-id 1 --app-id 3 bounce@example.com
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from deliverywatch.access import load_actor
from deliverywatch.api import QueryRoot
from deliverywatch.database import Database
from deliverywatch.utils import Config, setup_logger


def main():
    """Look up an address on the deny list."""
    parser = argparse.ArgumentParser(
        description='Check whether further email to an address is held back'
    )
    parser.add_argument('address', type=str, help='Email address to check')
    parser.add_argument('--admin-id', type=int, required=True, help='Admin to query as')
    parser.add_argument(
        '--app-id',
        type=int,
        default=None,
        help="Check this app's deny list instead of the global one"
    )
    parser.add_argument('--db-path', type=str, default=None, help='Path to database file')
    args = parser.parse_args()

    config = Config.load()
    logger = setup_logger('check_blocked_address', level=config.LOG_LEVEL, log_dir=config.LOG_DIR)

    db = Database.from_config(config, args.db_path)

    with db.get_session() as session:
        root = QueryRoot(session, load_actor(session, args.admin_id), config)
        response = root.resolve('blocked_address', address=args.address, app_id=args.app_id)

        if not response.ok:
            logger.error(f"{response.error['type']}: {response.error['message']}")
            sys.exit(1)

        entry = response.data
        scope = f"app {args.app_id}" if args.app_id else "global list"
        if entry is None:
            print(f"{args.address} is not blocked ({scope})")
        else:
            print(
                f"{args.address} is blocked ({scope}) since "
                f"{entry.created_at:%Y-%m-%d %H:%M:%S} after {entry.bounce_count} bounce(s)"
            )


if __name__ == '__main__':
    main()
