#!/usr/bin/env python3
"""
List deliveries visible to an admin.

Runs the same scoped, filtered and paginated query as the typed query
API, on behalf of the given admin.

Usage:
    python scripts/list_deliveries.py --admin-id 1
    python scripts/list_deliveries.py --admin-id 1 --status bounced --app-id 3
    python scripts/list_deliveries.py --admin-id 1 --to someone@example.com --limit 50
"""

import sys
import argparse
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from deliverywatch.access import load_actor
from deliverywatch.api import QueryRoot
from deliverywatch.database import Database
from deliverywatch.utils import Config, setup_logger


def format_log_line(line) -> str:
    """One indented row per postfix log line, flagging permanent failures."""
    marker = "  HARD BOUNCE" if line.is_hard_bounce else ""
    return f"          {line.time:%H:%M:%S}  dsn={line.dsn or '-':<6} {line.extended_status or ''}{marker}"


def main():
    """List deliveries."""
    parser = argparse.ArgumentParser(
        description='List deliveries visible to an admin, newest first'
    )
    parser.add_argument('--admin-id', type=int, required=True, help='Admin to query as')
    parser.add_argument('--app-id', type=int, default=None, help='Filter by app')
    parser.add_argument('--status', type=str, default=None, help='Filter by delivery status')
    parser.add_argument(
        '--since',
        type=datetime.fromisoformat,
        default=None,
        help='Only deliveries created after this ISO timestamp'
    )
    parser.add_argument('--from', dest='from_address', type=str, default=None, help='Filter by sender address')
    parser.add_argument('--to', dest='to_address', type=str, default=None, help='Filter by recipient address')
    parser.add_argument('--meta-key', type=str, default=None, help='Filter by metadata key')
    parser.add_argument('--meta-value', type=str, default=None, help='Filter by metadata value')
    parser.add_argument('--limit', type=int, default=None, help='Maximum rows (default: 10)')
    parser.add_argument('--offset', type=int, default=0, help='Rows to skip (default: 0)')
    parser.add_argument(
        '--log-lines',
        action='store_true',
        help='Show postfix log lines under each delivery'
    )
    parser.add_argument('--db-path', type=str, default=None, help='Path to database file')
    args = parser.parse_args()

    config = Config.load()
    logger = setup_logger('list_deliveries', level=config.LOG_LEVEL, log_dir=config.LOG_DIR)

    db = Database.from_config(config, args.db_path)

    with db.get_session() as session:
        root = QueryRoot(session, load_actor(session, args.admin_id), config)
        response = root.resolve(
            'emails',
            app_id=args.app_id,
            status=args.status,
            since=args.since,
            from_address=args.from_address,
            to_address=args.to_address,
            meta_key=args.meta_key,
            meta_value=args.meta_value,
            limit=args.limit,
            offset=args.offset,
        )

        if not response.ok:
            logger.error(f"{response.error['type']}: {response.error['message']}")
            sys.exit(1)

        page = response.data
        print(f"Showing {len(page.items)} of {page.total} deliveries (offset {page.offset})")
        for delivery in page.items:
            print(
                f"{delivery.id:>8}  {delivery.created_at:%Y-%m-%d %H:%M:%S}  "
                f"{delivery.status:<10} app={delivery.app_id:<5} {delivery.address.text}"
            )
            if args.log_lines:
                for line in delivery.postfix_log_lines:
                    print(format_log_line(line))


if __name__ == '__main__':
    main()
