"""Command-line access to the database helpers.

Reads role settings from DATABASE_URL_ADMIN / DATABASE_URL_RW /
DATABASE_URL_RO (falling back to DATABASE_URL) and runs one operation:

  utildb count TABLE [--type RW]
  utildb dbname [--type ADMIN]
  utildb query "SELECT * FROM t WHERE id = %s" 5 [--single]
"""

import argparse
import json
import logging
import sys

import psycopg2

from .config import DatabaseConfig, DriverDebugLevel, HelperDebugLevel
from .errors import DatabaseError
from .helper import Database
from .log_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_DB_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="utildb", description="Run a single database helper operation")
    parser.add_argument("--driver-debug", choices=[lvl.name for lvl in DriverDebugLevel])
    parser.add_argument("--helper-debug", choices=[lvl.name for lvl in HelperDebugLevel])
    parser.add_argument("--log-level", default="WARNING")

    sub = parser.add_subparsers(dest="command", required=True)

    count = sub.add_parser("count", help="Count rows in a table")
    count.add_argument("table")
    count.add_argument("--type", default="RO", dest="connection_type")

    dbname = sub.add_parser("dbname", help="Show the database name for a connection type")
    dbname.add_argument("--type", default="RO", dest="connection_type")

    query = sub.add_parser("query", help="Run a parameterized statement")
    query.add_argument("sql")
    query.add_argument("values", nargs="*")
    query.add_argument("--type", default="RO", dest="connection_type")
    query.add_argument("--single", action="store_true", help="Print only the first row")

    return parser


def run(args, db: Database):
    """Execute the parsed command against ``db`` and return what to print."""
    if args.command == "dbname":
        return db.get_database_name(args.connection_type)
    if args.command == "count":
        return db.get_count(args.connection_type, args.table).result()
    if args.single:
        future = db.do_parameterized_query_single(args.connection_type, args.sql, args.values)
    else:
        future = db.do_parameterized_query(args.connection_type, args.sql, args.values)
    return future.result()


def main(argv=None):
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.WARNING)

    try:
        config = DatabaseConfig.from_env()
    except ValueError as e:
        setup_logging(level=level)
        logger.error("Configuration error: %s", e)
        sys.exit(EXIT_CONFIG_ERROR)

    db = Database(config, max_workers=1)
    if args.driver_debug:
        db.set_driver_debug_level(args.driver_debug)
    if args.helper_debug:
        db.set_helper_debug_level(args.helper_debug)
    setup_logging(
        level=level,
        helper_debug=db.helper_debug_level,
        driver_debug=db.driver_debug_level,
    )

    try:
        result = run(args, db)
    except (psycopg2.Error, DatabaseError) as e:
        logger.error("%s failed: %s", args.command, e)
        sys.exit(EXIT_DB_ERROR)
    finally:
        db.shutdown()

    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
