"""
Arguments and helpers shared by the command-line tools.
"""

import argparse
import json
import sys
from typing import Any

from invoice_pipeline.config import PipelineSettings
from invoice_pipeline.warehouse.connection import DatabaseConnectionPool


def add_database_arguments(parser: argparse.ArgumentParser, settings: PipelineSettings) -> None:
    """
    Add PostgreSQL connection arguments, defaulting to the environment.

    Args:
        parser: Parser to extend
        settings: Settings loaded from the environment
    """
    db = settings.database
    parser.add_argument(
        "--db-host",
        default=db.host,
        help=f"Database host (default: {db.host})"
    )
    parser.add_argument(
        "--db-port",
        type=int,
        default=db.port,
        help=f"Database port (default: {db.port})"
    )
    parser.add_argument(
        "--db-name",
        default=db.database,
        help=f"Database name (default: {db.database})"
    )
    parser.add_argument(
        "--db-user",
        default=db.user,
        help=f"Database user (default: {db.user})"
    )
    parser.add_argument(
        "--db-password",
        default=db.password,
        help="Database password (default: $DB_PASSWORD)"
    )


def create_pool(args: argparse.Namespace, settings: PipelineSettings) -> DatabaseConnectionPool:
    """Build a connection pool from parsed arguments; pool sizing comes from settings."""
    database = settings.database.model_copy(update={
        "host": args.db_host,
        "port": args.db_port,
        "database": args.db_name,
        "user": args.db_user,
        "password": args.db_password,
    })
    return DatabaseConnectionPool.from_settings(database)


def print_json(payload: Any) -> None:
    json.dump(payload, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")
