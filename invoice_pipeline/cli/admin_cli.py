"""
Admin CLI for the invoice store and analytics.

Usage:
    invoice-admin init-db
    invoice-admin clear
    invoice-admin amounts-by-status [filters]
    invoice-admin overdue-trend [filters]
    invoice-admin monthly-totals [filters]
    invoice-admin weekly-metrics [--supplier-id <id> ...] [--status-id <id>]
    invoice-admin supplier-analysis [filters]
    invoice-admin suppliers
    invoice-admin invoice-statuses

Filters:
    --supplier-id <id> (repeatable) --start-date YYYY-MM-DD --end-date YYYY-MM-DD --status-id <id>
"""

import argparse
import sys
from datetime import date

import psycopg
from pydantic import ValidationError as PydanticValidationError

from invoice_pipeline.analytics import AnalyticsEngine
from invoice_pipeline.config import PipelineSettings
from invoice_pipeline.core.errors import PipelineError
from invoice_pipeline.core.models import InvoiceFilters
from invoice_pipeline.observability.logger import configure_logging, get_logger
from invoice_pipeline.warehouse.connection import DatabaseConnectionPool
from invoice_pipeline.warehouse.schema_mgmt import SchemaManager
from invoice_pipeline.warehouse.store import InvoiceStore

from .common import add_database_arguments, create_pool, print_json

logger = get_logger(__name__)

ANALYTICS_COMMANDS = {
    "amounts-by-status": "get_amounts_by_status",
    "overdue-trend": "get_overdue_trend",
    "monthly-totals": "get_monthly_totals",
    "weekly-metrics": "get_weekly_metrics",
    "supplier-analysis": "get_amounts_by_supplier",
}


def build_filters(args) -> InvoiceFilters:
    """
    Build InvoiceFilters from command line arguments.

    Raises:
        ValueError: If only one of --start-date/--end-date is given
    """
    try:
        return InvoiceFilters(
            supplier_ids=args.supplier_ids or None,
            start_date=getattr(args, "start_date", None),
            end_date=getattr(args, "end_date", None),
            status_id=args.status_id,
        )
    except PydanticValidationError as e:
        raise ValueError("; ".join(err["msg"] for err in e.errors())) from e


def init_db_command(args, pool: DatabaseConnectionPool):
    """Create tables and seed currencies and invoice statuses."""
    inserted = SchemaManager(pool).initialize()
    print_json({"initialized": True, "seeded": inserted})


def clear_command(args, pool: DatabaseConnectionPool):
    """Delete every invoice and supplier."""
    if not args.yes:
        print("Refusing to clear the invoice store without --yes", file=sys.stderr)
        sys.exit(1)
    print_json({"deleted": InvoiceStore(pool).clear_all()})


def analytics_command(args, pool: DatabaseConnectionPool):
    """Run one analytics query and print it as JSON."""
    engine = AnalyticsEngine(pool)
    method = getattr(engine, ANALYTICS_COMMANDS[args.command])
    result = method(build_filters(args))

    if isinstance(result, list):
        print_json([item.model_dump() for item in result])
    else:
        print_json(result.model_dump())


def suppliers_command(args, pool: DatabaseConnectionPool):
    """List stored suppliers."""
    suppliers = InvoiceStore(pool).list_suppliers()
    print_json([supplier.model_dump(mode="json") for supplier in suppliers])


def invoice_statuses_command(args, pool: DatabaseConnectionPool):
    """List invoice statuses."""
    statuses = InvoiceStore(pool).load_invoice_statuses()
    print_json([status.model_dump() for status in statuses])


def add_filter_arguments(parser: argparse.ArgumentParser, with_dates: bool = True) -> None:
    parser.add_argument(
        "--supplier-id",
        dest="supplier_ids",
        action="append",
        help="Restrict to this supplier internal id (repeatable)"
    )
    if with_dates:
        parser.add_argument(
            "--start-date",
            type=date.fromisoformat,
            help="Inclusive start of the invoice date range (YYYY-MM-DD)"
        )
        parser.add_argument(
            "--end-date",
            type=date.fromisoformat,
            help="Inclusive end of the invoice date range (YYYY-MM-DD)"
        )
    parser.add_argument(
        "--status-id",
        type=int,
        help="Restrict to this invoice status id"
    )


COMMAND_HANDLERS = {
    "init-db": init_db_command,
    "clear": clear_command,
    "suppliers": suppliers_command,
    "invoice-statuses": invoice_statuses_command,
    **{name: analytics_command for name in ANALYTICS_COMMANDS},
}


def build_parser(settings: PipelineSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Invoice store administration and analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create tables and seed reference data
  invoice-admin init-db

  # Amounts by status for two suppliers during March 2024
  invoice-admin amounts-by-status --supplier-id S1 --supplier-id S2 \\
      --start-date 2024-03-01 --end-date 2024-03-31

  # Week-over-week metrics
  invoice-admin weekly-metrics
        """
    )
    add_database_arguments(parser, settings)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create tables and seed reference data")

    clear_parser = subparsers.add_parser("clear", help="Delete all invoices and suppliers")
    clear_parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm deletion"
    )

    add_filter_arguments(
        subparsers.add_parser("amounts-by-status", help="Total invoice cost per status")
    )
    add_filter_arguments(
        subparsers.add_parser("overdue-trend", help="Overdue invoices per due date")
    )
    add_filter_arguments(
        subparsers.add_parser("monthly-totals", help="Total invoice cost per month")
    )
    add_filter_arguments(
        subparsers.add_parser("weekly-metrics", help="This week against last week"),
        with_dates=False,
    )
    add_filter_arguments(
        subparsers.add_parser("supplier-analysis", help="Total invoice cost per supplier")
    )

    subparsers.add_parser("suppliers", help="List suppliers")
    subparsers.add_parser("invoice-statuses", help="List invoice statuses")

    return parser


def main():
    """Main entry point for admin CLI."""
    settings = PipelineSettings.from_env()
    configure_logging(settings.log_level, settings.log_format)
    parser = build_parser(settings)
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    pool = create_pool(args, settings)

    try:
        pool.open()
        COMMAND_HANDLERS[args.command](args, pool)

    except (PipelineError, psycopg.Error, ValueError) as e:
        logger.error(f"Command {args.command} failed: {e}", exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)

    finally:
        pool.close()


if __name__ == "__main__":
    main()
