"""
Command-line interface for invoice file ingestion.

Usage:
    invoice-ingest process --input <file_path> [options]
"""

import argparse
import mimetypes
import sys
from pathlib import Path

from invoice_pipeline.batch import IngestionPipeline, validate_csv_media_type
from invoice_pipeline.config import PipelineSettings
from invoice_pipeline.core.errors import PipelineError
from invoice_pipeline.core.validation import RowValidator
from invoice_pipeline.observability.logger import configure_logging, get_logger
from invoice_pipeline.observability.metrics import start_metrics_server
from invoice_pipeline.warehouse.store import InvoiceStore

from .common import add_database_arguments, create_pool, print_json

logger = get_logger(__name__)


def process_command(args, settings: PipelineSettings):
    """
    Execute ingestion of one CSV file.

    Args:
        args: Command-line arguments
        settings: Settings loaded from the environment
    """
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input file not found: {args.input}")
        sys.exit(1)

    if args.metrics_port:
        start_metrics_server(args.metrics_port)

    pool = create_pool(args, settings)

    try:
        validate_csv_media_type(mimetypes.guess_type(input_path.name)[0])

        pool.open()
        pipeline = IngestionPipeline(
            store=InvoiceStore(pool),
            validator=RowValidator(args.validation_rules),
            uploads_dir=settings.uploads_dir,
            chunk_size=args.chunk_size,
        )

        result = pipeline.ingest_file(input_path, reset=args.reset)
        print_json(result.model_dump(mode="json"))

    except PipelineError as e:
        logger.error(f"Ingestion failed: {e}", extra={"error_kind": e.kind})
        print_json({"error": e.kind, "message": e.message})
        sys.exit(1)
    finally:
        pool.close()


def main():
    """Main CLI entry point."""
    settings = PipelineSettings.from_env()
    configure_logging(settings.log_level, settings.log_format)

    parser = argparse.ArgumentParser(
        description="Invoice and supplier CSV ingestion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ingest a CSV file
  invoice-ingest process --input data/invoices.csv

  # Replace everything currently stored with the file contents
  invoice-ingest process --input data/invoices.csv --reset

  # Use custom validation rules and smaller insert batches
  invoice-ingest process --input data/invoices.csv \\
      --validation-rules config/validation_rules.yaml --chunk-size 50
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser("process", help="Ingest a CSV file")
    process_parser.add_argument(
        "--input",
        required=True,
        help="Path to input CSV file"
    )
    process_parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete all invoices and suppliers before ingesting"
    )
    process_parser.add_argument(
        "--chunk-size",
        type=int,
        default=settings.chunk_size,
        help=f"Invoices per insert batch (default: {settings.chunk_size})"
    )
    process_parser.add_argument(
        "--validation-rules",
        default=settings.validation_rules_path,
        help="Path to validation rules YAML file (optional)"
    )
    process_parser.add_argument(
        "--metrics-port",
        type=int,
        default=settings.metrics_port,
        help="Expose Prometheus metrics on this port (optional)"
    )
    add_database_arguments(process_parser, settings)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "process":
        process_command(args, settings)


if __name__ == "__main__":
    main()
