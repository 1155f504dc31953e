"""
Structured JSON logging for invoice-pipeline

Every module logger is a child of the ``invoice_pipeline`` logger, which owns
the single stdout handler. Records are emitted as JSON by default using
python-json-logger, or as plain text for local development.
"""
import logging
import os
import sys
import time

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = "invoice_pipeline"
SERVICE_NAME = "invoice-pipeline"

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(message)s"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter adding service, source location and error kind fields

    When a record carries an exception with a ``kind`` attribute (every
    PipelineError does), the kind is written as ``error_kind``.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = SERVICE_NAME
        log_record["location"] = f"{record.module}:{record.funcName}:{record.lineno}"

        if record.exc_info and "error_kind" not in log_record:
            error = record.exc_info[1]
            kind = getattr(error, "kind", None)
            if kind:
                log_record["error_kind"] = kind


def configure_logging(level: str | None = None, format_type: str | None = None) -> logging.Logger:
    """
    Configure the package logger; safe to call more than once

    Args:
        level: Log level name (defaults to env var LOG_LEVEL, then INFO)
        format_type: "json" or "text" (defaults to env var LOG_FORMAT, then json)

    Returns:
        The package logger
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    format_type = format_type or os.getenv("LOG_FORMAT", "json")
    log_level = LOG_LEVELS.get(level_name, logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if format_type == "json":
        handler.setFormatter(CustomJsonFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    else:
        handler.setFormatter(logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Get a logger under the package logger

    Configures the package logger from the environment on first use.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Logger instance
    """
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        configure_logging()

    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


class log_operation:
    """
    Context manager logging the start, end and duration of an operation

    Usage:
        with log_operation("Ingest invoice file", logger=logger, source="march.csv"):
            ...

    Failures are logged with the exception's ``kind`` when it has one and
    are never suppressed.
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = extra_fields
        self.start_time = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(
            f"Starting: {self.operation_name}",
            extra={"operation": self.operation_name, **self.extra_fields}
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = round(time.perf_counter() - self.start_time, 3)

        if exc_type is None:
            self.logger.info(
                f"Completed: {self.operation_name}",
                extra={
                    "operation": self.operation_name,
                    "duration_seconds": duration,
                    "status": "success",
                    **self.extra_fields
                }
            )
        else:
            self.logger.error(
                f"Failed: {self.operation_name}: {exc_val}",
                extra={
                    "operation": self.operation_name,
                    "duration_seconds": duration,
                    "status": "error",
                    "error_kind": getattr(exc_val, "kind", exc_type.__name__),
                    **self.extra_fields
                },
                exc_info=(exc_type, exc_val, exc_tb)
            )
        return False
