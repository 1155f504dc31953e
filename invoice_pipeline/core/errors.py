"""
Error taxonomy for the ingestion pipeline and analytics engine.

Every error carries a ``kind`` tag so callers can branch on the cause
instead of matching on messages.
"""

from typing import Any


class PipelineError(Exception):
    """Base class for all pipeline errors."""

    kind = "pipeline_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationFailed(PipelineError):
    """Raised when a row fails schema, type or enumeration checks."""

    kind = "validation_failed"

    def __init__(
        self,
        row_kind: str,
        record_id: str | None,
        errors: dict[str, str],
    ):
        self.row_kind = row_kind
        self.record_id = record_id
        self.errors = errors
        details = "; ".join(f"{field}: {msg}" for field, msg in errors.items())
        super().__init__(
            f"{row_kind} row {record_id or '<unknown>'} failed validation: {details}"
        )


class DuplicateInvoice(PipelineError):
    """Raised when an invoice id already exists in the store or the batch."""

    kind = "duplicate_invoice"

    def __init__(self, invoice_ids: list[str]):
        self.invoice_ids = invoice_ids
        super().__init__(f"Invoice(s) already exist: {', '.join(invoice_ids)}")


class ReferenceNotFound(PipelineError):
    """Raised when a reference data lookup misses the cache."""

    kind = "reference_not_found"
    reference_type = "reference"

    def __init__(self, name: Any):
        self.name = name
        super().__init__(f"{self.reference_type.capitalize()} {name} not found")


class CurrencyNotFound(ReferenceNotFound):
    reference_type = "currency"


class StatusNotFound(ReferenceNotFound):
    reference_type = "invoice status"


class SupplierNotFound(PipelineError):
    """Raised when a supplier is neither in the batch nor in the store."""

    kind = "supplier_not_found"

    def __init__(self, internal_id: str):
        self.internal_id = internal_id
        super().__init__(f"Supplier with ID {internal_id} not found")


class StorageFailure(PipelineError):
    """Raised when an underlying store operation fails."""

    kind = "storage_failure"


class UnsupportedFileType(PipelineError):
    """Raised when an upload does not declare a CSV media type."""

    kind = "unsupported_file_type"

    def __init__(self, media_type: str | None):
        self.media_type = media_type
        super().__init__(
            f"Invalid file type {media_type!r}. Only CSV files are supported."
        )


class IngestionInProgress(PipelineError):
    """Raised when another ingestion holds the single-writer lock."""

    kind = "ingestion_in_progress"


class AnalyticsQueryFailed(PipelineError):
    """Raised when an analytics query cannot be answered."""

    kind = "analytics_query_failed"

    def __init__(self, query_name: str):
        self.query_name = query_name
        super().__init__(f"Error fetching {query_name.replace('_', ' ')}")
