"""
Batch ingestion pipeline orchestration.

Coordinates the flow: read → resolve suppliers → build invoices →
duplicate check → persist in one transaction → cleanup
"""

import datetime
import threading
import time
from collections import Counter
from pathlib import Path
from typing import Protocol

from invoice_pipeline.core.constants import DEFAULT_CHUNK_SIZE, INVOICE_STATUS_OVERDUE
from invoice_pipeline.core.errors import (
    DuplicateInvoice,
    IngestionInProgress,
    PipelineError,
    SupplierNotFound,
)
from invoice_pipeline.core.models import (
    Currency,
    IngestionResult,
    Invoice,
    InvoiceStatus,
    RawRow,
    Supplier,
)
from invoice_pipeline.core.validation import RowValidator
from invoice_pipeline.observability import metrics
from invoice_pipeline.observability.logger import get_logger, log_operation

from .builder import Clock, InvoiceBuilder
from .readers import CSVReader
from .reference_cache import ReferenceCache
from .suppliers import SupplierResolver
from .upload import Upload, save_upload, validate_csv_media_type

logger = get_logger(__name__)

# one ingestion per process; the store adds a database-wide advisory lock
_INGESTION_LOCK = threading.Lock()


class IngestionStore(Protocol):
    def load_currencies(self) -> list[Currency]: ...

    def load_invoice_statuses(self) -> list[InvoiceStatus]: ...

    def find_suppliers(self, internal_ids: list[str]) -> dict[str, Supplier]: ...

    def find_supplier(self, internal_id: str) -> Supplier | None: ...

    def find_existing_invoice_ids(self, invoice_ids: list[str]) -> set[str]: ...

    def persist_batch(
        self, suppliers: list[Supplier], invoices: list[Invoice], chunk_size: int = ...
    ) -> int: ...

    def clear_all(self) -> dict[str, int]: ...


class IngestionPipeline:
    """
    Orchestrates ingestion of one invoice/supplier CSV file.

    Flow:
    1. Check the upload media type and save it to the uploads directory
    2. Read every row into memory
    3. Resolve one supplier per distinct supplier id (barrier)
    4. Validate and build every invoice
    5. Reject repeated or already stored invoice ids
    6. Persist new suppliers then invoices in a single transaction
    7. Delete the saved upload

    Any failure before step 6 aborts without writing; a failure during
    step 6 rolls the whole batch back.
    """

    def __init__(
        self,
        store: IngestionStore,
        validator: RowValidator | None = None,
        cache: ReferenceCache | None = None,
        uploads_dir: str | Path = "uploads",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        clock: Clock = datetime.datetime.now,
        reader: CSVReader | None = None,
    ):
        """
        Initialize ingestion pipeline.

        Args:
            store: Invoice store
            validator: Row validator (built-in rules when None)
            cache: Reference cache (built from the store on first use when None)
            uploads_dir: Where uploads are saved before ingestion
            chunk_size: Invoices per INSERT batch
            clock: Returns the current naive local time
            reader: CSV reader
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.store = store
        self.validator = validator or RowValidator()
        self.uploads_dir = Path(uploads_dir)
        self.chunk_size = chunk_size
        self.clock = clock
        self.reader = reader or CSVReader()
        self.resolver = SupplierResolver(self.validator, store)
        self._cache = cache

    @property
    def cache(self) -> ReferenceCache:
        if self._cache is None:
            self._cache = ReferenceCache.build(self.store)
        return self._cache

    def refresh_cache(self) -> ReferenceCache:
        self._cache = ReferenceCache.build(self.store)
        return self._cache

    def ingest_upload(self, upload: Upload, reset: bool = False) -> IngestionResult:
        """
        Ingest an uploaded CSV file.

        The saved copy is deleted only after a successful run.

        Args:
            upload: Uploaded file
            reset: Delete all invoices and suppliers before ingesting

        Returns:
            IngestionResult

        Raises:
            UnsupportedFileType: If the upload is not declared as CSV
            PipelineError: Any ingestion failure
        """
        validate_csv_media_type(upload.media_type)

        file_path = save_upload(upload, self.uploads_dir)
        logger.info(f"Saved upload {upload.filename} to {file_path}")

        result = self.ingest_file(file_path, reset=reset, source=upload.filename)

        file_path.unlink(missing_ok=True)
        return result

    def ingest_file(
        self,
        file_path: str | Path,
        reset: bool = False,
        source: str | None = None,
    ) -> IngestionResult:
        """
        Ingest a CSV file already on disk.

        Args:
            file_path: Path to the CSV file
            reset: Delete all invoices and suppliers before ingesting
            source: Name recorded in the result (defaults to the path)

        Returns:
            IngestionResult

        Raises:
            IngestionInProgress: If another ingestion is running in this process
            PipelineError: Any ingestion failure
        """
        if not _INGESTION_LOCK.acquire(blocking=False):
            metrics.record_ingestion_failure(IngestionInProgress.kind)
            raise IngestionInProgress("An ingestion is already running in this process")

        source = source or str(file_path)
        try:
            with log_operation("Ingest invoice file", logger=logger, source=source):
                return self._run(Path(file_path), source, reset)
        except PipelineError as e:
            metrics.record_ingestion_failure(e.kind)
            raise
        except Exception as e:
            metrics.record_ingestion_failure(type(e).__name__)
            raise
        finally:
            _INGESTION_LOCK.release()

    def _run(self, file_path: Path, source: str, reset: bool) -> IngestionResult:
        started_at = self.clock()
        start_time = time.time()

        if reset:
            self.store.clear_all()

        rows = self.reader.read(file_path)
        logger.info(f"Read {len(rows)} rows", extra={"source": source, "rows": len(rows)})

        resolution = self.resolver.resolve(rows)

        invoices, overrides = self._build_invoices(rows, resolution.suppliers)
        self._check_duplicates(invoices)

        persisted = self.store.persist_batch(resolution.created, invoices, self.chunk_size)

        result = IngestionResult(
            source=source,
            total_rows=len(rows),
            suppliers_created=len(resolution.created),
            suppliers_reused=len(resolution.reused),
            invoices_persisted=persisted,
            overdue_overrides=overrides,
            started_at=started_at,
            duration_seconds=round(time.time() - start_time, 3),
        )

        metrics.record_ingestion(
            total_rows=result.total_rows,
            suppliers_created=result.suppliers_created,
            invoices_persisted=result.invoices_persisted,
            overdue_overrides=result.overdue_overrides,
            duration_seconds=result.duration_seconds,
        )
        logger.info("Ingestion complete", extra=result.model_dump(mode="json"))
        return result

    def _build_invoices(
        self,
        rows: list[RawRow],
        suppliers: dict[str, Supplier],
    ) -> tuple[list[Invoice], int]:
        """
        Validate and build an invoice for every row.

        Returns:
            Tuple of (invoices, number of overdue overrides)
        """
        builder = InvoiceBuilder(self.cache, clock=self.clock)
        known = dict(suppliers)
        invoices = []
        overrides = 0

        for row in rows:
            supplier = self._supplier_for(row, known)
            invoice_row = self.validator.validate_invoice(row)
            invoice = builder.build(invoice_row, supplier)

            if (
                invoice.status.name == INVOICE_STATUS_OVERDUE
                and invoice_row.invoice_status != INVOICE_STATUS_OVERDUE
            ):
                overrides += 1
            invoices.append(invoice)

        return invoices, overrides

    def _supplier_for(self, row: RawRow, known: dict[str, Supplier]) -> Supplier:
        internal_id = (row.get("supplier_internal_id") or "").strip()
        supplier = known.get(internal_id)
        if supplier is not None:
            return supplier

        supplier = self.store.find_supplier(internal_id)
        if supplier is None:
            logger.error(f"Supplier {internal_id} not found", extra={"supplier_internal_id": internal_id})
            raise SupplierNotFound(internal_id)

        known[internal_id] = supplier
        return supplier

    def _check_duplicates(self, invoices: list[Invoice]) -> None:
        counts = Counter(invoice.id for invoice in invoices)
        repeated = {invoice_id for invoice_id, count in counts.items() if count > 1}
        existing = self.store.find_existing_invoice_ids(list(counts))

        duplicates = sorted(repeated | existing)
        if duplicates:
            logger.error(
                f"Duplicate invoice ids: {', '.join(duplicates)}",
                extra={"repeated_in_file": sorted(repeated), "already_stored": sorted(existing)},
            )
            raise DuplicateInvoice(duplicates)
