"""
Unit tests for IngestionPipeline against the in-memory store.
"""

import io
from decimal import Decimal

import pytest

from invoice_pipeline.batch import IngestionPipeline, SupplierResolution, Upload, supplier_from_row
from invoice_pipeline.batch import pipeline as pipeline_module
from invoice_pipeline.core.errors import (
    CurrencyNotFound,
    DuplicateInvoice,
    IngestionInProgress,
    StorageFailure,
    SupplierNotFound,
    UnsupportedFileType,
    ValidationFailed,
)
from invoice_pipeline.core.validation import RowValidator
from conftest import make_row, write_csv


@pytest.fixture
def pipeline(memory_store, fixed_clock, tmp_path) -> IngestionPipeline:
    return IngestionPipeline(
        memory_store,
        uploads_dir=tmp_path / "uploads",
        clock=fixed_clock,
    )


def csv_upload(tmp_path, rows, filename="invoices.csv", media_type="text/csv") -> Upload:
    path = write_csv(tmp_path / f"source-{filename}", rows)
    return Upload(stream=io.BytesIO(path.read_bytes()), filename=filename, media_type=media_type)


class TestIngestFile:
    """Tests for ingest_file"""

    def test_shared_supplier_and_overdue_override(self, pipeline, memory_store, csv_file):
        path = csv_file([
            make_row(invoice_id="INV1", invoice_due_date="14/06/2024", invoice_status="PENDING"),
            make_row(
                invoice_id="INV2",
                invoice_due_date="15/07/2024",
                invoice_status="PENDING",
                supplier_company_name="Renamed Ltd",
            ),
        ])

        result = pipeline.ingest_file(path)

        assert result.total_rows == 2
        assert result.suppliers_created == 1
        assert result.invoices_persisted == 2
        assert result.overdue_overrides == 1

        assert list(memory_store.suppliers) == ["S1"]
        assert memory_store.suppliers["S1"].company_name == "Acme Ltd"
        assert memory_store.invoices["INV1"].status.name == "OVERDUE"
        assert memory_store.invoices["INV2"].status.name == "PENDING"
        assert memory_store.invoices["INV2"].cost == Decimal("100.00")

    def test_result_source_defaults_to_path(self, pipeline, csv_file):
        path = csv_file([make_row()])

        result = pipeline.ingest_file(path)

        assert result.source == str(path)

    def test_duplicate_within_file(self, pipeline, memory_store, csv_file):
        path = csv_file([make_row(invoice_id="INV1"), make_row(invoice_id="INV1")])

        with pytest.raises(DuplicateInvoice) as exc_info:
            pipeline.ingest_file(path)

        assert exc_info.value.invoice_ids == ["INV1"]
        assert memory_store.persist_calls == []

    def test_duplicate_of_stored_invoice(self, pipeline, memory_store, csv_file):
        pipeline.ingest_file(csv_file([make_row(invoice_id="INV1")], name="first.csv"))

        with pytest.raises(DuplicateInvoice):
            pipeline.ingest_file(csv_file(
                [make_row(invoice_id="INV2"), make_row(invoice_id="INV1")], name="second.csv"
            ))

        assert list(memory_store.invoices) == ["INV1"]
        assert len(memory_store.persist_calls) == 1

    def test_invalid_row_persists_nothing(self, pipeline, memory_store, csv_file):
        path = csv_file([make_row(invoice_id="INV1"), make_row(invoice_id="INV2", invoice_currency="JPY")])

        with pytest.raises(ValidationFailed) as exc_info:
            pipeline.ingest_file(path)

        assert exc_info.value.record_id == "INV2"
        assert memory_store.persist_calls == []
        assert memory_store.suppliers == {}

    def test_invalid_supplier_persists_nothing(self, pipeline, memory_store, csv_file):
        path = csv_file([make_row(supplier_email="broken")])

        with pytest.raises(ValidationFailed):
            pipeline.ingest_file(path)

        assert memory_store.persist_calls == []

    def test_single_valid_row_through_real_logger(self, pipeline, memory_store, csv_file, json_logs):
        result = pipeline.ingest_file(csv_file([make_row()]))

        assert result.invoices_persisted == 1
        assert list(memory_store.invoices) == ["INV1"]
        messages = [r["message"] for r in json_logs()]
        assert "Resolved 1 suppliers" in messages
        assert "Completed: Ingest invoice file" in messages

    def test_overlong_supplier_column_is_a_validation_failure(self, pipeline, memory_store, csv_file):
        path = csv_file([make_row(supplier_phone="+1 (555) 123-4567 x89")])

        with pytest.raises(ValidationFailed) as exc_info:
            pipeline.ingest_file(path)

        assert exc_info.value.row_kind == "supplier"
        assert memory_store.persist_calls == []

    @pytest.mark.parametrize("overrides,field", [
        ({"invoice_cost": "100000000"}, "invoice_cost"),
        ({"invoice_cost": "99999999.995"}, "invoice_cost"),
        ({"supplier_stock_value": "100000000.00"}, "supplier_stock_value"),
        ({"supplier_withholding_tax": "1000"}, "supplier_withholding_tax"),
        ({"invoice_id": "I" * 51}, "invoice_id"),
    ])
    def test_values_wider_than_columns_rejected(self, pipeline, memory_store, csv_file, overrides, field):
        with pytest.raises(ValidationFailed) as exc_info:
            pipeline.ingest_file(csv_file([make_row(**overrides)]))

        assert field in exc_info.value.errors
        assert memory_store.persist_calls == []

    def test_largest_storable_cost_accepted(self, pipeline, memory_store, csv_file):
        pipeline.ingest_file(csv_file([make_row(invoice_cost="99999999.99", supplier_withholding_tax="999.99")]))

        assert memory_store.invoices["INV1"].cost == Decimal("99999999.99")

    def test_currency_missing_from_store(self, memory_store, fixed_clock, csv_file):
        memory_store.currencies = [c for c in memory_store.currencies if c.name != "GBP"]
        pipeline = IngestionPipeline(memory_store, clock=fixed_clock)

        with pytest.raises(CurrencyNotFound):
            pipeline.ingest_file(csv_file([make_row(invoice_currency="GBP")]))

        assert memory_store.persist_calls == []

    def test_storage_failure_propagates(self, pipeline, memory_store, csv_file):
        memory_store.persist_error = StorageFailure("connection lost")

        with pytest.raises(StorageFailure):
            pipeline.ingest_file(csv_file([make_row()]))

    def test_existing_supplier_reused(self, pipeline, memory_store, csv_file):
        stored = supplier_from_row(RowValidator().validate_supplier(make_row(supplier_company_name="Stored Ltd")))
        memory_store.suppliers["S1"] = stored

        result = pipeline.ingest_file(csv_file([make_row(supplier_company_name="Uploaded Ltd")]))

        assert result.suppliers_created == 0
        assert result.suppliers_reused == 1
        created, invoices, _ = memory_store.persist_calls[0]
        assert created == []
        assert invoices[0].supplier.company_name == "Stored Ltd"

    def test_chunk_size_passed_to_store(self, memory_store, fixed_clock, csv_file):
        pipeline = IngestionPipeline(memory_store, clock=fixed_clock, chunk_size=7)

        pipeline.ingest_file(csv_file([make_row()]))

        assert memory_store.persist_calls[0][2] == 7

    def test_chunk_size_must_be_positive(self, memory_store):
        with pytest.raises(ValueError):
            IngestionPipeline(memory_store, chunk_size=0)

    def test_reset_clears_before_ingesting(self, pipeline, memory_store, csv_file):
        pipeline.ingest_file(csv_file([make_row(invoice_id="OLD", supplier_internal_id="S9")], name="old.csv"))

        pipeline.ingest_file(csv_file([make_row(invoice_id="NEW")], name="new.csv"), reset=True)

        assert list(memory_store.invoices) == ["NEW"]
        assert list(memory_store.suppliers) == ["S1"]

    def test_reference_cache_built_once(self, pipeline, memory_store, csv_file):
        pipeline.ingest_file(csv_file([make_row(invoice_id="INV1")], name="a.csv"))
        pipeline.ingest_file(csv_file([make_row(invoice_id="INV2")], name="b.csv"))

        assert memory_store.reference_loads == 1

    def test_refresh_cache_reloads(self, pipeline, memory_store):
        pipeline.cache
        pipeline.refresh_cache()

        assert memory_store.reference_loads == 2

    def test_concurrent_ingestion_rejected(self, pipeline, memory_store, csv_file):
        path = csv_file([make_row()])

        assert pipeline_module._INGESTION_LOCK.acquire(blocking=False)
        try:
            with pytest.raises(IngestionInProgress):
                pipeline.ingest_file(path)
        finally:
            pipeline_module._INGESTION_LOCK.release()

        assert memory_store.persist_calls == []

    def test_lock_released_after_failure(self, pipeline, csv_file):
        with pytest.raises(ValidationFailed):
            pipeline.ingest_file(csv_file([make_row(invoice_cost="-5")], name="bad.csv"))

        result = pipeline.ingest_file(csv_file([make_row()], name="good.csv"))

        assert result.invoices_persisted == 1


class TestSupplierFallback:
    """Tests for the store lookup of suppliers missing from the batch map"""

    def test_supplier_missing_everywhere(self, memory_store, fixed_clock, csv_file, monkeypatch):
        pipeline = IngestionPipeline(memory_store, clock=fixed_clock)
        monkeypatch.setattr(pipeline.resolver, "resolve", lambda rows: SupplierResolution())

        with pytest.raises(SupplierNotFound) as exc_info:
            pipeline.ingest_file(csv_file([make_row()]))

        assert exc_info.value.internal_id == "S1"
        assert memory_store.point_lookups == ["S1"]

    def test_supplier_found_by_point_lookup(self, memory_store, fixed_clock, csv_file, monkeypatch):
        memory_store.suppliers["S1"] = supplier_from_row(RowValidator().validate_supplier(make_row()))
        pipeline = IngestionPipeline(memory_store, clock=fixed_clock)
        monkeypatch.setattr(pipeline.resolver, "resolve", lambda rows: SupplierResolution())

        result = pipeline.ingest_file(csv_file([make_row(invoice_id="INV1"), make_row(invoice_id="INV2")]))

        assert result.invoices_persisted == 2
        # looked up once then remembered
        assert memory_store.point_lookups == ["S1"]


class TestIngestUpload:
    """Tests for ingest_upload"""

    def test_non_csv_rejected_before_saving(self, pipeline, tmp_path, memory_store):
        upload = csv_upload(tmp_path, [make_row()], filename="data.json", media_type="application/json")

        with pytest.raises(UnsupportedFileType):
            pipeline.ingest_upload(upload)

        assert not (tmp_path / "uploads").exists()
        assert memory_store.persist_calls == []

    def test_saved_file_removed_on_success(self, pipeline, tmp_path):
        upload = csv_upload(tmp_path, [make_row()])

        result = pipeline.ingest_upload(upload)

        assert result.source == "invoices.csv"
        assert result.invoices_persisted == 1
        assert not (tmp_path / "uploads" / "invoices.csv").exists()

    def test_saved_file_kept_on_failure(self, pipeline, tmp_path):
        upload = csv_upload(tmp_path, [make_row(invoice_status="LOST")])

        with pytest.raises(ValidationFailed):
            pipeline.ingest_upload(upload)

        assert (tmp_path / "uploads" / "invoices.csv").exists()

    def test_charset_parameter_accepted(self, pipeline, tmp_path):
        upload = csv_upload(tmp_path, [make_row()], media_type="text/csv; charset=utf-8")

        result = pipeline.ingest_upload(upload)

        assert result.invoices_persisted == 1
