"""
IngestionResult model summarising one completed ingestion run.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class IngestionResult(BaseModel):
    """
    Summary of a successful ingestion.

    Attributes:
        source: File name or path that was ingested
        total_rows: Rows read from the file
        suppliers_created: New suppliers persisted
        suppliers_reused: Suppliers that already existed in the store
        invoices_persisted: Invoices written
        overdue_overrides: Invoices forced to OVERDUE by the due date rule
        started_at: When the run started
        duration_seconds: Wall-clock duration
    """

    source: str
    total_rows: int = Field(0, ge=0)
    suppliers_created: int = Field(0, ge=0)
    suppliers_reused: int = Field(0, ge=0)
    invoices_persisted: int = Field(0, ge=0)
    overdue_overrides: int = Field(0, ge=0)
    started_at: datetime = Field(default_factory=datetime.now)
    duration_seconds: float = 0.0

