"""
Batch ingestion of invoice/supplier CSV files.
"""

from .builder import InvoiceBuilder
from .pipeline import IngestionPipeline
from .readers import CSVReader
from .reference_cache import ReferenceCache
from .suppliers import SupplierResolution, SupplierResolver, supplier_from_row
from .upload import Upload, save_upload, validate_csv_media_type

__all__ = [
    "CSVReader",
    "IngestionPipeline",
    "InvoiceBuilder",
    "ReferenceCache",
    "SupplierResolution",
    "SupplierResolver",
    "Upload",
    "save_upload",
    "supplier_from_row",
    "validate_csv_media_type",
]
