"""
Supplier resolution: one supplier per distinct supplier_internal_id in a batch.
"""

from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from invoice_pipeline.core.errors import ValidationFailed
from invoice_pipeline.core.models import ROW_KIND_SUPPLIER, RawRow, Supplier, SupplierRow
from invoice_pipeline.core.validation import RowValidator
from invoice_pipeline.observability.logger import get_logger

logger = get_logger(__name__)


class SupplierSource(Protocol):
    def find_suppliers(self, internal_ids: list[str]) -> dict[str, Supplier]: ...


@dataclass
class SupplierResolution:
    """
    Outcome of resolving the suppliers of one batch.

    Attributes:
        suppliers: internal_id -> Supplier for every id in the batch
        created: Suppliers that must be written
        reused: Ids that already existed in the store
    """

    suppliers: dict[str, Supplier] = field(default_factory=dict)
    created: list[Supplier] = field(default_factory=list)
    reused: list[str] = field(default_factory=list)


def supplier_from_row(row: SupplierRow) -> Supplier:
    """
    Raises:
        ValidationFailed: If the row does not fit the stored supplier shape
    """
    try:
        return Supplier(
            internal_id=row.supplier_internal_id,
            external_id=row.supplier_external_id,
            company_name=row.supplier_company_name,
            address=row.supplier_address,
            city=row.supplier_city,
            country=row.supplier_country,
            contact_name=row.supplier_contact_name,
            phone=row.supplier_phone,
            email=row.supplier_email,
            bank_code=row.supplier_bank_code,
            bank_branch_code=row.supplier_bank_branch_code,
            bank_account_number=row.supplier_bank_account_number,
            status=row.supplier_status,
            stock_value=row.supplier_stock_value,
            withholding_tax=row.supplier_withholding_tax,
        )
    except PydanticValidationError as e:
        # only reachable for rows that bypassed RowValidator
        errors = {
            f"supplier_{'.'.join(str(loc) for loc in err['loc'])}": err["msg"]
            for err in e.errors()
        }
        raise ValidationFailed(ROW_KIND_SUPPLIER, row.supplier_internal_id, errors) from e


class SupplierResolver:
    """
    Resolves the suppliers referenced by a batch of raw rows.

    The first row seen for an id supplies the supplier data; later rows with
    the same id are not validated as suppliers. Ids already in the store are
    reused as stored.
    """

    def __init__(self, validator: RowValidator, store: SupplierSource):
        self.validator = validator
        self.store = store

    def resolve(self, rows: list[RawRow]) -> SupplierResolution:
        """
        Validate one row per distinct supplier id and split new from existing.

        Args:
            rows: Raw rows of the batch

        Returns:
            SupplierResolution

        Raises:
            ValidationFailed: If a first-seen supplier row is invalid
            StorageFailure: If the store lookup fails
        """
        first_rows: dict[str, RawRow] = {}
        for row in rows:
            internal_id = (row.get("supplier_internal_id") or "").strip()
            if internal_id not in first_rows:
                first_rows[internal_id] = row

        candidates = [
            supplier_from_row(self.validator.validate_supplier(row))
            for row in first_rows.values()
        ]

        existing = self.store.find_suppliers([supplier.internal_id for supplier in candidates])

        resolution = SupplierResolution()
        for supplier in candidates:
            stored = existing.get(supplier.internal_id)
            if stored is not None:
                resolution.suppliers[supplier.internal_id] = stored
                resolution.reused.append(supplier.internal_id)
            else:
                resolution.suppliers[supplier.internal_id] = supplier
                resolution.created.append(supplier)

        logger.info(
            f"Resolved {len(resolution.suppliers)} suppliers",
            extra={"suppliers_created": len(resolution.created), "suppliers_reused": len(resolution.reused)},
        )
        return resolution
