"""
In-process lookup of currencies and invoice statuses by name.
"""

from types import MappingProxyType
from typing import Mapping, Protocol

from invoice_pipeline.core.errors import CurrencyNotFound, StatusNotFound
from invoice_pipeline.core.models import Currency, InvoiceStatus
from invoice_pipeline.observability.logger import get_logger

logger = get_logger(__name__)


class ReferenceSource(Protocol):
    def load_currencies(self) -> list[Currency]: ...

    def load_invoice_statuses(self) -> list[InvoiceStatus]: ...


class ReferenceCache:
    """
    Immutable name -> record mapping for reference data.

    Built once from the store; a miss raises instead of querying again.
    Use refresh() to pick up newly seeded values.
    """

    def __init__(
        self,
        currencies: Mapping[str, Currency],
        statuses: Mapping[str, InvoiceStatus],
    ):
        self._currencies = MappingProxyType(dict(currencies))
        self._statuses = MappingProxyType(dict(statuses))

    @classmethod
    def build(cls, source: ReferenceSource) -> "ReferenceCache":
        """
        Load every currency and invoice status from the store.

        Args:
            source: Anything exposing load_currencies/load_invoice_statuses

        Returns:
            New ReferenceCache
        """
        currencies = {currency.name: currency for currency in source.load_currencies()}
        statuses = {status.name: status for status in source.load_invoice_statuses()}
        logger.info(
            "Reference cache built",
            extra={"currencies": sorted(currencies), "statuses": sorted(statuses)},
        )
        return cls(currencies, statuses)

    def refresh(self, source: ReferenceSource) -> "ReferenceCache":
        return type(self).build(source)

    @property
    def currencies(self) -> Mapping[str, Currency]:
        return self._currencies

    @property
    def statuses(self) -> Mapping[str, InvoiceStatus]:
        return self._statuses

    def currency(self, name: str) -> Currency:
        """
        Raises:
            CurrencyNotFound: If name is not cached
        """
        try:
            return self._currencies[name]
        except KeyError:
            raise CurrencyNotFound(name) from None

    def status(self, name: str) -> InvoiceStatus:
        """
        Raises:
            StatusNotFound: If name is not cached
        """
        try:
            return self._statuses[name]
        except KeyError:
            raise StatusNotFound(name) from None
