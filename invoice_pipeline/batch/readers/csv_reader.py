"""
CSV reader for batch ingestion.
"""

import csv
from pathlib import Path

from invoice_pipeline.core.constants import REQUIRED_COLUMNS
from invoice_pipeline.core.errors import ValidationFailed
from invoice_pipeline.core.models import RawRow

ROW_KIND_HEADER = "header"
ROW_KIND_FILE = "file"


class CSVReader:
    """
    Reads a whole CSV file into memory as raw rows.

    The header row must contain every required column; extra columns are
    carried through untouched.
    """

    def __init__(
        self,
        required_columns: tuple[str, ...] = REQUIRED_COLUMNS,
        delimiter: str = ",",
        encoding: str = "utf-8-sig",
    ):
        """
        Initialize CSV reader.

        Args:
            required_columns: Columns the header must contain
            delimiter: Field delimiter
            encoding: File encoding (utf-8-sig strips a BOM)
        """
        self.required_columns = required_columns
        self.delimiter = delimiter
        self.encoding = encoding

    def read(self, file_path: str | Path) -> list[RawRow]:
        """
        Read CSV file into a list of column -> value mappings.

        Args:
            file_path: Path to CSV file

        Returns:
            One RawRow per data line, blank lines skipped

        Raises:
            ValidationFailed: If the header lacks required columns or the
                file is not valid CSV text
        """
        try:
            with open(file_path, newline="", encoding=self.encoding) as handle:
                reader = csv.DictReader(handle, delimiter=self.delimiter)
                fieldnames = [name.strip() for name in reader.fieldnames or []]
                self.check_header(fieldnames)
                reader.fieldnames = fieldnames

                rows = []
                for row in reader:
                    # short lines leave trailing columns as None, long ones add a None key
                    row.pop(None, None)
                    if not any(value and value.strip() for value in row.values()):
                        continue
                    rows.append(row)
                return rows
        except (UnicodeDecodeError, csv.Error) as e:
            raise ValidationFailed(ROW_KIND_FILE, None, {"file": f"Unreadable CSV: {e}"}) from e

    def check_header(self, fieldnames: list[str]) -> None:
        present = set(fieldnames)
        missing = [name for name in self.required_columns if name not in present]
        if missing:
            raise ValidationFailed(
                ROW_KIND_HEADER,
                None,
                {name: "Missing required column" for name in missing},
            )
