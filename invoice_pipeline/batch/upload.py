"""
Uploaded file handling: media type check and saving to the uploads directory.
"""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from invoice_pipeline.core.errors import UnsupportedFileType

CSV_MEDIA_TYPE = "text/csv"


@dataclass
class Upload:
    """
    An uploaded file as handed over by the transport layer.

    Attributes:
        stream: Readable binary stream with the file contents
        filename: Client-supplied file name
        media_type: Declared media type, e.g. "text/csv; charset=utf-8"
    """

    stream: BinaryIO
    filename: str
    media_type: str | None = CSV_MEDIA_TYPE


def validate_csv_media_type(media_type: str | None) -> None:
    """
    Reject anything that does not declare a CSV media type.

    Raises:
        UnsupportedFileType: If media_type does not start with text/csv
    """
    if not media_type or not media_type.startswith(CSV_MEDIA_TYPE):
        raise UnsupportedFileType(media_type)


def save_upload(upload: Upload, uploads_dir: str | Path) -> Path:
    """
    Copy an upload stream into the uploads directory.

    Args:
        upload: Upload to save
        uploads_dir: Target directory, created if missing

    Returns:
        Path of the saved file
    """
    directory = Path(uploads_dir)
    directory.mkdir(parents=True, exist_ok=True)

    # drop any client-side directory components
    target = directory / (Path(upload.filename).name or "upload.csv")
    with open(target, "wb") as handle:
        shutil.copyfileobj(upload.stream, handle)
    return target
