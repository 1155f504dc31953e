"""
Runtime configuration for invoice-pipeline.

Settings come from environment variables; a ``.env`` file in the working
directory (or the path in ``INVOICE_PIPELINE_ENV``) is loaded first.
"""
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from invoice_pipeline.core.constants import DEFAULT_CHUNK_SIZE


class DatabaseSettings(BaseModel):
    """PostgreSQL connection settings."""

    host: str = "localhost"
    port: int = 5432
    database: str = "invoices"
    user: str = "pipeline"
    password: str | None = None
    min_size: int = Field(2, ge=1)
    max_size: int = Field(10, ge=1)
    timeout: float = Field(30.0, gt=0)


class PipelineSettings(BaseModel):
    """
    Settings for the ingestion pipeline and analytics engine.

    Attributes:
        database: PostgreSQL connection settings
        uploads_dir: Where uploaded files are saved before ingestion
        chunk_size: Invoices per INSERT batch
        validation_rules_path: Optional YAML override of the built-in rules
        metrics_port: Port for the Prometheus exporter, disabled when None
        log_level: Root log level
        log_format: "json" or "text"
    """

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    uploads_dir: Path = Path("uploads")
    chunk_size: int = Field(DEFAULT_CHUNK_SIZE, ge=1)
    validation_rules_path: Path | None = None
    metrics_port: int | None = None
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls, env_file: str | None = None) -> "PipelineSettings":
        """
        Build settings from the environment.

        Args:
            env_file: Optional .env file to load (existing variables win)

        Returns:
            PipelineSettings instance
        """
        load_dotenv(env_file or os.getenv("INVOICE_PIPELINE_ENV") or ".env", override=False)

        database = DatabaseSettings(
            host=os.getenv("DB_HOST", "localhost"),
            port=int(os.getenv("DB_PORT", "5432")),
            database=os.getenv("DB_NAME", "invoices"),
            user=os.getenv("DB_USER", "pipeline"),
            password=os.getenv("DB_PASSWORD"),
        )

        rules_path = os.getenv("VALIDATION_RULES_PATH")
        metrics_port = os.getenv("METRICS_PORT")

        return cls(
            database=database,
            uploads_dir=Path(os.getenv("UPLOADS_DIR", "uploads")),
            chunk_size=int(os.getenv("INGEST_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
            validation_rules_path=Path(rules_path) if rules_path else None,
            metrics_port=int(metrics_port) if metrics_port else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "json"),
        )
