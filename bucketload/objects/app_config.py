"""Application configuration model.

This module defines the runtime configuration for bucketload: which object
store and bucket to read, which warehouse to write into, and where the
transfer patterns live.
"""
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class AppConfig(BaseModel):
    """Application runtime configuration.

    Attributes:
        transfer_config: Path to transfer_config.toml
        storage_backend: Object store type ("gcs" or "s3")
        bucket: Bucket to read objects from
        prefix: Key prefix listed in the bucket
        gcs_project_id: Google Cloud project ID (gcs backend)
        s3_endpoint_url: Custom endpoint for S3-compatible stores (s3 backend)
        s3_region: AWS region (s3 backend)
        s3_force_path_style: Use path-style addressing (s3 backend)
        warehouse_url: SQLAlchemy URL of the warehouse
        warehouse_schema: Schema holding destination tables
        max_workers: Concurrent transfers; also the warehouse pool size

    Example:
        >>> config = AppConfig(
        ...     transfer_config=Path("transfer_config.toml"),
        ...     storage_backend="s3",
        ...     bucket="landing-bucket",
        ...     prefix="exports/",
        ...     warehouse_url="postgresql+psycopg2://loader@localhost/warehouse",
        ... )
    """

    transfer_config: Path
    storage_backend: Literal["gcs", "s3"] = "s3"
    bucket: str
    prefix: str = ""
    gcs_project_id: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    s3_region: Optional[str] = None
    s3_force_path_style: bool = False
    warehouse_url: str
    warehouse_schema: Optional[str] = None
    max_workers: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def validate_backend_settings(self) -> "AppConfig":
        if self.storage_backend == "gcs" and not self.gcs_project_id:
            raise ValueError("gcs_project_id is required for the gcs storage backend")
        return self
