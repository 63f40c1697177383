"""Pytest fixtures and configuration."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from bucketload.bucket.sql_warehouse import SqlWarehouse
from bucketload.objects.transfer_config import FilePattern, TransferConfig
from tests.fakes import InMemoryStore, InMemoryWarehouse

MB = 1024 * 1024


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast tests without external services")
    config.addinivalue_line("markers", "security: input validation tests")
    config.addinivalue_line("markers", "integration: tests against a real (SQLite) warehouse")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def memory_warehouse() -> InMemoryWarehouse:
    return InMemoryWarehouse()


@pytest.fixture
def sqlite_url(temp_dir: Path) -> str:
    return f"sqlite:///{temp_dir / 'warehouse.db'}"


@pytest.fixture
def sqlite_warehouse(sqlite_url: str) -> Generator[SqlWarehouse, None, None]:
    """File-backed SQLite warehouse with a small chunk size."""
    warehouse = SqlWarehouse(sqlite_url, chunk_size=4)
    yield warehouse
    warehouse.close()


@pytest.fixture
def csv_other_config() -> TransferConfig:
    """CSV objects capped at 50 MB, everything else to T_OTHER."""
    return TransferConfig(
        pattern={
            "csv": FilePattern(pattern="*.csv", target_table="T_CSV", max_file_size=50 * MB),
            "other": FilePattern(pattern="*", target_table="T_OTHER"),
        }
    )


@pytest.fixture
def sample_transfer_toml(temp_dir: Path) -> Path:
    """transfer_config.toml with two enabled patterns and one disabled."""
    config_file = temp_dir / "transfer_config.toml"
    config_file.write_text(
        """
default_table = "BUCKET_FILES"
stream_threshold_bytes = 1048576

[pattern.csv]
pattern = "landing/*.csv"
description = "CSV exports"
target_table = "T_CSV"
file_type = "csv"
max_file_size = 52428800

[pattern.json]
pattern = "landing/*.json"
target_table = "T_JSON"
processing_mode = "streamed"

[pattern.archive]
pattern = "archive/*"
target_table = "T_ARCHIVE"
is_enabled = false
"""
    )
    return config_file
