"""Custom exceptions for the bucketload application.

The transfer engine distinguishes four failure scopes:

- ConnectivityError: the object store or warehouse cannot be reached. Fatal
  for the whole run; no plan executes.
- PlanningError: the dedup query for one table failed. That table's plan is
  abandoned, sibling tables proceed.
- TransferError: a single object could not be read or written. The object is
  recorded as failed and the run continues.
- PolicyViolation: an object exceeds its pattern's size ceiling. Recorded as
  skipped, never treated as an error.
"""

from typing import Optional


class BucketloadError(Exception):
    """Base exception class for bucketload-specific errors."""

    pass


class ConnectivityError(BucketloadError):
    """Raised when unable to reach the object store or the warehouse."""

    pass


class PlanningError(BucketloadError):
    """Raised when the previously transferred keys of a table cannot be read."""

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"Planning failed for table {table}: {message}")
        self.table = table


class TransferError(BucketloadError):
    """Raised when a single object read or write fails."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class PolicyViolation(BucketloadError):
    """Raised when an object exceeds the size ceiling of its pattern."""

    def __init__(self, key: str, size: int, max_file_size: int) -> None:
        super().__init__(f"{key} is {size} bytes, ceiling is {max_file_size} bytes")
        self.key = key
        self.size = size
        self.max_file_size = max_file_size
