"""Abstract storage provider interface for multi-cloud support.

This module defines the StorageProvider abstract base class implemented by the
object store backends (GCS, S3 and S3-compatible stores). The transfer engine
only talks to this interface.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, ContextManager, Iterator, Tuple


class StorageProvider(ABC):
    """Abstract interface for object store operations.

    Defines the contract for storage operations that must be implemented
    by concrete providers. Enables swapping backends without changing the
    transfer engine.

    Example implementations:
        - GcsManager: Google Cloud Storage
        - S3Manager: AWS S3 and S3-compatible endpoints
    """

    @abstractmethod
    def list_with_prefix(self, prefix: str = "") -> Iterator[Tuple[str, int]]:
        """List objects under a prefix, page by page.

        Args:
            prefix: Key prefix used as the native store filter

        Yields:
            (key, size) tuples for every object under the prefix

        Raises:
            ConnectivityError: If the bucket cannot be listed
        """
        pass

    @abstractmethod
    def read_object(self, key: str) -> bytes:
        """Read a whole object into memory.

        Args:
            key: Object key

        Returns:
            Object content

        Raises:
            TransferError: If the object cannot be read
        """
        pass

    @abstractmethod
    def open_object(self, key: str) -> ContextManager[BinaryIO]:
        """Open a streaming read of an object.

        Args:
            key: Object key

        Returns:
            Context manager yielding a binary file-like object

        Raises:
            TransferError: If the object cannot be opened
        """
        pass

    @abstractmethod
    def get_size(self, key: str) -> int:
        """Get object size in bytes, or -1 if it cannot be determined."""
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether an object exists."""
        pass

    @abstractmethod
    def test_connection(self) -> bool:
        """Verify the bucket is reachable with the current credentials.

        Returns:
            True if the bucket can be accessed, False otherwise
        """
        pass

    @property
    @abstractmethod
    def has_error(self) -> bool:
        """Check if provider has encountered errors.

        Returns:
            True if provider is in error state, False otherwise
        """
        pass

    @property
    @abstractmethod
    def bucket_name(self) -> str:
        """Get the storage bucket name.

        Returns:
            Name of the storage bucket
        """
        pass
