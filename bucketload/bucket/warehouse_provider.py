"""Abstract warehouse provider interface.

This module defines the WarehouseProvider abstract base class implemented by
the tabular warehouse backends. A provider is used as an explicitly scoped
session: entered once at run start and closed on every exit path.
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import BinaryIO, Optional, Set, Type


class WarehouseProvider(ABC):
    """Abstract interface for warehouse operations.

    Example implementations:
        - SqlWarehouse: any SQLAlchemy-supported database
    """

    @abstractmethod
    def open(self) -> None:
        """Acquire the warehouse session.

        Raises:
            ConnectivityError: If the warehouse cannot be reached
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the warehouse session. Safe to call more than once."""
        pass

    def __enter__(self) -> "WarehouseProvider":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    @abstractmethod
    def test_connection(self) -> bool:
        """Check the warehouse answers a trivial query.

        Returns:
            True if the connection works, False otherwise
        """
        pass

    @abstractmethod
    def ensure_table(self, table_name: str) -> None:
        """Create the destination table if it does not exist (idempotent).

        Raises:
            PlanningError: If the table cannot be created
        """
        pass

    @abstractmethod
    def query_distinct_keys(self, table_name: str) -> Set[str]:
        """Return the object keys already recorded in a table.

        Raises:
            PlanningError: If the query fails
        """
        pass

    @abstractmethod
    def insert_buffered(self, table_name: str, file_name: str, file_size: int, content: bytes, object_key: str) -> None:
        """Append one row carrying the whole object content.

        Raises:
            TransferError: If the insert fails
        """
        pass

    @abstractmethod
    def insert_streamed(
        self, table_name: str, file_name: str, file_size: int, stream: BinaryIO, object_key: str
    ) -> None:
        """Append one row while consuming the content stream incrementally.

        Raises:
            TransferError: If the insert fails
        """
        pass
