"""Transfers one planned object from the object store into the warehouse.

Strategy selection:
    - size > pattern ceiling (non-zero)        -> skipped_policy, no I/O
    - size >= stream threshold, or the pattern
      asks for streamed processing             -> streamed read + streamed insert
    - otherwise                                -> whole object read + single insert

Each object is attempted at most once; retrying is left to re-running the job,
which dedup makes safe.
"""

import time

from bucketload.bucket.storage_provider import StorageProvider
from bucketload.bucket.warehouse_provider import WarehouseProvider
from bucketload.exceptions import PolicyViolation
from bucketload.logging_config import get_logger
from bucketload.objects.file_utils import human_readable_size
from bucketload.objects.transfer_config import DEFAULT_STREAM_THRESHOLD_BYTES
from bucketload.objects.transfer_models import (
    RoutedObject,
    Strategy,
    TransferOutcome,
    TransferStatus,
)

logger = get_logger(__name__)


class TransferExecutor:
    """Executes single-object transfers and reports their outcome.

    Attributes:
        store: Object store to read from
        warehouse: Warehouse to write into
        stream_threshold_bytes: Objects at or above this size are streamed
    """

    def __init__(
        self,
        store: StorageProvider,
        warehouse: WarehouseProvider,
        stream_threshold_bytes: int = DEFAULT_STREAM_THRESHOLD_BYTES,
    ) -> None:
        self.store = store
        self.warehouse = warehouse
        self.stream_threshold_bytes = stream_threshold_bytes

    def select_strategy(self, obj: RoutedObject) -> Strategy:
        """Pick buffered or streamed transfer for an object."""
        if obj.processing_mode == "streamed" or obj.size >= self.stream_threshold_bytes:
            return "streamed"
        return "buffered"

    @staticmethod
    def check_policy(obj: RoutedObject) -> None:
        """Raise PolicyViolation if the object exceeds its pattern ceiling."""
        if obj.exceeds_ceiling:
            raise PolicyViolation(obj.key, obj.size, obj.max_file_size)

    def execute(self, table: str, obj: RoutedObject) -> TransferOutcome:
        """Transfer one object into table.

        Never raises for transfer failures; they are returned as a failed
        outcome carrying the error message.

        Args:
            table: Destination table
            obj: Planned object

        Returns:
            TransferOutcome with status copied, skipped_policy or failed
        """
        try:
            self.check_policy(obj)
        except PolicyViolation as e:
            logger.info(f"Skipping {obj.key} (size policy): {e}")
            return TransferOutcome(
                table=table,
                key=obj.key,
                status=TransferStatus.SKIPPED_POLICY,
                error=str(e),
                size=obj.size,
            )

        strategy = self.select_strategy(obj)
        start_time = time.perf_counter()

        try:
            if strategy == "streamed":
                self._copy_streamed(table, obj)
            else:
                self._copy_buffered(table, obj)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(f"Failed to copy {obj.key} into {table} after {duration:.2f}s: {e}")
            return TransferOutcome(
                table=table,
                key=obj.key,
                status=TransferStatus.FAILED,
                error=str(e),
                size=obj.size,
                strategy=strategy,
            )

        duration = time.perf_counter() - start_time
        logger.info(
            f"Copied: {obj.key} ({human_readable_size(obj.size)}, {strategy}) "
            f"into {table} in {duration:.2f}s"
        )
        return TransferOutcome(
            table=table,
            key=obj.key,
            status=TransferStatus.COPIED,
            size=obj.size,
            strategy=strategy,
        )

    def _copy_buffered(self, table: str, obj: RoutedObject) -> None:
        content = self.store.read_object(obj.key)
        self.warehouse.insert_buffered(table, obj.file_name, obj.size, content, obj.key)

    def _copy_streamed(self, table: str, obj: RoutedObject) -> None:
        with self.store.open_object(obj.key) as stream:
            self.warehouse.insert_streamed(table, obj.file_name, obj.size, stream, obj.key)
