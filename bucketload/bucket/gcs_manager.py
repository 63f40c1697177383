"""Google Cloud Storage object store.

This module provides the GcsManager class, the GCS implementation of
StorageProvider: paginated listing, whole-object reads for buffered transfers
and streaming reads for large objects. Listing and metadata calls retry on
transient failures; object reads are attempted once.
"""

from contextlib import contextmanager
from typing import BinaryIO, Iterator, List, Optional, Tuple

from google.api_core import exceptions as google_api_exceptions
from google.cloud import storage  # type: ignore[attr-defined]

from bucketload.bucket.retry_utils import retry_with_backoff
from bucketload.bucket.storage_provider import StorageProvider
from bucketload.exceptions import ConnectivityError, TransferError
from bucketload.logging_config import get_logger
from bucketload.objects.transfer_config import DEFAULT_CHUNK_SIZE

logger = get_logger(__name__)

# GCS transient failures that should be retried
TRANSIENT_EXCEPTIONS = (
    google_api_exceptions.ServiceUnavailable,  # 503
    google_api_exceptions.DeadlineExceeded,  # 504
    google_api_exceptions.InternalServerError,  # 500
    google_api_exceptions.TooManyRequests,  # 429 rate limiting
)

ACCESS_EXCEPTIONS = (
    google_api_exceptions.Unauthenticated,
    google_api_exceptions.PermissionDenied,
    google_api_exceptions.NotFound,
)


class GcsManager(StorageProvider):
    """Google Cloud Storage implementation of StorageProvider.

    Attributes:
        storage_client: GCS storage client
        source_bucket_name: Name of the GCS bucket to read from
        page_size: Number of blobs requested per listing page
        chunk_size: Read buffer size for streamed objects
    """

    def __init__(
        self,
        gcs_project: str,
        source_bucket_name: str,
        page_size: int = 1000,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """Initialize GCS manager and verify bucket access.

        Args:
            gcs_project: GCP project ID
            source_bucket_name: Name of GCS bucket to read from
            page_size: Number of blobs per listing page
            chunk_size: Read buffer size for streamed objects

        Note:
            Sets has_error=True if authentication or permissions fail.
            Run 'gcloud auth application-default login' if authentication fails.
        """
        self.storage_client = storage.Client(project=gcs_project)
        self.source_bucket_name = source_bucket_name
        self.page_size = page_size
        self.chunk_size = chunk_size
        self._has_error = not self.test_connection()

    def test_connection(self) -> bool:
        try:
            blobs = self.storage_client.list_blobs(self.source_bucket_name, max_results=1)
            for _ in blobs:
                pass
            logger.info(f"Found GCS bucket: {self.source_bucket_name}")
            return True
        except google_api_exceptions.Unauthenticated as e:
            logger.error(f"GCS authentication failed: {e}")
            logger.error("Authentication required. Run: gcloud auth application-default login")
        except google_api_exceptions.PermissionDenied as e:
            logger.error(f"GCS permission denied: {e}")
        except google_api_exceptions.NotFound:
            logger.error(f"GCS bucket not found: {self.source_bucket_name}")
        except Exception as e:
            logger.error(f"Error connecting to GCS: {e}", exc_info=True)
        return False

    @retry_with_backoff(retries=3, exceptions=TRANSIENT_EXCEPTIONS)
    def _list_page(self, prefix: str, page_token: Optional[str]) -> Tuple[List[Tuple[str, int]], Optional[str]]:
        """Fetch one listing page and the token of the next one."""
        iterator = self.storage_client.list_blobs(
            self.source_bucket_name,
            prefix=prefix or None,
            page_token=page_token,
            page_size=self.page_size,
        )
        page = next(iterator.pages, None)
        if page is None:
            return [], None
        entries = [(blob.name, int(blob.size or 0)) for blob in page]
        return entries, iterator.next_page_token

    def list_with_prefix(self, prefix: str = "") -> Iterator[Tuple[str, int]]:
        page_token: Optional[str] = None
        page_count = 0

        while True:
            try:
                entries, page_token = self._list_page(prefix, page_token)
            except ACCESS_EXCEPTIONS as e:
                self._has_error = True
                raise ConnectivityError(f"Unable to list gs://{self.source_bucket_name}/{prefix}: {e}") from e
            except TRANSIENT_EXCEPTIONS as e:
                raise ConnectivityError(f"GCS listing kept failing: {e}") from e

            page_count += 1
            logger.debug(f"Listed page {page_count} with {len(entries)} blobs under '{prefix}'")
            yield from entries

            if not page_token:
                break

    def read_object(self, key: str) -> bytes:
        try:
            content = self._blob(key).download_as_bytes()
        except google_api_exceptions.GoogleAPIError as e:
            raise TransferError(f"Unable to download gs://{self.source_bucket_name}/{key}: {e}", key=key) from e

        logger.debug(f"Downloaded {key} ({len(content)} bytes)")
        return content

    @contextmanager
    def open_object(self, key: str) -> Iterator[BinaryIO]:
        try:
            reader = self._blob(key).open("rb", chunk_size=self.chunk_size)
        except google_api_exceptions.GoogleAPIError as e:
            raise TransferError(f"Unable to open gs://{self.source_bucket_name}/{key}: {e}", key=key) from e

        try:
            yield reader
        finally:
            reader.close()

    @retry_with_backoff(retries=3, exceptions=TRANSIENT_EXCEPTIONS)
    def get_size(self, key: str) -> int:
        try:
            blob = self.storage_client.bucket(self.source_bucket_name).get_blob(key)
        except google_api_exceptions.NotFound:
            return -1
        if blob is None or blob.size is None:
            return -1
        return int(blob.size)

    @retry_with_backoff(retries=3, exceptions=TRANSIENT_EXCEPTIONS)
    def exists(self, key: str) -> bool:
        return bool(self._blob(key).exists())

    def _blob(self, key: str) -> storage.Blob:
        return self.storage_client.bucket(self.source_bucket_name).blob(key)

    @property
    def has_error(self) -> bool:
        return self._has_error

    @property
    def bucket_name(self) -> str:
        return self.source_bucket_name
