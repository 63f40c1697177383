"""Amazon S3 (and S3-compatible) object store.

This module provides the S3Manager class, the S3 implementation of
StorageProvider. Custom endpoints with path-style addressing cover
S3-compatible on-premise stores.
"""

from contextlib import contextmanager
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, EndpointConnectionError

from bucketload.bucket.retry_utils import retry_with_backoff
from bucketload.bucket.storage_provider import StorageProvider
from bucketload.exceptions import ConnectivityError, TransferError
from bucketload.logging_config import get_logger

logger = get_logger(__name__)

# botocore retries throttling itself; connection drops are retried here
TRANSIENT_EXCEPTIONS = (EndpointConnectionError,)

NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


class S3Manager(StorageProvider):
    """S3 implementation of StorageProvider.

    Attributes:
        s3_client: boto3 S3 client
        source_bucket_name: Name of the bucket to read from
        page_size: Number of keys requested per listing page
    """

    def __init__(
        self,
        source_bucket_name: str,
        endpoint_url: Optional[str] = None,
        region_name: Optional[str] = None,
        force_path_style: bool = False,
        page_size: int = 1000,
    ) -> None:
        """Initialize S3 client and verify bucket access.

        Credentials come from the default AWS credential chain (environment,
        shared credentials file, instance role).

        Args:
            source_bucket_name: Bucket to read from
            endpoint_url: Custom endpoint for S3-compatible stores
            region_name: AWS region
            force_path_style: Use path-style addressing (required by most
                S3-compatible stores)
            page_size: Number of keys per listing page

        Note:
            Sets has_error=True if the bucket cannot be accessed.
        """
        client_config = Config(s3={"addressing_style": "path" if force_path_style else "auto"})
        self.s3_client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region_name,
            config=client_config,
        )
        self.source_bucket_name = source_bucket_name
        self.page_size = page_size
        self._has_error = not self.test_connection()

    def test_connection(self) -> bool:
        try:
            self.s3_client.list_objects_v2(Bucket=self.source_bucket_name, MaxKeys=1)
            logger.info(f"Found S3 bucket: {self.source_bucket_name}")
            return True
        except ClientError as e:
            logger.error(f"S3 access to bucket {self.source_bucket_name} failed: {e}")
        except BotoCoreError as e:
            logger.error(f"Error connecting to S3: {e}")
        return False

    @retry_with_backoff(retries=3, exceptions=TRANSIENT_EXCEPTIONS)
    def _list_page(
        self, prefix: str, continuation_token: Optional[str]
    ) -> Tuple[List[Tuple[str, int]], Optional[str]]:
        """Fetch one listing page and the continuation token of the next one."""
        request: Dict[str, Any] = {
            "Bucket": self.source_bucket_name,
            "Prefix": prefix,
            "MaxKeys": self.page_size,
        }
        if continuation_token:
            request["ContinuationToken"] = continuation_token

        response = self.s3_client.list_objects_v2(**request)
        entries = [(item["Key"], int(item.get("Size", 0))) for item in response.get("Contents", [])]
        next_token = response.get("NextContinuationToken") if response.get("IsTruncated") else None
        return entries, next_token

    def list_with_prefix(self, prefix: str = "") -> Iterator[Tuple[str, int]]:
        continuation_token: Optional[str] = None
        page_count = 0

        while True:
            try:
                entries, continuation_token = self._list_page(prefix, continuation_token)
            except (ClientError, BotoCoreError) as e:
                self._has_error = True
                raise ConnectivityError(f"Unable to list s3://{self.source_bucket_name}/{prefix}: {e}") from e

            page_count += 1
            logger.debug(f"Listed page {page_count} with {len(entries)} objects under '{prefix}'")
            yield from entries

            if not continuation_token:
                break

    def read_object(self, key: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.source_bucket_name, Key=key)
            content = response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise TransferError(f"Unable to download s3://{self.source_bucket_name}/{key}: {e}", key=key) from e

        logger.debug(f"Downloaded {key} ({len(content)} bytes)")
        return content

    @contextmanager
    def open_object(self, key: str) -> Iterator[BinaryIO]:
        try:
            response = self.s3_client.get_object(Bucket=self.source_bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise TransferError(f"Unable to open s3://{self.source_bucket_name}/{key}: {e}", key=key) from e

        body = response["Body"]
        try:
            yield body
        finally:
            body.close()

    def get_size(self, key: str) -> int:
        try:
            response = self.s3_client.head_object(Bucket=self.source_bucket_name, Key=key)
            return int(response["ContentLength"])
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in NOT_FOUND_CODES:
                logger.error(f"Error getting size for key {key}: {e}")
            return -1

    def exists(self, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.source_bucket_name, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in NOT_FOUND_CODES:
                logger.debug(f"Object does not exist: {key}")
                return False
            raise

    @property
    def has_error(self) -> bool:
        return self._has_error

    @property
    def bucket_name(self) -> str:
        return self.source_bucket_name
