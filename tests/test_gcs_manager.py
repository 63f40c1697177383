"""Tests for the GCS object store."""

from typing import Generator, List, Optional
from unittest.mock import MagicMock, Mock, patch

import pytest
from google.api_core import exceptions as google_api_exceptions

from bucketload.bucket.gcs_manager import GcsManager
from bucketload.exceptions import ConnectivityError, TransferError


def blob(name: str, size: Optional[int]) -> Mock:
    mock_blob = Mock()
    mock_blob.name = name
    mock_blob.size = size
    return mock_blob


def page_iterator(blobs: List[Mock], next_page_token: Optional[str]) -> Mock:
    iterator = Mock()
    iterator.pages = iter([blobs])
    iterator.next_page_token = next_page_token
    return iterator


@pytest.fixture
def mock_client() -> Generator[MagicMock, None, None]:
    with patch("bucketload.bucket.gcs_manager.storage.Client") as mock_client_class:
        client = MagicMock()
        client.list_blobs.return_value = []
        mock_client_class.return_value = client
        yield client


@pytest.fixture
def no_sleep() -> Generator[MagicMock, None, None]:
    with patch("bucketload.bucket.retry_utils.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.mark.unit
class TestGcsManagerInit:
    """Test GcsManager connection check."""

    def test_accessible_bucket(self, mock_client: MagicMock) -> None:
        manager = GcsManager("test-project", "test-bucket")

        assert not manager.has_error
        assert manager.bucket_name == "test-bucket"
        mock_client.list_blobs.assert_called_once_with("test-bucket", max_results=1)

    def test_unauthenticated(self, mock_client: MagicMock) -> None:
        """Test that authentication failures set has_error."""
        mock_client.list_blobs.side_effect = google_api_exceptions.Unauthenticated("no creds")

        assert GcsManager("test-project", "test-bucket").has_error

    def test_missing_bucket(self, mock_client: MagicMock) -> None:
        mock_client.list_blobs.side_effect = google_api_exceptions.NotFound("no bucket")

        assert GcsManager("test-project", "test-bucket").has_error


@pytest.mark.unit
class TestListWithPrefix:
    """Test paginated listing."""

    def test_follows_page_tokens(self, mock_client: MagicMock) -> None:
        """Test that every page is listed until the token runs out."""
        manager = GcsManager("test-project", "test-bucket", page_size=2)
        mock_client.list_blobs.side_effect = [
            page_iterator([blob("landing/a.csv", 1), blob("landing/b.csv", 2)], "token-2"),
            page_iterator([blob("landing/c.csv", None)], None),
        ]

        entries = list(manager.list_with_prefix("landing/"))

        assert entries == [("landing/a.csv", 1), ("landing/b.csv", 2), ("landing/c.csv", 0)]
        second_call = mock_client.list_blobs.call_args_list[1]
        assert second_call.kwargs["page_token"] == "token-2"
        assert second_call.kwargs["prefix"] == "landing/"
        assert second_call.kwargs["page_size"] == 2

    def test_empty_bucket(self, mock_client: MagicMock) -> None:
        manager = GcsManager("test-project", "test-bucket")
        mock_client.list_blobs.side_effect = [page_iterator([], None)]

        assert list(manager.list_with_prefix()) == []

    def test_transient_error_retried(self, mock_client: MagicMock, no_sleep: Mock) -> None:
        """Test that listing retries transient GCS errors."""
        manager = GcsManager("test-project", "test-bucket")
        mock_client.list_blobs.side_effect = [
            google_api_exceptions.ServiceUnavailable("try again"),
            page_iterator([blob("a", 1)], None),
        ]

        assert list(manager.list_with_prefix()) == [("a", 1)]
        assert no_sleep.call_count == 1

    def test_permission_denied_is_connectivity_error(self, mock_client: MagicMock) -> None:
        manager = GcsManager("test-project", "test-bucket")
        mock_client.list_blobs.side_effect = google_api_exceptions.PermissionDenied("denied")

        with pytest.raises(ConnectivityError):
            list(manager.list_with_prefix())

        assert manager.has_error

    def test_exhausted_retries_are_connectivity_error(self, mock_client: MagicMock, no_sleep: Mock) -> None:
        manager = GcsManager("test-project", "test-bucket")
        mock_client.list_blobs.side_effect = google_api_exceptions.ServiceUnavailable("down")

        with pytest.raises(ConnectivityError):
            list(manager.list_with_prefix())

        assert no_sleep.call_count == 3


@pytest.mark.unit
class TestObjectReads:
    """Test whole and streamed object reads."""

    def test_read_object(self, mock_client: MagicMock) -> None:
        manager = GcsManager("test-project", "test-bucket")
        mock_client.bucket.return_value.blob.return_value.download_as_bytes.return_value = b"abc"

        assert manager.read_object("a.csv") == b"abc"
        mock_client.bucket.return_value.blob.assert_called_with("a.csv")

    def test_read_object_failure(self, mock_client: MagicMock) -> None:
        """Test that download errors become TransferError."""
        manager = GcsManager("test-project", "test-bucket")
        mock_client.bucket.return_value.blob.return_value.download_as_bytes.side_effect = (
            google_api_exceptions.NotFound("gone")
        )

        with pytest.raises(TransferError) as exc_info:
            manager.read_object("a.csv")

        assert exc_info.value.key == "a.csv"

    def test_open_object_closes_reader(self, mock_client: MagicMock) -> None:
        """Test that the streaming reader is closed after use."""
        manager = GcsManager("test-project", "test-bucket", chunk_size=1024)
        reader = MagicMock()
        mock_client.bucket.return_value.blob.return_value.open.return_value = reader

        with manager.open_object("big.bin") as stream:
            assert stream is reader

        mock_client.bucket.return_value.blob.return_value.open.assert_called_once_with("rb", chunk_size=1024)
        reader.close.assert_called_once()

    def test_get_size(self, mock_client: MagicMock) -> None:
        manager = GcsManager("test-project", "test-bucket")
        mock_client.bucket.return_value.get_blob.return_value = blob("a", 42)

        assert manager.get_size("a") == 42

    def test_get_size_missing(self, mock_client: MagicMock) -> None:
        manager = GcsManager("test-project", "test-bucket")
        mock_client.bucket.return_value.get_blob.return_value = None

        assert manager.get_size("a") == -1

    def test_exists(self, mock_client: MagicMock) -> None:
        manager = GcsManager("test-project", "test-bucket")
        mock_client.bucket.return_value.blob.return_value.exists.return_value = True

        assert manager.exists("a")
