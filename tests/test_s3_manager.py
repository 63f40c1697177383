"""Tests for the S3 object store."""

from typing import Generator
from unittest.mock import MagicMock, Mock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from bucketload.bucket.s3_manager import S3Manager
from bucketload.exceptions import ConnectivityError, TransferError


def client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def mock_boto_client() -> Generator[MagicMock, None, None]:
    with patch("bucketload.bucket.s3_manager.boto3.client") as mock_client_factory:
        client = MagicMock()
        mock_client_factory.return_value = client
        yield mock_client_factory


@pytest.fixture
def s3_client(mock_boto_client: MagicMock) -> MagicMock:
    return mock_boto_client.return_value


@pytest.mark.unit
class TestS3ManagerInit:
    """Test S3Manager client setup."""

    def test_path_style_endpoint(self, mock_boto_client: MagicMock) -> None:
        """Test that custom endpoints get path-style addressing."""
        manager = S3Manager("bucket", endpoint_url="http://minio:9000", region_name="us-east-1", force_path_style=True)

        kwargs = mock_boto_client.call_args.kwargs
        assert kwargs["endpoint_url"] == "http://minio:9000"
        assert kwargs["region_name"] == "us-east-1"
        assert kwargs["config"].s3 == {"addressing_style": "path"}
        assert not manager.has_error

    def test_access_denied_sets_error(self, s3_client: MagicMock) -> None:
        s3_client.list_objects_v2.side_effect = client_error("AccessDenied", "ListObjectsV2")

        assert S3Manager("bucket").has_error


@pytest.mark.unit
class TestListWithPrefix:
    """Test paginated listing."""

    def test_follows_continuation_tokens(self, s3_client: MagicMock) -> None:
        """Test that truncated responses are followed with their token."""
        manager = S3Manager("bucket", page_size=2)
        s3_client.list_objects_v2.reset_mock()
        s3_client.list_objects_v2.side_effect = [
            {
                "Contents": [{"Key": "p/a", "Size": 1}, {"Key": "p/b", "Size": 2}],
                "IsTruncated": True,
                "NextContinuationToken": "token-2",
            },
            {"Contents": [{"Key": "p/c", "Size": 3}], "IsTruncated": False},
        ]

        entries = list(manager.list_with_prefix("p/"))

        assert entries == [("p/a", 1), ("p/b", 2), ("p/c", 3)]
        first, second = s3_client.list_objects_v2.call_args_list
        assert "ContinuationToken" not in first.kwargs
        assert second.kwargs["ContinuationToken"] == "token-2"
        assert second.kwargs["MaxKeys"] == 2
        assert second.kwargs["Prefix"] == "p/"

    def test_empty_prefix(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        s3_client.list_objects_v2.side_effect = [{"KeyCount": 0, "IsTruncated": False}]

        assert list(manager.list_with_prefix()) == []

    def test_connection_drop_retried(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        s3_client.list_objects_v2.side_effect = [
            EndpointConnectionError(endpoint_url="http://s3"),
            {"Contents": [{"Key": "a", "Size": 1}], "IsTruncated": False},
        ]

        with patch("bucketload.bucket.retry_utils.time.sleep"):
            assert list(manager.list_with_prefix()) == [("a", 1)]

    def test_client_error_is_connectivity_error(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        s3_client.list_objects_v2.side_effect = client_error("AccessDenied", "ListObjectsV2")

        with pytest.raises(ConnectivityError):
            list(manager.list_with_prefix())

        assert manager.has_error


@pytest.mark.unit
class TestObjectReads:
    """Test whole and streamed object reads."""

    def test_read_object(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        s3_client.get_object.return_value = {"Body": Mock(read=Mock(return_value=b"abc"))}

        assert manager.read_object("a") == b"abc"
        s3_client.get_object.assert_called_once_with(Bucket="bucket", Key="a")

    def test_read_missing_object(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        s3_client.get_object.side_effect = client_error("NoSuchKey", "GetObject")

        with pytest.raises(TransferError):
            manager.read_object("a")

    def test_open_object_closes_body(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        body = MagicMock()
        s3_client.get_object.return_value = {"Body": body}

        with manager.open_object("a") as stream:
            assert stream is body

        body.close.assert_called_once()

    def test_get_size(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        s3_client.head_object.return_value = {"ContentLength": 42}

        assert manager.get_size("a") == 42

    def test_get_size_missing(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        s3_client.head_object.side_effect = client_error("404")

        assert manager.get_size("a") == -1

    def test_exists(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        s3_client.head_object.side_effect = [{"ContentLength": 1}, client_error("NotFound")]

        assert manager.exists("a")
        assert not manager.exists("b")

    def test_exists_other_errors_raise(self, s3_client: MagicMock) -> None:
        manager = S3Manager("bucket")
        s3_client.head_object.side_effect = client_error("AccessDenied")

        with pytest.raises(ClientError):
            manager.exists("a")
