"""Reads the candidate object set from the object store."""

from typing import List, Tuple

from bucketload.bucket.storage_provider import StorageProvider
from bucketload.logging_config import get_logger
from bucketload.objects.transfer_models import CandidateObject
from bucketload.security import SecurityError, validate_object_key

logger = get_logger(__name__)


class ObjectCatalogReader:
    """Drains the paginated listing of a bucket prefix into candidate objects.

    Folder placeholder keys (ending in ``/``) are not candidates. Keys failing
    validation are logged and kept in ``rejected`` with the validation message,
    so the run can report them as failed.

    Attributes:
        store: Object store to list
        rejected: Objects of the last read whose key failed validation
    """

    def __init__(self, store: StorageProvider) -> None:
        self.store = store
        self.rejected: List[Tuple[CandidateObject, str]] = []

    def read(self, prefix: str = "") -> List[CandidateObject]:
        """List every object under prefix.

        Args:
            prefix: Native key prefix filter

        Returns:
            Candidate objects sorted by key

        Raises:
            ConnectivityError: If the store cannot be listed
        """
        logger.info(f"Listing objects in bucket {self.store.bucket_name} with prefix '{prefix}'")

        candidates: List[CandidateObject] = []
        self.rejected = []
        for key, size in self.store.list_with_prefix(prefix):
            if key.endswith("/"):
                continue
            try:
                validate_object_key(key)
            except SecurityError as e:
                logger.error(f"Rejecting object: {e}")
                self.rejected.append((CandidateObject(key=key, size=size), str(e)))
                continue
            candidates.append(CandidateObject(key=key, size=size))

        candidates.sort(key=lambda c: c.key)
        logger.info(f"Found {len(candidates)} objects in bucket {self.store.bucket_name}")
        return candidates
