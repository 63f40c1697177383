"""Models flowing through the transfer pipeline.

CandidateObject and RoutedObject describe what the object store holds,
TablePlan what will be written, and TransferOutcome/TransferCounts/
TransferReport what happened.
"""

import posixpath
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from bucketload.objects.transfer_config import ProcessingMode

Strategy = Literal["buffered", "streamed"]


class CandidateObject(BaseModel):
    """Object discovered in the bucket during this run.

    Attributes:
        key: Full object key, used as the dedup identifier
        size: Object size in bytes
    """

    model_config = ConfigDict(frozen=True)

    key: str
    size: int = Field(ge=0)

    @property
    def file_name(self) -> str:
        """Last path segment of the key.

        Example:
            >>> CandidateObject(key="landing/2024/a.csv", size=1).file_name
            'a.csv'
        """
        return posixpath.basename(self.key) or self.key


class RoutedObject(CandidateObject):
    """Candidate object with the rule that routed it.

    Attributes:
        pattern: Pattern that matched, None when routed to the default table
        max_file_size: Size ceiling of the matching pattern; 0 means unlimited
        processing_mode: Processing mode of the matching pattern
    """

    pattern: Optional[str] = None
    max_file_size: int = Field(default=0, ge=0)
    processing_mode: ProcessingMode = "buffered"

    @property
    def exceeds_ceiling(self) -> bool:
        """True when the object is strictly larger than a non-zero ceiling."""
        return self.max_file_size > 0 and self.size > self.max_file_size


class TablePlan(BaseModel):
    """Objects to transfer into one table after removing prior transfers.

    Attributes:
        table: Destination table name
        objects: Objects to copy, sorted by key
        duplicates: Objects already recorded in the table, sorted by key
        over_limit: New objects larger than their pattern ceiling, sorted by key
    """

    table: str
    objects: List[RoutedObject] = Field(default_factory=list)
    duplicates: List[RoutedObject] = Field(default_factory=list)
    over_limit: List[RoutedObject] = Field(default_factory=list)


TransferPlan = Dict[str, TablePlan]


class TransferStatus(str, Enum):
    """Final status of one object in one run."""

    COPIED = "copied"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    SKIPPED_POLICY = "skipped_policy"
    FAILED = "failed"


class TransferOutcome(BaseModel):
    """Result of handling one object. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    table: str
    key: str
    status: TransferStatus
    error: Optional[str] = None
    size: int = 0
    strategy: Optional[Strategy] = None


class TransferCounts(BaseModel):
    """Per-status counters for a table or a whole run."""

    copied: int = 0
    skipped_duplicate: int = 0
    skipped_policy: int = 0
    failed: int = 0

    @property
    def skipped(self) -> int:
        return self.skipped_duplicate + self.skipped_policy

    @property
    def total(self) -> int:
        return self.copied + self.skipped + self.failed

    def add(self, status: TransferStatus) -> None:
        """Increment the counter matching status."""
        if status is TransferStatus.COPIED:
            self.copied += 1
        elif status is TransferStatus.SKIPPED_DUPLICATE:
            self.skipped_duplicate += 1
        elif status is TransferStatus.SKIPPED_POLICY:
            self.skipped_policy += 1
        else:
            self.failed += 1

    def merge(self, other: "TransferCounts") -> "TransferCounts":
        """Return a new TransferCounts summing self and other."""
        return TransferCounts(
            copied=self.copied + other.copied,
            skipped_duplicate=self.skipped_duplicate + other.skipped_duplicate,
            skipped_policy=self.skipped_policy + other.skipped_policy,
            failed=self.failed + other.failed,
        )


class TransferReport(BaseModel):
    """Summary of a run: counts per table, totals and abandoned tables."""

    tables: Dict[str, TransferCounts] = Field(default_factory=dict)
    totals: TransferCounts = Field(default_factory=TransferCounts)
    abandoned_tables: List[str] = Field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return self.totals.failed > 0 or len(self.abandoned_tables) > 0
