"""Accumulates transfer outcomes into per-table and per-run counts."""

import threading
from typing import Dict, Iterable, List, Optional

import pandas as pd

from bucketload.objects.transfer_models import (
    TransferCounts,
    TransferOutcome,
    TransferReport,
)


class ResultAggregator:
    """Thread-safe outcome counter.

    Recording never raises; a failed transfer only increments ``failed``.

    Example:
        >>> aggregator = ResultAggregator().aggregate(outcomes)
        >>> aggregator.totals().copied
        2
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tables: Dict[str, TransferCounts] = {}

    def record(self, outcome: TransferOutcome) -> None:
        with self._lock:
            counts = self._tables.setdefault(outcome.table, TransferCounts())
            counts.add(outcome.status)

    def aggregate(self, outcomes: Iterable[TransferOutcome]) -> "ResultAggregator":
        """Record every outcome and return self."""
        for outcome in outcomes:
            self.record(outcome)
        return self

    def counts_for(self, table: str) -> TransferCounts:
        with self._lock:
            return self._tables.get(table, TransferCounts()).model_copy()

    def totals(self) -> TransferCounts:
        with self._lock:
            totals = TransferCounts()
            for counts in self._tables.values():
                totals = totals.merge(counts)
            return totals

    def report(self, abandoned_tables: Optional[List[str]] = None) -> TransferReport:
        with self._lock:
            tables = {name: counts.model_copy() for name, counts in sorted(self._tables.items())}
        totals = TransferCounts()
        for counts in tables.values():
            totals = totals.merge(counts)
        return TransferReport(
            tables=tables,
            totals=totals,
            abandoned_tables=sorted(abandoned_tables or []),
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Per-table counts for display, sorted by table name.

        Returns:
            DataFrame with columns: Table, Copied, Skipped Duplicate,
            Skipped Policy, Failed
        """
        report = self.report()
        data_rows = [
            {
                "Table": table,
                "Copied": counts.copied,
                "Skipped Duplicate": counts.skipped_duplicate,
                "Skipped Policy": counts.skipped_policy,
                "Failed": counts.failed,
            }
            for table, counts in report.tables.items()
        ]
        return pd.DataFrame(
            data_rows,
            columns=["Table", "Copied", "Skipped Duplicate", "Skipped Policy", "Failed"],
        )
