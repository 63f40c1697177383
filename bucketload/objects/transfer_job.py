"""Runs the whole transfer: catalog, routing, dedup planning, execution.

Pipeline::

    ObjectCatalogReader -> Router -> DedupPlanner (one plan per table)
        -> TransferExecutor (per object) -> ResultAggregator

Every table's plan is fixed before the first object is executed, so running
executors on a thread pool cannot race a dedup check.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

import pandas as pd

from bucketload.bucket.storage_provider import StorageProvider
from bucketload.bucket.warehouse_provider import WarehouseProvider
from bucketload.exceptions import ConnectivityError, PlanningError, PolicyViolation
from bucketload.logging_config import get_logger
from bucketload.objects.dedup_planner import DedupPlanner
from bucketload.objects.object_catalog import ObjectCatalogReader
from bucketload.objects.result_aggregator import ResultAggregator
from bucketload.objects.router import Router
from bucketload.objects.transfer_config import TransferConfig
from bucketload.objects.transfer_executor import TransferExecutor
from bucketload.objects.transfer_models import (
    RoutedObject,
    TransferOutcome,
    TransferPlan,
    TransferReport,
    TransferStatus,
)

logger = get_logger(__name__)


class PlannedRun:
    """Result of the planning phase of a run.

    Attributes:
        routed: Routed objects by table, before dedup
        plans: Dedup plans by table
        planning_errors: Errors of tables whose plan was abandoned
        rejected: Failed outcomes of listed objects whose key failed validation
    """

    def __init__(
        self,
        routed: Dict[str, List[RoutedObject]],
        plans: TransferPlan,
        planning_errors: Dict[str, PlanningError],
        rejected: Optional[List[TransferOutcome]] = None,
    ) -> None:
        self.routed = routed
        self.plans = plans
        self.planning_errors = planning_errors
        self.rejected = rejected or []

    @property
    def object_count(self) -> int:
        return sum(len(objects) for objects in self.routed.values())

    def summary_df(self) -> pd.DataFrame:
        """Per-table planning summary, sorted by table name.

        Returns:
            DataFrame with columns: Table, Bucket Objects, Already Transferred,
            To Transfer, Over Size Limit, Status
        """
        data_rows = []
        for table in sorted(self.routed):
            plan = self.plans.get(table)
            data_rows.append(
                {
                    "Table": table,
                    "Bucket Objects": len(self.routed[table]),
                    "Already Transferred": len(plan.duplicates) if plan else 0,
                    "To Transfer": len(plan.objects) if plan else 0,
                    "Over Size Limit": len(plan.over_limit) if plan else 0,
                    "Status": "ok" if plan else "planning failed",
                }
            )

        return pd.DataFrame(
            data_rows,
            columns=["Table", "Bucket Objects", "Already Transferred", "To Transfer", "Over Size Limit", "Status"],
        )


class TransferJob:
    """Orchestrates one transfer run from a bucket prefix into the warehouse.

    The warehouse session is opened at the start of run()/build_plan() and
    closed on every exit path.

    Attributes:
        store: Object store to read from
        warehouse: Warehouse to write into
        config: Routing patterns and transfer settings
        prefix: Key prefix listed in the bucket
        max_workers: Number of concurrent transfers; 1 runs sequentially
    """

    def __init__(
        self,
        store: StorageProvider,
        warehouse: WarehouseProvider,
        config: TransferConfig,
        prefix: str = "",
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.store = store
        self.warehouse = warehouse
        self.config = config
        self.prefix = prefix
        self.max_workers = max_workers

        self.catalog = ObjectCatalogReader(store)
        self.router = Router(config.patterns, config.default_table)
        self.planner = DedupPlanner(warehouse)
        self.executor = TransferExecutor(store, warehouse, config.stream_threshold_bytes)

    def check_store(self) -> None:
        """Raise ConnectivityError if the object store is unusable."""
        if self.store.has_error or not self.store.test_connection():
            raise ConnectivityError(f"Unable to access bucket {self.store.bucket_name}")

    def build_plan(self) -> PlannedRun:
        """Run catalog, routing and dedup planning without transferring.

        Raises:
            ConnectivityError: If the store or warehouse cannot be reached
        """
        self.check_store()
        with self.warehouse:
            return self._plan()

    def run(self) -> TransferReport:
        """Run the full transfer and return the summary report.

        Raises:
            ConnectivityError: If the store or warehouse cannot be reached;
                nothing is transferred in that case
        """
        self.check_store()

        with self.warehouse:
            planned = self._plan()
            aggregator = ResultAggregator()
            aggregator.aggregate(planned.rejected)

            for table, error in planned.planning_errors.items():
                for obj in planned.routed[table]:
                    aggregator.record(
                        TransferOutcome(
                            table=table,
                            key=obj.key,
                            status=TransferStatus.FAILED,
                            error=str(error),
                            size=obj.size,
                        )
                    )

            for plan in planned.plans.values():
                for obj in plan.duplicates:
                    logger.info(f"Skipping {obj.key} (already in {plan.table})")
                    aggregator.record(
                        TransferOutcome(
                            table=plan.table,
                            key=obj.key,
                            status=TransferStatus.SKIPPED_DUPLICATE,
                            size=obj.size,
                        )
                    )
                for obj in plan.over_limit:
                    violation = PolicyViolation(obj.key, obj.size, obj.max_file_size)
                    logger.info(f"Skipping {obj.key} (size policy): {violation}")
                    aggregator.record(
                        TransferOutcome(
                            table=plan.table,
                            key=obj.key,
                            status=TransferStatus.SKIPPED_POLICY,
                            error=str(violation),
                            size=obj.size,
                        )
                    )

            work = [(plan.table, obj) for plan in planned.plans.values() for obj in plan.objects]
            for outcome in self._execute_all(work):
                aggregator.record(outcome)

        report = aggregator.report(list(planned.planning_errors))
        self._log_summary(report)
        return report

    def _plan(self) -> PlannedRun:
        candidates = self.catalog.read(self.prefix)
        routed = self.router.route(candidates)
        for table, objects in sorted(routed.items()):
            logger.info(f"Routed {len(objects)} objects to table {table}")

        rejected: List[TransferOutcome] = []
        for candidate, message in self.catalog.rejected:
            table, routed_object = self.router.route_object(candidate)
            rejected.append(
                TransferOutcome(
                    table=table,
                    key=routed_object.key,
                    status=TransferStatus.FAILED,
                    error=message,
                    size=routed_object.size,
                )
            )

        plans, planning_errors = self.planner.plan_all(routed)
        return PlannedRun(routed, plans, planning_errors, rejected)

    def _execute_all(self, work: List[Tuple[str, RoutedObject]]) -> List[TransferOutcome]:
        if self.max_workers == 1 or len(work) <= 1:
            return [self.executor.execute(table, obj) for table, obj in work]

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="bucketload") as pool:
            return list(pool.map(lambda item: self.executor.execute(*item), work))

    @staticmethod
    def _log_summary(report: TransferReport) -> None:
        logger.info("Transfer completed:")
        logger.info(f"  - Copied: {report.totals.copied}")
        logger.info(f"  - Skipped (already transferred): {report.totals.skipped_duplicate}")
        logger.info(f"  - Skipped (size policy): {report.totals.skipped_policy}")
        logger.info(f"  - Failed: {report.totals.failed}")
        for table in report.abandoned_tables:
            logger.error(f"  - Plan abandoned for table {table}")
