"""Removes objects already transferred from each table's candidates."""

from typing import Dict, Iterable, List, Set, Tuple

from bucketload.bucket.warehouse_provider import WarehouseProvider
from bucketload.exceptions import PlanningError
from bucketload.logging_config import get_logger
from bucketload.objects.transfer_models import RoutedObject, TablePlan, TransferPlan

logger = get_logger(__name__)


class DedupPlanner:
    """Builds per-table transfer plans against the warehouse's recorded keys.

    The only warehouse side effect is the idempotent table creation.

    Attributes:
        warehouse: Warehouse holding previously transferred objects
    """

    def __init__(self, warehouse: WarehouseProvider) -> None:
        self.warehouse = warehouse

    def plan(self, table: str, candidates: Iterable[RoutedObject]) -> TablePlan:
        """Plan one table.

        Args:
            table: Destination table name
            candidates: Objects routed to the table

        Returns:
            TablePlan with objects to copy, duplicates and oversized objects,
            each sorted by key

        Raises:
            PlanningError: If the table cannot be created or its keys read
        """
        try:
            self.warehouse.ensure_table(table)
            existing_keys: Set[str] = self.warehouse.query_distinct_keys(table)
        except PlanningError:
            raise
        except Exception as e:
            raise PlanningError(table, str(e)) from e

        objects: List[RoutedObject] = []
        duplicates: List[RoutedObject] = []
        over_limit: List[RoutedObject] = []
        for candidate in sorted(candidates, key=lambda c: c.key):
            if candidate.key in existing_keys:
                duplicates.append(candidate)
            elif candidate.exceeds_ceiling:
                over_limit.append(candidate)
            else:
                objects.append(candidate)

        logger.info(
            f"Table {table}: {len(objects)} to transfer, {len(duplicates)} already transferred, "
            f"{len(over_limit)} over size limit"
        )
        return TablePlan(table=table, objects=objects, duplicates=duplicates, over_limit=over_limit)

    def plan_all(
        self, routed: Dict[str, List[RoutedObject]]
    ) -> Tuple[TransferPlan, Dict[str, PlanningError]]:
        """Plan every routed table; a failing table does not stop the others.

        Returns:
            (plans by table, planning errors by table)
        """
        plans: TransferPlan = {}
        errors: Dict[str, PlanningError] = {}

        for table in sorted(routed):
            try:
                plans[table] = self.plan(table, routed[table])
            except PlanningError as e:
                logger.error(str(e))
                errors[table] = e

        return plans, errors
