"""Tests for per-table dedup planning."""

from typing import Dict, List, Set
from unittest.mock import Mock

import pytest

from bucketload.bucket.warehouse_provider import WarehouseProvider
from bucketload.exceptions import PlanningError
from bucketload.objects.dedup_planner import DedupPlanner
from bucketload.objects.transfer_models import RoutedObject


def routed(*keys: str) -> List[RoutedObject]:
    return [RoutedObject(key=key, size=1) for key in keys]


def warehouse_with(existing: Dict[str, Set[str]]) -> Mock:
    warehouse = Mock(spec=WarehouseProvider)
    warehouse.query_distinct_keys.side_effect = lambda table: existing.get(table, set())
    return warehouse


@pytest.mark.unit
class TestDedupPlanner:
    """Test DedupPlanner.plan and plan_all."""

    def test_existing_keys_become_duplicates(self) -> None:
        """Test that recorded keys are excluded from the objects to transfer."""
        planner = DedupPlanner(warehouse_with({"T_CSV": {"a.csv"}}))

        plan = planner.plan("T_CSV", routed("b.csv", "a.csv", "c.csv"))

        assert [o.key for o in plan.objects] == ["b.csv", "c.csv"]
        assert [o.key for o in plan.duplicates] == ["a.csv"]

    def test_objects_over_ceiling_split_out(self) -> None:
        """Test that new objects larger than their ceiling are kept out of the copy list."""
        planner = DedupPlanner(warehouse_with({"T": {"old.bin"}}))
        objects = [
            RoutedObject(key="big.bin", size=6, max_file_size=5),
            RoutedObject(key="fits.bin", size=5, max_file_size=5),
            RoutedObject(key="old.bin", size=6, max_file_size=5),
        ]

        plan = planner.plan("T", objects)

        assert [o.key for o in plan.objects] == ["fits.bin"]
        assert [o.key for o in plan.over_limit] == ["big.bin"]
        assert [o.key for o in plan.duplicates] == ["old.bin"]

    def test_objects_sorted_by_key(self) -> None:
        planner = DedupPlanner(warehouse_with({}))

        plan = planner.plan("T", routed("z", "m", "a"))

        assert [o.key for o in plan.objects] == ["a", "m", "z"]

    def test_ensure_table_before_query(self) -> None:
        """Test that the table is created before its keys are read."""
        warehouse = warehouse_with({})
        calls: List[str] = []
        warehouse.ensure_table.side_effect = lambda table: calls.append("ensure")
        warehouse.query_distinct_keys.side_effect = lambda table: calls.append("query") or set()

        DedupPlanner(warehouse).plan("T", routed("a"))

        assert calls == ["ensure", "query"]

    def test_unexpected_error_wrapped_in_planning_error(self) -> None:
        """Test that any warehouse failure surfaces as a PlanningError."""
        warehouse = warehouse_with({})
        warehouse.query_distinct_keys.side_effect = RuntimeError("boom")

        with pytest.raises(PlanningError) as exc_info:
            DedupPlanner(warehouse).plan("T_CSV", routed("a"))

        assert exc_info.value.table == "T_CSV"
        assert "boom" in str(exc_info.value)

    def test_plan_all_isolates_failing_table(self) -> None:
        """Test that one failing table does not stop the others."""
        warehouse = warehouse_with({})

        def query(table: str) -> Set[str]:
            if table == "T_BAD":
                raise PlanningError(table, "permission denied")
            return set()

        warehouse.query_distinct_keys.side_effect = query

        plans, errors = DedupPlanner(warehouse).plan_all(
            {"T_BAD": routed("a"), "T_GOOD": routed("b")}
        )

        assert list(plans) == ["T_GOOD"]
        assert list(errors) == ["T_BAD"]
        assert "permission denied" in str(errors["T_BAD"])
