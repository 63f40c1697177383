"""Assigns candidate objects to destination tables."""

from typing import Dict, Iterable, List, Optional, Tuple

from bucketload.objects.pattern_matcher import PatternMatcher
from bucketload.objects.transfer_config import DEFAULT_TABLE_NAME, FilePattern
from bucketload.objects.transfer_models import CandidateObject, RoutedObject


class Router:
    """Routes objects to tables using the first enabled matching pattern.

    Routing is pure: no I/O and no mutation of inputs, so the same objects and
    patterns always produce the same assignment.

    Attributes:
        patterns: Enabled patterns in declaration order
        default_table: Destination for objects no pattern matches
        matcher: Pattern matcher used to test keys

    Example:
        >>> router = Router([FilePattern(pattern="*.csv", target_table="T_CSV")], "T_OTHER")
        >>> routed = router.route([CandidateObject(key="a.csv", size=1)])
        >>> list(routed)
        ['T_CSV']
    """

    def __init__(
        self,
        patterns: Iterable[FilePattern],
        default_table: str = DEFAULT_TABLE_NAME,
        matcher: Optional[PatternMatcher] = None,
    ) -> None:
        self.patterns: List[FilePattern] = [p for p in patterns if p.is_enabled]
        self.default_table = default_table
        self.matcher = matcher or PatternMatcher()

    def match(self, key: str) -> Optional[FilePattern]:
        """Return the first enabled pattern matching key, or None."""
        for file_pattern in self.patterns:
            if self.matcher.matches(key, file_pattern.pattern):
                return file_pattern
        return None

    def route_object(self, candidate: CandidateObject) -> Tuple[str, RoutedObject]:
        """Return the destination table and routed form of one object."""
        file_pattern = self.match(candidate.key)

        if file_pattern is None:
            return self.default_table, RoutedObject(key=candidate.key, size=candidate.size)

        return file_pattern.target_table, RoutedObject(
            key=candidate.key,
            size=candidate.size,
            pattern=file_pattern.pattern,
            max_file_size=file_pattern.max_file_size,
            processing_mode=file_pattern.processing_mode,
        )

    def route(self, objects: Iterable[CandidateObject]) -> Dict[str, List[RoutedObject]]:
        """Group objects by destination table.

        Args:
            objects: Candidate objects

        Returns:
            Mapping of table name to its routed objects, in input order
        """
        routed: Dict[str, List[RoutedObject]] = {}
        for candidate in objects:
            table, routed_object = self.route_object(candidate)
            routed.setdefault(table, []).append(routed_object)
        return routed
