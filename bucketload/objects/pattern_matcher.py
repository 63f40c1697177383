"""Glob-style matching of object keys.

Patterns use ``*`` (any run of characters, including ``/``) and ``?`` (exactly
one character). Every other character is literal. Matching is case-sensitive
and anchored at both ends of the key.
"""

import re
from typing import Dict, Optional

from bucketload.security import validate_glob_pattern

WILDCARDS = ("*", "?")


class PatternMatcher:
    """Matches object keys against glob patterns with a compiled-regex cache."""

    def __init__(self) -> None:
        self._pattern_cache: Dict[str, re.Pattern[str]] = {}

    @staticmethod
    def to_regex(pattern: str) -> str:
        """Translate a glob pattern into an anchored regular expression.

        Args:
            pattern: Glob pattern to translate

        Returns:
            Regular expression source

        Raises:
            SecurityError: If the pattern exceeds length or wildcard bounds

        Example:
            >>> PatternMatcher.to_regex("data/*.csv")
            '^data/.*\\\\.csv$'
        """
        validate_glob_pattern(pattern)

        parts = []
        for char in pattern:
            if char == "*":
                parts.append(".*")
            elif char == "?":
                parts.append(".")
            else:
                parts.append(re.escape(char))

        return "^" + "".join(parts) + "$"

    @staticmethod
    def literal_prefix(pattern: Optional[str]) -> str:
        """Return the literal part of a pattern before its first wildcard.

        Example:
            >>> PatternMatcher.literal_prefix("landing/2024-*/report?.csv")
            'landing/2024-'
        """
        if not pattern:
            return ""

        positions = [pattern.index(w) for w in WILDCARDS if w in pattern]
        return pattern[: min(positions)] if positions else pattern

    def matches(self, key: str, pattern: Optional[str]) -> bool:
        """Return True if the whole key matches the pattern.

        An empty or missing pattern matches every key.
        """
        if not pattern:
            return True

        if not key.startswith(self.literal_prefix(pattern)):
            return False

        return self._get_compiled_pattern(pattern).fullmatch(key) is not None

    def _get_compiled_pattern(self, pattern: str) -> re.Pattern[str]:
        compiled = self._pattern_cache.get(pattern)
        if compiled is None:
            compiled = re.compile(self.to_regex(pattern))
            self._pattern_cache[pattern] = compiled
        return compiled
