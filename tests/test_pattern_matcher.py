"""Tests for glob matching of object keys."""

import pytest

from bucketload.objects.pattern_matcher import PatternMatcher
from bucketload.security import SecurityError


@pytest.mark.unit
class TestToRegex:
    """Test PatternMatcher.to_regex."""

    def test_wildcards_translate(self) -> None:
        """Test that * and ? become .* and ."""
        assert PatternMatcher.to_regex("a*b?") == "^a.*b.$"

    def test_literal_characters_escaped(self) -> None:
        """Test that regex metacharacters are literal."""
        assert PatternMatcher.to_regex("a.csv") == r"^a\.csv$"

    def test_overlong_pattern_rejected(self) -> None:
        """Test that pattern bounds are enforced before compiling."""
        with pytest.raises(SecurityError):
            PatternMatcher.to_regex("*" * 100)


@pytest.mark.unit
class TestMatches:
    """Test PatternMatcher.matches."""

    @pytest.fixture
    def matcher(self) -> PatternMatcher:
        return PatternMatcher()

    def test_star_matches_across_slashes(self, matcher: PatternMatcher) -> None:
        """Test that * spans path separators."""
        assert matcher.matches("landing/2024/01/a.csv", "landing/*.csv")

    def test_question_mark_matches_one_character(self, matcher: PatternMatcher) -> None:
        """Test that ? matches exactly one character."""
        assert matcher.matches("file1.txt", "file?.txt")
        assert not matcher.matches("file10.txt", "file?.txt")
        assert not matcher.matches("file.txt", "file?.txt")

    def test_match_is_anchored(self, matcher: PatternMatcher) -> None:
        """Test that the whole key has to match."""
        assert not matcher.matches("a.csv.gz", "*.csv")
        assert not matcher.matches("x/a.csv", "a.csv")

    def test_match_is_case_sensitive(self, matcher: PatternMatcher) -> None:
        """Test that case differences do not match."""
        assert not matcher.matches("A.CSV", "*.csv")

    def test_regex_metacharacters_are_literal(self, matcher: PatternMatcher) -> None:
        """Test that dots and brackets in patterns are not regex syntax."""
        assert matcher.matches("report[1].csv", "report[1].csv")
        assert not matcher.matches("reportXcsv", "report.csv")

    def test_empty_pattern_matches_everything(self, matcher: PatternMatcher) -> None:
        """Test that an empty or missing pattern matches any key."""
        assert matcher.matches("anything/at/all", "")
        assert matcher.matches("anything/at/all", None)

    def test_compiled_pattern_is_cached(self, matcher: PatternMatcher) -> None:
        """Test that a pattern is compiled once."""
        matcher.matches("a.csv", "*.csv")
        matcher.matches("b.csv", "*.csv")

        assert list(matcher._pattern_cache) == ["*.csv"]


@pytest.mark.unit
class TestLiteralPrefix:
    """Test PatternMatcher.literal_prefix."""

    def test_prefix_before_first_wildcard(self) -> None:
        assert PatternMatcher.literal_prefix("landing/2024-*/report?.csv") == "landing/2024-"

    def test_pattern_without_wildcards(self) -> None:
        assert PatternMatcher.literal_prefix("exact/key.csv") == "exact/key.csv"

    def test_empty_pattern(self) -> None:
        assert PatternMatcher.literal_prefix(None) == ""
