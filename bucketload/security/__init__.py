"""Security utilities for bucketload."""

from bucketload.security.validators import (
    MAX_PATTERN_LENGTH,
    MAX_PATTERN_WILDCARDS,
    SecurityError,
    validate_glob_pattern,
    validate_object_key,
    validate_table_name,
)

__all__ = [
    "SecurityError",
    "validate_glob_pattern",
    "validate_table_name",
    "validate_object_key",
    "MAX_PATTERN_LENGTH",
    "MAX_PATTERN_WILDCARDS",
]
