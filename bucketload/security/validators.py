"""Security validation utilities for bucketload."""
import re

MAX_PATTERN_LENGTH = 1024
MAX_PATTERN_WILDCARDS = 32
MAX_TABLE_NAME_LENGTH = 255

# Unquoted SQL identifier
TABLE_NAME_REGEX = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*")


class SecurityError(Exception):
    """Raised when a security validation fails."""

    pass


def validate_glob_pattern(
    pattern: str,
    max_length: int = MAX_PATTERN_LENGTH,
    max_wildcards: int = MAX_PATTERN_WILDCARDS,
) -> str:
    """Bound the size of a glob pattern before it is turned into a regex.

    Patterns come from operator configuration, not from untrusted input, but a
    malformed config entry must not be able to build a pathological regex.

    Args:
        pattern: Glob pattern using ``*`` and ``?`` wildcards
        max_length: Maximum allowed pattern length
        max_wildcards: Maximum number of ``*``/``?`` wildcards

    Returns:
        The validated pattern

    Raises:
        SecurityError: If the pattern is too long or has too many wildcards

    Example:
        >>> validate_glob_pattern("landing/*.csv")
        'landing/*.csv'
    """
    if len(pattern) > max_length:
        raise SecurityError(f"Pattern too long: {len(pattern)} > {max_length}")

    wildcards = pattern.count("*") + pattern.count("?")
    if wildcards > max_wildcards:
        raise SecurityError(f"Too many wildcards in pattern: {wildcards} > {max_wildcards}")

    if any(ord(c) < 32 for c in pattern):
        raise SecurityError(f"Control characters in pattern: {pattern!r}")

    return pattern


def validate_table_name(table_name: str, max_length: int = MAX_TABLE_NAME_LENGTH) -> str:
    """Validate a destination table name before it reaches DDL.

    Args:
        table_name: Table name to validate
        max_length: Maximum allowed length

    Returns:
        Validated table name

    Raises:
        SecurityError: If the name is empty, too long or not a plain identifier

    Example:
        >>> validate_table_name("S3_FILES")
        'S3_FILES'
    """
    if not table_name:
        raise SecurityError("Table name must not be empty")

    if len(table_name) > max_length:
        raise SecurityError(f"Table name too long: {len(table_name)} > {max_length}")

    if not TABLE_NAME_REGEX.fullmatch(table_name):
        raise SecurityError(f"Invalid table name: {table_name}")

    return table_name


def validate_object_key(key: str, max_length: int = 1024) -> str:
    """Validate an object key received from the object store.

    Args:
        key: Object key to validate
        max_length: Maximum allowed length

    Returns:
        Validated object key

    Raises:
        SecurityError: If key is empty, too long or contains control characters

    Example:
        >>> validate_object_key("landing/2024/file.csv")
        'landing/2024/file.csv'
    """
    if not key:
        raise SecurityError("Object key must not be empty")

    if len(key) > max_length:
        raise SecurityError(f"Object key too long: {len(key)} > {max_length}")

    if any(ord(c) < 32 for c in key):
        raise SecurityError(f"Control characters in object key: {key!r}")

    return key
