"""Transfer configuration models.

This module defines Pydantic models for the routing patterns and transfer
settings loaded from transfer_config.toml. Patterns are validated at load
time so a malformed entry can never reach the regex engine or the DDL.
"""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import toml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from bucketload.security import SecurityError, validate_glob_pattern, validate_table_name

DEFAULT_TABLE_NAME = "BUCKET_FILES"
DEFAULT_STREAM_THRESHOLD_BYTES = 100 * 1024 * 1024
DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024

# Streamed content of table T is stored in T_content
CONTENT_TABLE_SUFFIX = "_content"

ProcessingMode = Literal["buffered", "streamed"]


class FilePattern(BaseModel):
    """Routing rule mapping matching object keys to a destination table.

    Attributes:
        pattern: Glob over the full object key (``*`` and ``?``); empty matches all
        description: Free-text description shown in listings
        is_enabled: Disabled patterns are never considered during routing
        target_table: Destination table name
        file_type: Informational file type label (e.g. "csv")
        max_file_size: Size ceiling in bytes; 0 means unlimited
        processing_mode: "streamed" always streams; "buffered" lets the size
            threshold decide

    Example:
        >>> FilePattern(
        ...     pattern="landing/*.csv",
        ...     is_enabled=True,
        ...     target_table="T_CSV",
        ...     max_file_size=50 * 1024 * 1024,
        ... )
    """

    model_config = ConfigDict(frozen=True)

    pattern: Optional[str] = None
    description: Optional[str] = None
    is_enabled: bool = True
    target_table: str
    file_type: Optional[str] = None
    max_file_size: int = Field(default=0, ge=0)
    processing_mode: ProcessingMode = "buffered"

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: Optional[str]) -> Optional[str]:
        """Bound pattern size before it is compiled."""
        if v is None:
            return v
        try:
            return validate_glob_pattern(v)
        except SecurityError as e:
            raise ValueError(f"Unsafe pattern: {e}")

    @field_validator("target_table")
    @classmethod
    def validate_target_table(cls, v: str) -> str:
        try:
            return validate_table_name(v)
        except SecurityError as e:
            raise ValueError(f"Invalid target table: {e}")


class TransferConfig(BaseModel):
    """Root transfer configuration.

    Patterns are keyed by a unique name and evaluated in declaration order,
    which is the order of the ``[pattern.<name>]`` tables in the TOML file.

    Attributes:
        default_table: Destination for objects no enabled pattern matches
        stream_threshold_bytes: Objects at or above this size are streamed
        chunk_size: I/O buffer size for streamed transfers
        pattern: Routing rules keyed by name

    Example:
        >>> config = TransferConfig(pattern={
        ...     "csv": FilePattern(pattern="*.csv", target_table="T_CSV"),
        ...     "other": FilePattern(pattern="*", target_table="T_OTHER"),
        ... })
    """

    model_config = ConfigDict(frozen=True)

    default_table: str = DEFAULT_TABLE_NAME
    stream_threshold_bytes: int = Field(default=DEFAULT_STREAM_THRESHOLD_BYTES, gt=0)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    pattern: Dict[str, FilePattern] = Field(default_factory=dict)

    @field_validator("default_table")
    @classmethod
    def validate_default_table(cls, v: str) -> str:
        try:
            return validate_table_name(v)
        except SecurityError as e:
            raise ValueError(f"Invalid default table: {e}")

    @model_validator(mode="after")
    def check_content_table_names(self) -> "TransferConfig":
        """Reject a table named like the content table of another table."""
        names = {p.target_table for p in self.pattern.values()}
        names.add(self.default_table)
        for name in sorted(names):
            if f"{name}{CONTENT_TABLE_SUFFIX}" in names:
                raise ValueError(f"Table {name}{CONTENT_TABLE_SUFFIX} collides with the content table of {name}")
        return self

    @property
    def patterns(self) -> List[FilePattern]:
        """All patterns in declaration order."""
        return list(self.pattern.values())

    @property
    def enabled_patterns(self) -> List[FilePattern]:
        """Enabled patterns in declaration order."""
        return [p for p in self.pattern.values() if p.is_enabled]

    @property
    def table_names(self) -> List[str]:
        """Distinct destination tables, default table last."""
        tables: List[str] = []
        for file_pattern in self.enabled_patterns:
            if file_pattern.target_table not in tables:
                tables.append(file_pattern.target_table)
        if self.default_table not in tables:
            tables.append(self.default_table)
        return tables

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransferConfig":
        """Build and validate a config from parsed TOML data.

        Raises:
            ValueError: If the data fails Pydantic validation
        """
        try:
            return cls(**data)
        except ValidationError as e:
            raise ValueError(f"Validation Failed for transfer_config.toml\n{e}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "TransferConfig":
        """Load and validate transfer_config.toml.

        Raises:
            ValueError: If the file is not valid TOML or fails Pydantic validation
        """
        try:
            data = toml.load(path)
        except toml.TomlDecodeError as e:
            raise ValueError(f"Unable to parse {path}: {e}")
        return cls.from_dict(data)
