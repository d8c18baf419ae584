"""File-level reconciliation records and the deletion candidates built from them."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Columns produced by the comparison query
RESULT_COLUMNS = ("dt", "path", "diff")

# Canonical integer text as the query engine writes it: no sign on zero, no padding
DIFF_PATTERN = re.compile(r"^(0|-?[1-9][0-9]*)\Z")


def split_object_uri(uri: str) -> Tuple[str, str, str]:
    """Split an object-store URI into (scheme, bucket, key).

    The key is everything after the separator that follows the bucket, so
    keys containing ``?``, ``#`` or spaces survive untouched.

    Example:
        >>> split_object_uri("s3://logs/raw/2024/01/02/a.gz")
        ('s3', 'logs', 'raw/2024/01/02/a.gz')
    """
    scheme, sep, rest = uri.partition("://")
    if not sep or not scheme or not rest:
        raise ValueError(f"Not an object-store URI: {uri!r}")
    bucket, _, key = rest.partition("/")
    if not bucket:
        raise ValueError(f"Object-store URI has no bucket: {uri!r}")
    return scheme, bucket, key


class FileRecord(BaseModel):
    """Row-count reconciliation result for one source file in one partition.

    Attributes:
        partition_date: Partition the counts were taken from (``YYYY-MM-DD``)
        path: Full object-store URI of the source file
        diff: Source rows from this file minus matching target rows

    Example:
        >>> record = FileRecord.from_row({"dt": "2024-01-02", "path": "s3://b/x", "diff": "0"})
        >>> record.is_deletable, record.bucket, record.key
        (True, 'b', 'x')
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    partition_date: str = Field(alias="dt")
    path: str
    diff: int

    @field_validator("diff", mode="before")
    @classmethod
    def validate_diff(cls, v: Any) -> Any:
        if isinstance(v, str) and not DIFF_PATTERN.match(v):
            raise ValueError(f"diff must be a canonical integer, got {v!r}")
        return v

    @classmethod
    def from_row(cls, row: Dict[str, str]) -> "FileRecord":
        return cls.model_validate({column: row[column] for column in RESULT_COLUMNS})

    @property
    def is_deletable(self) -> bool:
        # Only an exact match proves every source row reached the target table
        return self.diff == 0

    @property
    def scheme(self) -> str:
        return split_object_uri(self.path)[0]

    @property
    def bucket(self) -> str:
        return split_object_uri(self.path)[1]

    @property
    def key(self) -> str:
        return split_object_uri(self.path)[2]


@dataclass(frozen=True)
class DeletionCandidate:
    """A source file proven fully migrated, reduced to its object-store location."""

    path: str
    bucket: str
    key: str

    @classmethod
    def from_record(cls, record: FileRecord) -> "DeletionCandidate":
        _, bucket, key = split_object_uri(record.path)
        return cls(path=record.path, bucket=bucket, key=key)
