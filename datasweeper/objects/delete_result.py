"""Outcome models for batched deletes and whole cleanup runs."""

from dataclasses import dataclass, field
from typing import List, Optional

from datasweeper.objects.partition_key import PartitionKey


@dataclass(frozen=True)
class ObjectDeleteError:
    """Per-object failure detail returned by a batched delete."""

    key: str
    code: str
    message: str


@dataclass
class BatchDeleteResult:
    """Counts reported by one batched delete request."""

    deleted_count: int
    errors: List[ObjectDeleteError] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.errors)


@dataclass
class DeletionSummary:
    """Totals across every batch of a successful delete pass."""

    bucket: str
    batches_issued: int = 0
    deleted_count: int = 0


@dataclass
class CleanupReport:
    """What a single cleanup run found and did.

    Attributes:
        partition: Partition that was reconciled
        bucket: Bucket holding the source files (None when nothing was found)
        total_records: Number of file records returned by the comparison query
        deletable_records: Number of records with ``diff == 0``
        skipped_rows: Malformed result rows that were ignored
        batches_issued: Delete requests sent
        deleted_count: Objects reported deleted
        dry_run: True when deletion was skipped on purpose
    """

    partition: PartitionKey
    bucket: Optional[str] = None
    total_records: int = 0
    deletable_records: int = 0
    skipped_rows: int = 0
    batches_issued: int = 0
    deleted_count: int = 0
    dry_run: bool = False
