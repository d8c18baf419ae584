"""Batched deletion of reconciled source files."""

from typing import List, Sequence, TypeVar

from datasweeper.bucket.storage_provider import StorageProvider
from datasweeper.exceptions import DeleteFailure, InvariantViolation
from datasweeper.logging_config import get_logger
from datasweeper.objects.app_config import MAX_DELETE_BATCH_SIZE
from datasweeper.objects.delete_result import DeletionSummary
from datasweeper.objects.file_record import DeletionCandidate
from datasweeper.security import SecurityError, validate_object_key

logger = get_logger(__name__)

T = TypeVar("T")

# Per-key errors written to the log when a batch fails
MAX_LOGGED_ERRORS = 20


def chunked(items: Sequence[T], size: int) -> List[List[T]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements.

    Example:
        >>> chunked([1, 2, 3, 4, 5], 2)
        [[1, 2], [3, 4], [5]]
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class DeletionExecutor:
    """Delete candidates from one bucket, batch by batch, stopping at the first failure."""

    def __init__(self, storage_provider: StorageProvider, batch_size: int = MAX_DELETE_BATCH_SIZE) -> None:
        if not 1 <= batch_size <= MAX_DELETE_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_DELETE_BATCH_SIZE}, got {batch_size}")
        self.storage_provider = storage_provider
        self.batch_size = batch_size

    def delete_all(self, bucket: str, candidates: Sequence[DeletionCandidate]) -> DeletionSummary:
        """Delete every candidate or raise.

        Batches are issued strictly in order. Objects deleted by earlier
        batches stay deleted when a later batch fails.

        Args:
            bucket: The single bucket holding every candidate
            candidates: Files to delete

        Returns:
            DeletionSummary with batch and object counts

        Raises:
            InvariantViolation: If a candidate has an invalid key or belongs to
                a different bucket; raised before the first request
            DeleteFailure: If any object in a batch fails to delete
        """
        for candidate in candidates:
            if candidate.bucket != bucket:
                raise InvariantViolation(
                    f"Candidate {candidate.path} is not in bucket {bucket}",
                    buckets=sorted({bucket, candidate.bucket}),
                )
            try:
                validate_object_key(candidate.key)
            except SecurityError as e:
                raise InvariantViolation(f"Refusing to delete {candidate.path}: {e}") from e

        summary = DeletionSummary(bucket=bucket)
        batches = chunked(candidates, self.batch_size)

        for batch_number, batch in enumerate(batches, start=1):
            keys = [candidate.key for candidate in batch]
            result = self.storage_provider.delete_objects(bucket, keys)
            summary.batches_issued += 1
            summary.deleted_count += result.deleted_count

            logger.info(
                f"Batch {batch_number}/{len(batches)}: "
                f"{result.deleted_count} deleted, {result.failed_count} failed"
            )

            if result.failed_count:
                for error in result.errors[:MAX_LOGGED_ERRORS]:
                    logger.error(f"Failed to delete {bucket}/{error.key}: {error.code} {error.message}")
                raise DeleteFailure(result.failed_count, batch_number, result.errors)

        return summary
