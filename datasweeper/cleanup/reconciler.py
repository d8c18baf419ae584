"""Reconciliation of source files against the target table.

The ReconciliationEngine runs the comparison query for one partition and turns
its result into the list of source files that are safe to delete.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from pydantic import ValidationError

from datasweeper.bucket.analytics_provider import QueryProvider
from datasweeper.bucket.storage_provider import StorageProvider
from datasweeper.cleanup.query_builder import build_comparison_query
from datasweeper.cleanup.query_runner import run_query
from datasweeper.cleanup.result_reader import read_delimited_results
from datasweeper.exceptions import InvariantViolation, ResultFormatError
from datasweeper.logging_config import get_logger
from datasweeper.objects.app_config import AppConfig
from datasweeper.objects.file_record import RESULT_COLUMNS, DeletionCandidate, FileRecord
from datasweeper.objects.partition_key import PartitionKey

logger = get_logger(__name__)


@dataclass
class ReconciliationResult:
    """File records of one partition and the candidates derived from them.

    Attributes:
        partition: Partition that was reconciled
        records: Every file record returned by the comparison query
        candidates: Records with ``diff == 0``, one per distinct path
        bucket: The single bucket all records live in (None when no records)
        skipped_rows: Result rows dropped as malformed
    """

    partition: PartitionKey
    records: List[FileRecord] = field(default_factory=list)
    candidates: List[DeletionCandidate] = field(default_factory=list)
    bucket: Optional[str] = None
    skipped_rows: int = 0


class ReconciliationEngine:
    """Find source files whose rows have all been migrated to the target table."""

    def __init__(
        self,
        app_config: AppConfig,
        query_provider: QueryProvider,
        storage_provider: StorageProvider,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.app_config = app_config
        self.query_provider = query_provider
        self.storage_provider = storage_provider
        self.sleep = sleep

    def build_query(self, partition: PartitionKey) -> str:
        return build_comparison_query(
            self.query_provider.dialect,
            self.app_config.database,
            self.app_config.source_table,
            self.app_config.target_table,
            partition,
            row_id_column=self.app_config.row_id_column,
        )

    def find_deletion_candidates(self, partition: PartitionKey) -> ReconciliationResult:
        """Run the comparison query for ``partition`` and select deletable files.

        Args:
            partition: Partition to reconcile

        Returns:
            ReconciliationResult; empty when the partition has no source files

        Raises:
            QueryFailure: If the comparison query fails
            ResultFormatError: If the result lacks the dt/path/diff columns
            InvariantViolation: If the records span more than one bucket, or
                live in a different object store than the configured one
        """
        sql = self.build_query(partition)
        logger.debug(f"Comparison query:\n{sql}")

        run_kwargs = {"poll_interval": self.app_config.query_poll_interval}
        if self.sleep is not None:
            run_kwargs["sleep"] = self.sleep
        results_location = run_query(self.query_provider, sql, **run_kwargs)  # type: ignore[arg-type]

        parsed = read_delimited_results(self.storage_provider, results_location)
        if parsed.header:
            missing = [column for column in RESULT_COLUMNS if column not in parsed.header]
            if missing:
                raise ResultFormatError(f"Result at {results_location} is missing columns: {missing}")

        result = ReconciliationResult(partition=partition, skipped_rows=parsed.skipped_rows)
        for row in parsed.rows:
            try:
                result.records.append(FileRecord.from_row(row))
            except ValidationError as e:
                result.skipped_rows += 1
                logger.debug(f"Skipping unparseable result row {row}: {e}")

        deletable = [record for record in result.records if record.is_deletable]
        logger.info(f"Total files: {len(result.records)}, ready to delete files: {len(deletable)}")
        if result.skipped_rows:
            logger.warning(f"Skipped {result.skipped_rows} malformed result rows from {results_location}")

        if not result.records:
            return result

        result.bucket = self._single_bucket(result.records)

        seen = set()
        for record in deletable:
            if record.path in seen:
                continue
            seen.add(record.path)
            result.candidates.append(DeletionCandidate.from_record(record))

        return result

    def _single_bucket(self, records: List[FileRecord]) -> str:
        """Return the one bucket every record lives in, checked across all records."""
        try:
            locations = {(record.scheme, record.bucket) for record in records}
        except ValueError as e:
            raise InvariantViolation(f"Unrecognised source file path: {e}") from e

        schemes = sorted({scheme for scheme, _ in locations})
        if schemes != [self.storage_provider.scheme]:
            raise InvariantViolation(
                f"Source files must be {self.storage_provider.scheme}:// objects, found schemes {schemes}"
            )

        buckets = sorted({bucket for _, bucket in locations})
        if len(buckets) != 1:
            raise InvariantViolation(f"Only clean same bucket data, found buckets {buckets}", buckets=buckets)

        return buckets[0]
