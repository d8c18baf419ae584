"""One cleanup run: reconcile a partition, then delete what it proves redundant."""

from typing import Callable, Optional

from datasweeper.bucket.analytics_provider import QueryProvider
from datasweeper.bucket.storage_provider import StorageProvider
from datasweeper.cleanup.deletion_executor import DeletionExecutor
from datasweeper.cleanup.reconciler import ReconciliationEngine, ReconciliationResult
from datasweeper.logging_config import get_logger
from datasweeper.objects.app_config import AppConfig
from datasweeper.objects.delete_result import CleanupReport
from datasweeper.objects.partition_key import PartitionKey

logger = get_logger(__name__)


def run_cleanup(
    app_config: AppConfig,
    partition: PartitionKey,
    query_provider: QueryProvider,
    storage_provider: StorageProvider,
    dry_run: bool = False,
    sleep: Optional[Callable[[float], None]] = None,
    before_delete: Optional[Callable[[ReconciliationResult], None]] = None,
) -> CleanupReport:
    """Clean the fully migrated source files of ``partition``.

    Args:
        app_config: Run configuration
        partition: Partition to clean
        query_provider: Runs the comparison query
        storage_provider: Reads results and deletes files
        dry_run: Reconcile and report, but delete nothing
        sleep: Sleep function for query polling (replaced in tests)
        before_delete: Called with the reconciliation just before the first
            delete request; raising from it stops the run with nothing deleted

    Returns:
        CleanupReport describing what was found and deleted

    Raises:
        DatasweeperError: Any query, invariant or delete failure; the run stops there
    """
    logger.info(f"Clean inserted source files on {partition.partition_date}")

    engine = ReconciliationEngine(app_config, query_provider, storage_provider, sleep=sleep)
    reconciliation = engine.find_deletion_candidates(partition)

    report = CleanupReport(
        partition=partition,
        bucket=reconciliation.bucket,
        total_records=len(reconciliation.records),
        deletable_records=len(reconciliation.candidates),
        skipped_rows=reconciliation.skipped_rows,
        dry_run=dry_run,
    )

    if not reconciliation.candidates or reconciliation.bucket is None:
        logger.info("Nothing to delete")
        return report

    if dry_run:
        for candidate in reconciliation.candidates:
            logger.info(f"Would delete {candidate.path}")
        return report

    if before_delete is not None:
        before_delete(reconciliation)

    executor = DeletionExecutor(storage_provider, batch_size=app_config.delete_batch_size)
    summary = executor.delete_all(reconciliation.bucket, reconciliation.candidates)

    report.batches_issued = summary.batches_issued
    report.deleted_count = summary.deleted_count
    logger.info(
        f"Deleted {summary.deleted_count} files from {summary.bucket} in {summary.batches_issued} batches"
    )
    return report
