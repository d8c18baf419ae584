from typing import Optional

import click

from datasweeper.bucket.provider_factory import build_providers
from datasweeper.cleanup.job import run_cleanup
from datasweeper.cleanup.reconciler import ReconciliationResult
from datasweeper.console import confirm, error, file_list, info, newline, success, table, warning
from datasweeper.exceptions import DatasweeperError, InputError
from datasweeper.objects.app_config import AppConfig
from datasweeper.objects.delete_result import CleanupReport
from datasweeper.objects.partition_key import resolve_partition_key


@click.command(name="clean-partition")
@click.option(
    "--dt",
    type=str,
    help="Partition date as YYYY-MM-DD (default: yesterday in UTC)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Reconcile and list deletable files without deleting them",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Delete without asking for confirmation",
)
@click.pass_context
def clean_partition(ctx: click.Context, dt: Optional[str], dry_run: bool, yes: bool) -> CleanupReport:
    """Delete source files of a partition that are fully migrated to the target table."""

    app_config: AppConfig = ctx.obj["CONFIG"]

    try:
        partition = resolve_partition_key(dt)
    except InputError as e:
        raise click.BadParameter(str(e), param_hint="--dt")

    providers = ctx.obj.get("PROVIDERS")
    if not providers:
        providers = build_providers(app_config)
        ctx.obj["PROVIDERS"] = providers
    query_provider, storage_provider = providers

    def confirm_delete(reconciliation: ReconciliationResult) -> None:
        paths = [candidate.path for candidate in reconciliation.candidates]
        file_list(paths, title=f"{len(paths)} files ready to delete from {reconciliation.bucket}")
        newline()
        if not yes:
            confirm(f"Delete {len(paths)} files?", default=False, abort=True)

    info(f"Cleaning partition {partition.partition_date}", bold=True)

    try:
        report = run_cleanup(
            app_config,
            partition,
            query_provider,
            storage_provider,
            dry_run=dry_run,
            before_delete=confirm_delete,
        )
    except DatasweeperError as e:
        error(str(e))
        raise click.ClickException(str(e)) from e

    newline()
    table(
        [
            [
                report.partition.partition_date,
                report.bucket or "-",
                report.total_records,
                report.deletable_records,
                report.skipped_rows,
                report.deleted_count,
            ]
        ],
        headers=["Partition", "Bucket", "File count", "Deletable count", "Skipped rows", "Deleted count"],
    )

    if report.skipped_rows:
        warning(f"{report.skipped_rows} malformed result rows were skipped")

    if dry_run:
        info("Dry run, nothing deleted")
    else:
        success(f"Deleted {report.deleted_count} files")

    return report
