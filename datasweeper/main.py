"""datasweeper CLI application entry point.

This module provides the main Click CLI interface for datasweeper, which
deletes raw source files from object storage once every row in them has been
migrated to the converted target table. It handles configuration loading,
validation, logging setup, and command orchestration.
"""
import importlib.metadata
from typing import Optional

import click
from dotenv import find_dotenv, load_dotenv

from datasweeper.commands.clean_partition import clean_partition
from datasweeper.exceptions import ConfigurationError
from datasweeper.logging_config import setup_logging
from datasweeper.objects.app_config import AppConfig


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging (DEBUG level)",
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Write logs to file",
)
@click.option(
    "--cloud-provider",
    type=click.Choice(["aws", "gcp"]),
    default="aws",
    help="Cloud holding the tables: aws (Athena + S3) or gcp (BigQuery + GCS)",
    envvar="DS_CLOUD_PROVIDER",
)
@click.option(
    "--database",
    type=str,
    help="Catalog database (Athena) or dataset (BigQuery) holding both tables",
    envvar="DS_DATABASE",
)
@click.option(
    "--source-table",
    type=str,
    help="Table over the raw compressed source files",
    envvar="DS_SOURCE_TABLE",
)
@click.option(
    "--target-table",
    type=str,
    help="Table over the converted target files",
    envvar="DS_TARGET_TABLE",
)
@click.option(
    "--query-output-location",
    type=str,
    help="Object-store URI where query results are written",
    envvar="DS_QUERY_OUTPUT_LOCATION",
)
@click.option(
    "--work-group",
    type=str,
    help="Athena work group (BigQuery: job label)",
    envvar="DS_WORK_GROUP",
)
@click.option(
    "--gcp-project-id",
    type=str,
    help="Project ID for BigQuery and Google Cloud Storage",
    envvar="DS_GCP_PROJECT_ID",
)
@click.option(
    "--aws-region",
    type=str,
    help="AWS region for Athena and S3",
    envvar="DS_AWS_REGION",
)
@click.option(
    "--row-id-column",
    type=str,
    default="request_id",
    help="Column identifying one record in both tables (default: request_id)",
    envvar="DS_ROW_ID_COLUMN",
)
@click.option(
    "--delete-batch-size",
    type=click.IntRange(1, 500),
    default=500,
    help="Objects per delete request (default: 500)",
    envvar="DS_DELETE_BATCH_SIZE",
)
@click.option(
    "--query-poll-interval",
    type=click.FloatRange(min=0, min_open=True),
    default=0.1,
    help="Seconds between query status checks (default: 0.1)",
    envvar="DS_QUERY_POLL_INTERVAL",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_file: Optional[str],
    cloud_provider: str,
    database: Optional[str],
    source_table: Optional[str],
    target_table: Optional[str],
    query_output_location: Optional[str],
    work_group: Optional[str],
    gcp_project_id: Optional[str],
    aws_region: Optional[str],
    row_id_column: str,
    delete_batch_size: int,
    query_poll_interval: float,
) -> None:
    """datasweeper CLI group for cleaning migrated source files.

    Args:
        ctx: Click context object for passing data between commands
        verbose: Enable DEBUG level logging if True
        log_file: Optional path to write log output
        cloud_provider: "aws" or "gcp"
        database: Database/dataset holding both tables
        source_table: Raw source table
        target_table: Converted target table
        query_output_location: Where query results are written
        work_group: Athena work group / BigQuery job label
        gcp_project_id: GCP project ID (gcp only)
        aws_region: AWS region (aws only)
        row_id_column: Record id column shared by both tables
        delete_batch_size: Objects per delete request
        query_poll_interval: Seconds between query status checks

    Raises:
        click.UsageError: If required parameters are missing or invalid

    Example:
        >>> datasweeper clean-partition --dt 2024-01-02 --dry-run
    """
    logger = setup_logging(verbose=verbose, log_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj["logger"] = logger

    if not database:
        raise click.UsageError("DS_DATABASE must be set")
    if not source_table:
        raise click.UsageError("DS_SOURCE_TABLE must be set")
    if not target_table:
        raise click.UsageError("DS_TARGET_TABLE must be set")
    if not query_output_location:
        raise click.UsageError("DS_QUERY_OUTPUT_LOCATION must be set")
    if not work_group:
        raise click.UsageError("DS_WORK_GROUP must be set")

    try:
        app_config = AppConfig.build(
            cloud_provider=cloud_provider,
            database=database,
            source_table=source_table,
            target_table=target_table,
            query_output_location=query_output_location,
            work_group=work_group,
            gcp_project_id=gcp_project_id,
            aws_region=aws_region,
            row_id_column=row_id_column,
            delete_batch_size=delete_batch_size,
            query_poll_interval=query_poll_interval,
        )
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    logger.info(
        f"Reconciling {app_config.database}.{app_config.source_table} "
        f"against {app_config.database}.{app_config.target_table} on {app_config.cloud_provider}"
    )
    ctx.obj["CONFIG"] = app_config


cli.add_command(clean_partition)


def start_cli() -> click.Group:
    """Initialize and start the datasweeper CLI application.

    Loads environment variables from a .env file when one exists, displays
    the application banner, and runs the Click CLI group.
    """
    env_file = find_dotenv(usecwd=True)
    if env_file:
        load_dotenv(env_file)

    click.secho("datasweeper", fg="magenta", bold=True)
    click.echo(f"Version: {importlib.metadata.version('datasweeper')}")
    if env_file:
        click.secho(f"Configuration loaded from: {env_file}")
    click.echo(nl=True)

    return cli(obj={})  # type: ignore


if __name__ == "__main__":
    start_cli()
