"""Construction of the query and storage providers for a configured cloud."""

from typing import Tuple

from datasweeper.bucket.analytics_provider import QueryProvider
from datasweeper.bucket.storage_provider import StorageProvider
from datasweeper.objects.app_config import AppConfig


def build_providers(app_config: AppConfig) -> Tuple[QueryProvider, StorageProvider]:
    """Create the provider pair for ``app_config.cloud_provider``.

    Cloud SDK modules are imported here so a deployment only needs the SDK of
    the cloud it runs against loaded at call time.
    """
    if app_config.cloud_provider == "gcp":
        from datasweeper.bucket.bigquery_manager import BigQueryManager
        from datasweeper.bucket.gcs_manager import GcsManager

        project_id = app_config.gcp_project_id or ""
        return (
            BigQueryManager(project_id, app_config.query_output_location, app_config.work_group),
            GcsManager(project_id),
        )

    from datasweeper.bucket.athena_manager import AthenaManager
    from datasweeper.bucket.s3_manager import S3Manager

    return (
        AthenaManager(app_config.query_output_location, app_config.work_group, app_config.aws_region),
        S3Manager(app_config.aws_region),
    )
