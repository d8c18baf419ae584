"""Google BigQuery query execution.

This module provides the BigQueryManager class. BigQuery keeps query results
in a table rather than a file, so every statement is wrapped in
``EXPORT DATA`` and its CSV output lands under the configured GCS location,
where the result reader picks it up like any other delimited result.
"""

import re
import uuid
from typing import Any, Optional

from google.api_core import exceptions as google_api_exceptions
from google.cloud import bigquery

from datasweeper.bucket.analytics_provider import QueryProvider
from datasweeper.bucket.retry_utils import retry_with_backoff
from datasweeper.cleanup.query_builder import BIGQUERY_DIALECT, SqlDialect
from datasweeper.logging_config import get_logger
from datasweeper.objects.query_status import QueryFailed, QueryPending, QueryStatus, QuerySucceeded

logger = get_logger(__name__)

# BigQuery transient failures that should be retried
TRANSIENT_EXCEPTIONS = (
    google_api_exceptions.ServiceUnavailable,  # 503
    google_api_exceptions.DeadlineExceeded,  # 504
    google_api_exceptions.InternalServerError,  # 500
    google_api_exceptions.TooManyRequests,  # 429 rate limiting
)

EXPORT_LABEL = "export_id"
WORK_GROUP_LABEL = "work_group"


def normalize_label_value(value: str) -> str:
    """Convert a value to a valid BigQuery label value.

    Label values are limited to 63 lowercase letters, digits, underscores and
    dashes.

    Example:
        >>> normalize_label_value("Nightly Cleanup")
        'nightly_cleanup'
    """
    return re.sub(r"[^a-z0-9_-]", "_", value.lower())[:63]


class BigQueryManager(QueryProvider):
    """Google BigQuery implementation of QueryProvider.

    Attributes:
        bq_client: BigQuery client
        project_id: GCP project ID the jobs run in
        output_location: GCS URI under which each query exports its CSV result
        work_group: Value of the ``work_group`` job label
    """

    def __init__(
        self,
        project_id: str,
        output_location: str,
        work_group: str,
        bq_client: Optional[Any] = None,
    ) -> None:
        self.bq_client = bq_client or bigquery.Client(project=project_id)
        self.project_id = project_id
        self.output_location = output_location.rstrip("/")
        self.work_group = work_group

    @property
    def dialect(self) -> SqlDialect:
        return BIGQUERY_DIALECT

    def export_prefix(self, export_id: str) -> str:
        return f"{self.output_location}/{export_id}/"

    def start_query(self, sql: str) -> str:
        """Submit ``sql`` wrapped in an EXPORT DATA statement.

        The export id is stored as a job label so the result location can be
        recovered from the job alone.
        """
        export_id = uuid.uuid4().hex
        statement = (
            "EXPORT DATA OPTIONS(\n"
            f"  uri='{self.export_prefix(export_id)}result-*.csv',\n"
            "  format='CSV',\n"
            "  overwrite=true,\n"
            "  header=true\n"
            ") AS\n"
            f"{sql}"
        )

        job_config = bigquery.QueryJobConfig(
            labels={
                WORK_GROUP_LABEL: normalize_label_value(self.work_group),
                EXPORT_LABEL: export_id,
            }
        )
        job = self.bq_client.query(statement, job_config=job_config)
        logger.info(f"Started BigQuery job {job.job_id} exporting to {self.export_prefix(export_id)}")
        return job.job_id

    @retry_with_backoff(retries=3, exceptions=TRANSIENT_EXCEPTIONS)
    def get_query_status(self, execution_id: str) -> QueryStatus:
        job = self.bq_client.get_job(execution_id)

        if job.state != "DONE":
            return QueryPending(state=job.state)

        if job.error_result:
            reason = job.error_result.get("reason", "unknown")
            message = job.error_result.get("message", "")
            # Cancelled jobs finish DONE with reason "stopped"
            state = "CANCELLED" if reason == "stopped" else "FAILED"
            return QueryFailed(reason=f"{reason}: {message}", state=state)

        export_id = (job.labels or {}).get(EXPORT_LABEL)
        if not export_id:
            return QueryFailed(reason=f"job has no {EXPORT_LABEL} label, result location unknown")
        return QuerySucceeded(results_location=self.export_prefix(export_id))
