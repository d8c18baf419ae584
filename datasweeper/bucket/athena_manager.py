"""AWS Athena query execution.

This module provides the AthenaManager class, which submits statements to an
Athena work group and reports their execution state.
"""

from typing import Any, Optional

import boto3
from botocore.config import Config

from datasweeper.bucket.analytics_provider import QueryProvider
from datasweeper.cleanup.query_builder import ATHENA_DIALECT, SqlDialect
from datasweeper.logging_config import get_logger
from datasweeper.objects.query_status import QueryFailed, QueryPending, QueryStatus, QuerySucceeded

logger = get_logger(__name__)

# botocore retries throttling and transient network errors on each call
AWS_RETRY_CONFIG = Config(retries={"max_attempts": 5, "mode": "standard"})

PENDING_STATES = ("QUEUED", "RUNNING")
FAILED_STATES = ("FAILED", "CANCELLED")


class AthenaManager(QueryProvider):
    """Athena implementation of QueryProvider.

    Attributes:
        athena_client: boto3 Athena client
        output_location: S3 URI where Athena writes result files
        work_group: Athena work group the statements run in
    """

    def __init__(
        self,
        output_location: str,
        work_group: str,
        region_name: Optional[str] = None,
        athena_client: Optional[Any] = None,
    ) -> None:
        self.athena_client = athena_client or boto3.client(
            "athena", region_name=region_name, config=AWS_RETRY_CONFIG
        )
        self.output_location = output_location
        self.work_group = work_group

    @property
    def dialect(self) -> SqlDialect:
        return ATHENA_DIALECT

    def start_query(self, sql: str) -> str:
        response = self.athena_client.start_query_execution(
            QueryString=sql,
            ResultConfiguration={"OutputLocation": self.output_location},
            WorkGroup=self.work_group,
        )
        execution_id = response["QueryExecutionId"]
        logger.info(f"Started Athena query {execution_id} in work group {self.work_group}")
        return execution_id

    def get_query_status(self, execution_id: str) -> QueryStatus:
        response = self.athena_client.get_query_execution(QueryExecutionId=execution_id)
        execution = response["QueryExecution"]
        status = execution["Status"]
        state = status["State"]

        if state == "SUCCEEDED":
            return QuerySucceeded(results_location=execution["ResultConfiguration"]["OutputLocation"])
        if state in FAILED_STATES:
            return QueryFailed(reason=status.get("StateChangeReason", "no reason given"), state=state)
        if state not in PENDING_STATES:
            logger.warning(f"Unknown Athena query state {state} for {execution_id}, treating as pending")
        return QueryPending(state=state)
