"""Submit a statement and poll it to a terminal state."""

import time
from typing import Callable

from datasweeper.bucket.analytics_provider import QueryProvider
from datasweeper.exceptions import QueryFailure
from datasweeper.logging_config import get_logger
from datasweeper.objects.query_status import QueryFailed, QuerySucceeded

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 0.1


def run_query(
    provider: QueryProvider,
    sql: str,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Run ``sql`` and block until it succeeds or fails.

    Args:
        provider: Query provider to run the statement on
        sql: Statement text
        poll_interval: Fixed delay in seconds between status checks
        sleep: Sleep function (replaced in tests)

    Returns:
        Location of the query results

    Raises:
        QueryFailure: If the query ends FAILED or CANCELLED
    """
    execution_id = provider.start_query(sql)

    polls = 0
    while True:
        status = provider.get_query_status(execution_id)
        polls += 1

        if isinstance(status, QuerySucceeded):
            logger.info(f"Query {execution_id} succeeded after {polls} status checks")
            return status.results_location
        if isinstance(status, QueryFailed):
            logger.error(f"Query {execution_id} {status.state}: {status.reason}")
            raise QueryFailure(execution_id, status.reason)

        sleep(poll_interval)
