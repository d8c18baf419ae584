"""Abstract query provider interface for multi-cloud support.

This module defines the QueryProvider abstract base class implemented by the
interactive query services the comparison query can run on (Athena, BigQuery).
"""

from abc import ABC, abstractmethod

from datasweeper.cleanup.query_builder import SqlDialect
from datasweeper.objects.query_status import QueryStatus


class QueryProvider(ABC):
    """Abstract interface for submitting SQL and polling its execution.

    Example implementations:
        - AthenaManager: AWS Athena
        - BigQueryManager: Google BigQuery
    """

    @abstractmethod
    def start_query(self, sql: str) -> str:
        """Submit a SQL statement for execution.

        Args:
            sql: Statement text

        Returns:
            Provider execution id used to poll for status
        """
        pass

    @abstractmethod
    def get_query_status(self, execution_id: str) -> QueryStatus:
        """Check the state of a submitted statement once.

        Args:
            execution_id: Id returned by start_query

        Returns:
            QuerySucceeded with the results location, QueryFailed with the
            provider's reason, or QueryPending
        """
        pass

    @property
    @abstractmethod
    def dialect(self) -> SqlDialect:
        """SQL dialect this provider executes."""
        pass
