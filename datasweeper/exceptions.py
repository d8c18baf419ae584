"""Custom exceptions for the datasweeper application."""

from typing import List, Optional, Sequence


class DatasweeperError(Exception):
    """Base exception class for datasweeper-specific errors."""

    pass


class ConfigurationError(DatasweeperError):
    """Raised when there are configuration-related errors."""

    pass


class InputError(DatasweeperError):
    """Raised when run input (such as an explicit partition date) is malformed."""

    def __init__(self, message: str, value: Optional[str] = None) -> None:
        super().__init__(message)
        self.value = value


class QueryFailure(DatasweeperError):
    """Raised when a query execution ends FAILED or CANCELLED."""

    def __init__(self, execution_id: str, reason: str) -> None:
        super().__init__(f"Query {execution_id} failed: {reason}")
        self.execution_id = execution_id
        self.reason = reason


class ResultFormatError(DatasweeperError):
    """Raised when a query result file does not have the expected columns."""

    pass


class InvariantViolation(DatasweeperError):
    """Raised when file records break the single-bucket invariant."""

    def __init__(self, message: str, buckets: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.buckets: List[str] = list(buckets)


class DeleteFailure(DatasweeperError):
    """Raised when any object in a delete batch fails to delete."""

    def __init__(self, failed_count: int, batch_number: int, errors: Optional[Sequence[object]] = None) -> None:
        super().__init__(f"Delete failed in batch {batch_number}: {failed_count} errors")
        self.failed_count = failed_count
        self.batch_number = batch_number
        self.errors = list(errors or [])
