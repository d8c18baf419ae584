"""Query execution states reported by a query provider."""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class QuerySucceeded:
    """Query finished; results are stored at ``results_location``."""

    results_location: str


@dataclass(frozen=True)
class QueryFailed:
    """Query ended FAILED or CANCELLED."""

    reason: str
    state: str = "FAILED"


@dataclass(frozen=True)
class QueryPending:
    """Query is queued or still running."""

    state: str = "RUNNING"


QueryStatus = Union[QuerySucceeded, QueryFailed, QueryPending]
