"""Scheduled entry point.

``handler`` is what the scheduler invokes once a day. The event may carry an
explicit ``dt`` (``YYYY-MM-DD``) to clean a specific partition; otherwise
yesterday's partition (UTC) is cleaned.
"""

import os
from typing import Any, Mapping, Optional

from datasweeper.bucket.provider_factory import build_providers
from datasweeper.cleanup.job import run_cleanup
from datasweeper.exceptions import InputError
from datasweeper.logging_config import get_logger, setup_logging
from datasweeper.objects.app_config import AppConfig
from datasweeper.objects.partition_key import PartitionKey, resolve_partition_key

logger = get_logger(__name__)


def partition_from_event(event: Optional[Mapping[str, Any]]) -> PartitionKey:
    """Resolve the partition to clean from an invocation event.

    Raises:
        InputError: If the event has a ``dt`` that is not a YYYY-MM-DD date
    """
    if event and "dt" in event:
        dt = event["dt"]
        if not isinstance(dt, str):
            raise InputError(f"invalid dt: {dt!r} (expected YYYY-MM-DD)", value=str(dt))
        return resolve_partition_key(dt)
    return resolve_partition_key()


def handler(event: Optional[Mapping[str, Any]] = None, context: Any = None) -> None:
    """Clean one partition; raises on any failure, returns nothing on success."""
    setup_logging(level=os.getenv("DS_LOG_LEVEL", "INFO"))

    app_config = AppConfig.from_env()
    partition = partition_from_event(event)

    query_provider, storage_provider = build_providers(app_config)
    run_cleanup(app_config, partition, query_provider, storage_provider)
