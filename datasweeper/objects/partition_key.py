"""Daily partition key shared by the source and target tables."""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from datasweeper.exceptions import InputError
from datasweeper.security import SecurityError, validate_partition_part

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class PartitionKey(BaseModel):
    """One day's partition, as the zero-padded strings the tables are keyed by.

    Attributes:
        year: Four digit year (e.g. "2024")
        month: Two digit month (e.g. "01")
        day: Two digit day (e.g. "09")

    Example:
        >>> key = PartitionKey.from_datetime(datetime(2024, 1, 9))
        >>> key.partition_date
        '2024-01-09'
    """

    model_config = ConfigDict(frozen=True)

    year: str
    month: str
    day: str

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: str) -> str:
        try:
            return validate_partition_part(v, 4)
        except SecurityError as e:
            raise ValueError(str(e))

    @field_validator("month", "day")
    @classmethod
    def validate_month_day(cls, v: str) -> str:
        try:
            return validate_partition_part(v, 2)
        except SecurityError as e:
            raise ValueError(str(e))

    @classmethod
    def from_datetime(cls, value: datetime) -> "PartitionKey":
        return cls(
            year=f"{value.year:04d}",
            month=f"{value.month:02d}",
            day=f"{value.day:02d}",
        )

    @property
    def partition_date(self) -> str:
        return f"{self.year}-{self.month}-{self.day}"

    def __str__(self) -> str:
        return self.partition_date


def resolve_partition_key(dt: Optional[str] = None, now: Optional[datetime] = None) -> PartitionKey:
    """Resolve the partition a run should clean.

    An explicit ``dt`` is parsed strictly as an ISO calendar date at UTC
    midnight. Without one, the partition is "yesterday" in UTC.

    Args:
        dt: Optional explicit date in ``YYYY-MM-DD`` form
        now: Clock override; defaults to the current UTC time

    Returns:
        PartitionKey for the resolved date

    Raises:
        InputError: If ``dt`` is not a valid ``YYYY-MM-DD`` calendar date

    Example:
        >>> resolve_partition_key("2024-03-01").partition_date
        '2024-03-01'
        >>> resolve_partition_key(now=datetime(2024, 3, 1, 5, tzinfo=timezone.utc)).partition_date
        '2024-02-29'
    """
    if dt is not None:
        if not isinstance(dt, str) or not ISO_DATE_PATTERN.match(dt):
            raise InputError(f"invalid dt: {dt!r} (expected YYYY-MM-DD)", value=str(dt))
        try:
            resolved = datetime.strptime(dt, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        except ValueError as e:
            raise InputError(f"invalid dt: {dt!r} ({e})", value=dt) from e
        return PartitionKey.from_datetime(resolved)

    current = now or datetime.now(timezone.utc)
    if current.tzinfo is not None:
        current = current.astimezone(timezone.utc)
    return PartitionKey.from_datetime(current - timedelta(days=1))
