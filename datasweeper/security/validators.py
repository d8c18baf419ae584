"""Security validation utilities for datasweeper.

Everything interpolated into the comparison query or handed to a delete
request passes through one of these checks first.
"""
import logging
import re

logger = logging.getLogger(__name__)

SQL_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

MAX_OBJECT_KEY_LENGTH = 1024


class SecurityError(Exception):
    """Raised when a security validation fails."""

    pass


def validate_sql_identifier(identifier: str, max_length: int = 255) -> str:
    """Validate a database, table or column name before it is put into SQL.

    Args:
        identifier: Name to validate
        max_length: Maximum allowed length

    Returns:
        The identifier unchanged

    Raises:
        SecurityError: If the identifier contains anything but letters,
            digits and underscores, or does not start with a letter/underscore

    Example:
        >>> validate_sql_identifier("raw_requests")
        'raw_requests'
    """
    if not identifier:
        raise SecurityError("SQL identifier must not be empty")

    if len(identifier) > max_length:
        raise SecurityError(f"SQL identifier too long: {len(identifier)} > {max_length}")

    if not SQL_IDENTIFIER_PATTERN.match(identifier):
        raise SecurityError(f"Invalid SQL identifier: {identifier!r}")

    return identifier


def validate_partition_part(value: str, width: int) -> str:
    """Validate a year/month/day partition value.

    Args:
        value: Partition value as a string (e.g. "2024", "07")
        width: Exact number of digits expected

    Returns:
        The value unchanged

    Raises:
        SecurityError: If the value is not exactly ``width`` ASCII digits

    Example:
        >>> validate_partition_part("07", 2)
        '07'
    """
    if len(value) != width or not value.isascii() or not value.isdigit():
        raise SecurityError(f"Partition value must be {width} digits: {value!r}")
    return value


def validate_object_key(key: str, max_length: int = MAX_OBJECT_KEY_LENGTH) -> str:
    """Validate an object key before it is sent in a delete request.

    Args:
        key: Object key (path inside the bucket, no leading separator)
        max_length: Maximum allowed length

    Returns:
        The key unchanged

    Raises:
        SecurityError: If the key is empty, too long or has control characters

    Example:
        >>> validate_object_key("logs/year=2024/month=01/day=02/part-0001.gz")
        'logs/year=2024/month=01/day=02/part-0001.gz'
    """
    if not key:
        # An empty key would address the bucket itself
        raise SecurityError("Object key must not be empty")

    if len(key) > max_length:
        raise SecurityError(f"Object key too long: {len(key)} > {max_length}")

    if any(ord(c) < 32 for c in key):
        raise SecurityError(f"Control characters in object key: {key!r}")

    if key.startswith("/"):
        logger.warning(f"Object key starts with a separator: {key}")

    return key
