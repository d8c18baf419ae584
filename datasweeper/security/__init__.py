"""Security utilities for datasweeper."""

from datasweeper.security.validators import (
    MAX_OBJECT_KEY_LENGTH,
    SecurityError,
    validate_object_key,
    validate_partition_part,
    validate_sql_identifier,
)

__all__ = [
    "SecurityError",
    "validate_sql_identifier",
    "validate_partition_part",
    "validate_object_key",
    "MAX_OBJECT_KEY_LENGTH",
]
