"""Application configuration model.

This module defines the runtime configuration for datasweeper: which cloud the
tables live in, which tables to reconcile, and where query results are
written. It is built once at process entry and passed explicitly to the
reconciliation and deletion components.
"""
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from datasweeper.exceptions import ConfigurationError
from datasweeper.security import SecurityError, validate_sql_identifier

# Object stores cap batched deletes; S3 at 1000 keys, this job at 500
MAX_DELETE_BATCH_SIZE = 500

STORAGE_SCHEMES = {"aws": "s3", "gcp": "gs"}

# AppConfig field -> environment variable
ENV_VARS = {
    "cloud_provider": "DS_CLOUD_PROVIDER",
    "database": "DS_DATABASE",
    "source_table": "DS_SOURCE_TABLE",
    "target_table": "DS_TARGET_TABLE",
    "query_output_location": "DS_QUERY_OUTPUT_LOCATION",
    "work_group": "DS_WORK_GROUP",
    "gcp_project_id": "DS_GCP_PROJECT_ID",
    "aws_region": "DS_AWS_REGION",
    "row_id_column": "DS_ROW_ID_COLUMN",
    "delete_batch_size": "DS_DELETE_BATCH_SIZE",
    "query_poll_interval": "DS_QUERY_POLL_INTERVAL",
}

REQUIRED_FIELDS = ("database", "source_table", "target_table", "query_output_location", "work_group")


class AppConfig(BaseModel):
    """Application runtime configuration.

    Attributes:
        cloud_provider: "aws" (Athena + S3) or "gcp" (BigQuery + Cloud Storage)
        database: Catalog database (Athena) or dataset (BigQuery) holding both tables
        source_table: Table over the raw compressed row files
        target_table: Table over the converted columnar files
        query_output_location: Object-store URI where query results are written
        work_group: Athena work group, or BigQuery job label for cost attribution
        gcp_project_id: Project the BigQuery and GCS clients run in (gcp only)
        aws_region: Region for the boto3 clients (aws only, optional)
        row_id_column: Column identifying one logical record in both tables
        delete_batch_size: Keys per delete request (1..500)
        query_poll_interval: Seconds between query status checks

    Example:
        >>> config = AppConfig(
        ...     database="logs",
        ...     source_table="requests_gz",
        ...     target_table="requests_parquet",
        ...     query_output_location="s3://athena-results/cleanup",
        ...     work_group="primary",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    cloud_provider: Literal["aws", "gcp"] = "aws"
    database: str
    source_table: str
    target_table: str
    query_output_location: str
    work_group: str
    gcp_project_id: Optional[str] = None
    aws_region: Optional[str] = None
    row_id_column: str = "request_id"
    delete_batch_size: int = Field(default=MAX_DELETE_BATCH_SIZE, ge=1, le=MAX_DELETE_BATCH_SIZE)
    query_poll_interval: float = Field(default=0.1, gt=0)

    @field_validator("database", "source_table", "target_table", "row_id_column")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        try:
            return validate_sql_identifier(v)
        except SecurityError as e:
            raise ValueError(str(e))

    @field_validator("work_group")
    @classmethod
    def validate_work_group(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("work_group must not be empty")
        return v

    @model_validator(mode="after")
    def validate_provider_settings(self) -> "AppConfig":
        scheme = STORAGE_SCHEMES[self.cloud_provider]
        if not self.query_output_location.startswith(f"{scheme}://"):
            raise ValueError(
                f"query_output_location must be a {scheme}:// URI for {self.cloud_provider}, "
                f"got {self.query_output_location}"
            )

        if self.cloud_provider == "gcp" and not self.gcp_project_id:
            raise ValueError("gcp_project_id is required when cloud_provider is gcp")

        return self

    @property
    def storage_scheme(self) -> str:
        return STORAGE_SCHEMES[self.cloud_provider]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Build configuration from ``DS_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            Validated AppConfig

        Raises:
            ConfigurationError: If a required variable is missing or a value is invalid
        """
        env = os.environ if environ is None else environ

        values = {}
        for field_name, env_var in ENV_VARS.items():
            value = env.get(env_var)
            if value:
                values[field_name] = value

        missing = [ENV_VARS[name] for name in REQUIRED_FIELDS if name not in values]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

        return cls.build(**values)

    @classmethod
    def build(cls, **values: object) -> "AppConfig":
        """Validate keyword values into an AppConfig, raising ConfigurationError on failure."""
        try:
            return cls(**values)  # type: ignore[arg-type]
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration\n{e}") from e
