"""Pytest fixtures and configuration."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from datasweeper.objects.app_config import AppConfig
from datasweeper.objects.partition_key import PartitionKey


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def app_config() -> AppConfig:
    """AWS configuration used by most tests."""
    return AppConfig(
        database="logs",
        source_table="requests_gz",
        target_table="requests_parquet",
        query_output_location="s3://athena-results/cleanup",
        work_group="primary",
    )


@pytest.fixture
def gcp_app_config() -> AppConfig:
    """GCP configuration."""
    return AppConfig(
        cloud_provider="gcp",
        database="logs",
        source_table="requests_gz",
        target_table="requests_parquet",
        query_output_location="gs://bq-results/cleanup",
        work_group="nightly",
        gcp_project_id="test-project",
    )


@pytest.fixture
def partition() -> PartitionKey:
    return PartitionKey(year="2024", month="01", day="02")


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set up mock environment variables for an AWS run."""
    monkeypatch.setenv("DS_DATABASE", "logs")
    monkeypatch.setenv("DS_SOURCE_TABLE", "requests_gz")
    monkeypatch.setenv("DS_TARGET_TABLE", "requests_parquet")
    monkeypatch.setenv("DS_QUERY_OUTPUT_LOCATION", "s3://athena-results/cleanup")
    monkeypatch.setenv("DS_WORK_GROUP", "primary")
    monkeypatch.delenv("DS_CLOUD_PROVIDER", raising=False)
    monkeypatch.delenv("DS_GCP_PROJECT_ID", raising=False)
