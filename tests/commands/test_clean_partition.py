"""Tests for the clean-partition command."""

from typing import Dict, Optional

import pytest
from click.testing import CliRunner

from datasweeper.main import cli
from tests.cleanup_fakes import RESULTS_LOCATION, FakeQueryProvider, FakeStorageProvider, make_result_csv

BASE_ARGS = [
    "--database",
    "logs",
    "--source-table",
    "requests_gz",
    "--target-table",
    "requests_parquet",
    "--query-output-location",
    "s3://athena-results/cleanup",
    "--work-group",
    "primary",
]


@pytest.fixture
def storage() -> FakeStorageProvider:
    return FakeStorageProvider({RESULTS_LOCATION: make_result_csv([("s3://b/x", 0), ("s3://b/y", 0), ("s3://b/z", 1)])})


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "DS_CLOUD_PROVIDER",
        "DS_DATABASE",
        "DS_SOURCE_TABLE",
        "DS_TARGET_TABLE",
        "DS_QUERY_OUTPUT_LOCATION",
        "DS_WORK_GROUP",
        "DS_GCP_PROJECT_ID",
        "DS_QUERY_POLL_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)


def invoke(storage: FakeStorageProvider, *args: str, input: Optional[str] = None, obj: Optional[Dict] = None):  # type: ignore[no-untyped-def]
    query_provider = FakeQueryProvider()
    context_obj = obj if obj is not None else {"PROVIDERS": (query_provider, storage)}
    runner = CliRunner()
    return runner.invoke(cli, [*BASE_ARGS, "clean-partition", *args], obj=context_obj, input=input)


def test_deletes_after_confirmation(storage: FakeStorageProvider) -> None:
    result = invoke(storage, "--dt", "2024-01-02", input="y\n")

    assert result.exit_code == 0, result.output
    assert storage.delete_calls == [("b", ["x", "y"])]
    assert "Deleted 2 files" in result.output


def test_declined_confirmation_deletes_nothing(storage: FakeStorageProvider) -> None:
    result = invoke(storage, "--dt", "2024-01-02", input="n\n")

    assert result.exit_code != 0
    assert storage.delete_calls == []


def test_yes_skips_confirmation(storage: FakeStorageProvider) -> None:
    result = invoke(storage, "--dt", "2024-01-02", "--yes")

    assert result.exit_code == 0, result.output
    assert len(storage.delete_calls) == 1


def test_dry_run(storage: FakeStorageProvider) -> None:
    result = invoke(storage, "--dt", "2024-01-02", "--dry-run")

    assert result.exit_code == 0, result.output
    assert storage.delete_calls == []
    assert "Dry run" in result.output


def test_invalid_dt(storage: FakeStorageProvider) -> None:
    result = invoke(storage, "--dt", "01/02/2024")

    assert result.exit_code == 2
    assert "--dt" in result.output


def test_run_failure_exits_non_zero() -> None:
    storage = FakeStorageProvider({RESULTS_LOCATION: make_result_csv([("s3://b1/x", 0), ("s3://b2/y", 0)])})

    result = invoke(storage, "--dt", "2024-01-02", "--yes")

    assert result.exit_code == 1
    assert "Only clean same bucket data" in result.output
    assert storage.delete_calls == []


def test_missing_required_option(storage: FakeStorageProvider) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["--database", "logs", "clean-partition"], obj={})

    assert result.exit_code == 2
    assert "DS_SOURCE_TABLE must be set" in result.output


def test_options_from_environment(storage: FakeStorageProvider, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DS_DATABASE", "logs")
    monkeypatch.setenv("DS_SOURCE_TABLE", "requests_gz")
    monkeypatch.setenv("DS_TARGET_TABLE", "requests_parquet")
    monkeypatch.setenv("DS_QUERY_OUTPUT_LOCATION", "s3://athena-results/cleanup")
    monkeypatch.setenv("DS_WORK_GROUP", "primary")

    result = CliRunner().invoke(
        cli,
        ["clean-partition", "--dt", "2024-01-02", "--dry-run"],
        obj={"PROVIDERS": (FakeQueryProvider(), storage)},
    )

    assert result.exit_code == 0, result.output


def test_poll_interval_from_environment(storage: FakeStorageProvider, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DS_QUERY_POLL_INTERVAL", "5")
    context_obj = {"PROVIDERS": (FakeQueryProvider(), storage)}

    result = CliRunner().invoke(cli, [*BASE_ARGS, "clean-partition", "--dt", "2024-01-02", "--dry-run"], obj=context_obj)

    assert result.exit_code == 0, result.output
    assert context_obj["CONFIG"].query_poll_interval == 5.0


def test_poll_interval_must_be_positive(storage: FakeStorageProvider) -> None:
    result = CliRunner().invoke(
        cli,
        ["--query-poll-interval", "0", *BASE_ARGS, "clean-partition", "--dt", "2024-01-02"],
        obj={"PROVIDERS": (FakeQueryProvider(), storage)},
    )

    assert result.exit_code == 2
    assert "--query-poll-interval" in result.output


def test_invalid_object_key_exits_non_zero() -> None:
    storage = FakeStorageProvider({RESULTS_LOCATION: make_result_csv([("s3://b/x", 0), ("s3://b/", 0)])})

    result = invoke(storage, "--dt", "2024-01-02", "--yes")

    assert result.exit_code == 1
    assert "Refusing to delete s3://b/" in result.output
    assert storage.delete_calls == []
