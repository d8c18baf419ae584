"""Tests for the reconciliation engine."""

import pytest

from datasweeper.cleanup.query_builder import BIGQUERY_DIALECT
from datasweeper.cleanup.reconciler import ReconciliationEngine
from datasweeper.exceptions import InvariantViolation, QueryFailure, ResultFormatError
from datasweeper.objects.app_config import AppConfig
from datasweeper.objects.file_record import DeletionCandidate
from datasweeper.objects.partition_key import PartitionKey
from datasweeper.objects.query_status import QueryFailed, QuerySucceeded
from tests.cleanup_fakes import RESULTS_LOCATION, FakeQueryProvider, FakeStorageProvider, make_result_csv


def make_engine(app_config: AppConfig, result_text: str, scheme: str = "s3") -> ReconciliationEngine:
    return ReconciliationEngine(
        app_config,
        FakeQueryProvider(),
        FakeStorageProvider({RESULTS_LOCATION: result_text}, scheme=scheme),
        sleep=lambda _: None,
    )


@pytest.mark.unit
class TestFindDeletionCandidates:
    def test_only_zero_diff_records_are_candidates(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, make_result_csv([("s3://b/x", 0), ("s3://b/y", 0), ("s3://b/z", 1)]))

        result = engine.find_deletion_candidates(partition)

        assert [c.path for c in result.candidates] == ["s3://b/x", "s3://b/y"]
        assert result.bucket == "b"
        assert len(result.records) == 3

    def test_negative_diff_is_not_deletable(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, make_result_csv([("s3://b/x", -2), ("s3://b/y", 0)]))

        result = engine.find_deletion_candidates(partition)

        assert [c.path for c in result.candidates] == ["s3://b/y"]

    def test_candidate_keys(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, make_result_csv([("s3://logs/raw/2024/01/02/part-1.gz", 0)]))

        result = engine.find_deletion_candidates(partition)

        assert result.candidates == [
            DeletionCandidate(path="s3://logs/raw/2024/01/02/part-1.gz", bucket="logs", key="raw/2024/01/02/part-1.gz")
        ]

    def test_each_deletable_path_appears_once(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, make_result_csv([("s3://b/x", 0), ("s3://b/y", 0), ("s3://b/x", 0)]))

        result = engine.find_deletion_candidates(partition)

        assert [c.path for c in result.candidates] == ["s3://b/x", "s3://b/y"]

    def test_no_records_is_a_no_op(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, make_result_csv([]))

        result = engine.find_deletion_candidates(partition)

        assert result.records == []
        assert result.candidates == []
        assert result.bucket is None

    def test_empty_result_file_is_a_no_op(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, "")

        result = engine.find_deletion_candidates(partition)

        assert result.records == []

    def test_mixed_buckets_fail(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, make_result_csv([("s3://b1/x", 0), ("s3://b2/y", 0)]))

        with pytest.raises(InvariantViolation) as exc_info:
            engine.find_deletion_candidates(partition)

        assert exc_info.value.buckets == ["b1", "b2"]

    def test_bucket_check_covers_non_deletable_records(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, make_result_csv([("s3://b1/x", 0), ("s3://b2/y", 5)]))

        with pytest.raises(InvariantViolation):
            engine.find_deletion_candidates(partition)

    def test_scheme_must_match_storage(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, make_result_csv([("gs://b/x", 0)]))

        with pytest.raises(InvariantViolation):
            engine.find_deletion_candidates(partition)

    def test_non_uri_path_is_invariant_violation(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, make_result_csv([("/tmp/x.gz", 0)]))

        with pytest.raises(InvariantViolation):
            engine.find_deletion_candidates(partition)

    def test_malformed_rows_are_counted(self, app_config: AppConfig, partition: PartitionKey) -> None:
        text = '"dt","path","diff"\n"2024-01-02","s3://b/short"\n"2024-01-02","s3://b/x","zero"\n"2024-01-02","s3://b/y","0"\n'
        engine = make_engine(app_config, text)

        result = engine.find_deletion_candidates(partition)

        assert result.skipped_rows == 2
        assert [c.path for c in result.candidates] == ["s3://b/y"]

    def test_non_canonical_zero_is_skipped_not_deleted(self, app_config: AppConfig, partition: PartitionKey) -> None:
        text = make_result_csv([("s3://b/x", "0.0"), ("s3://b/y", "00"), ("s3://b/z", 0)])  # type: ignore[list-item]
        engine = make_engine(app_config, text)

        result = engine.find_deletion_candidates(partition)

        assert result.skipped_rows == 2
        assert [c.path for c in result.candidates] == ["s3://b/z"]

    def test_missing_result_columns(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = make_engine(app_config, "dt,file,diff\n2024-01-02,s3://b/x,0\n")

        with pytest.raises(ResultFormatError):
            engine.find_deletion_candidates(partition)

    def test_query_failure_propagates(self, app_config: AppConfig, partition: PartitionKey) -> None:
        engine = ReconciliationEngine(
            app_config,
            FakeQueryProvider([QueryFailed("HIVE_CURSOR_ERROR", state="FAILED")]),
            FakeStorageProvider(),
            sleep=lambda _: None,
        )

        with pytest.raises(QueryFailure) as exc_info:
            engine.find_deletion_candidates(partition)

        assert exc_info.value.reason == "HIVE_CURSOR_ERROR"

    def test_query_uses_provider_dialect_and_config(
        self, gcp_app_config: AppConfig, partition: PartitionKey
    ) -> None:
        location = "gs://bq-results/cleanup/e1/"
        query_provider = FakeQueryProvider([QuerySucceeded(location)], dialect=BIGQUERY_DIALECT)
        storage = FakeStorageProvider({f"{location}result-000000000000.csv": make_result_csv([("gs://b/x", 0)])}, scheme="gs")
        engine = ReconciliationEngine(gcp_app_config, query_provider, storage, sleep=lambda _: None)

        result = engine.find_deletion_candidates(partition)

        assert "FROM `logs.requests_gz`" in query_provider.queries[0]
        assert "FROM `logs.requests_parquet`" in query_provider.queries[0]
        assert result.bucket == "b"
