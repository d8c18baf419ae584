"""Tests for batched deletion."""

from typing import List

import pytest

from datasweeper.cleanup.deletion_executor import DeletionExecutor, chunked
from datasweeper.exceptions import DeleteFailure, InvariantViolation
from datasweeper.objects.file_record import DeletionCandidate
from tests.cleanup_fakes import FakeStorageProvider


def make_candidates(count: int, bucket: str = "b") -> List[DeletionCandidate]:
    return [
        DeletionCandidate(path=f"s3://{bucket}/raw/part-{i:05d}.gz", bucket=bucket, key=f"raw/part-{i:05d}.gz")
        for i in range(count)
    ]


@pytest.mark.unit
class TestChunked:
    @pytest.mark.parametrize(
        "count,expected_sizes",
        [
            (0, []),
            (1, [1]),
            (499, [499]),
            (500, [500]),
            (501, [500, 1]),
            (1000, [500, 500]),
            (1200, [500, 500, 200]),
        ],
    )
    def test_batch_sizes(self, count: int, expected_sizes: List[int]) -> None:
        items = list(range(count))

        batches = chunked(items, 500)

        assert [len(batch) for batch in batches] == expected_sizes
        assert [item for batch in batches for item in batch] == items

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            chunked([1, 2], 0)


@pytest.mark.unit
class TestDeletionExecutor:
    def test_single_batch(self) -> None:
        storage = FakeStorageProvider()
        candidates = [
            DeletionCandidate(path="s3://b/x", bucket="b", key="x"),
            DeletionCandidate(path="s3://b/y", bucket="b", key="y"),
        ]

        summary = DeletionExecutor(storage).delete_all("b", candidates)

        assert storage.delete_calls == [("b", ["x", "y"])]
        assert summary.batches_issued == 1
        assert summary.deleted_count == 2

    def test_batches_are_issued_in_order(self) -> None:
        storage = FakeStorageProvider()
        candidates = make_candidates(1200)

        summary = DeletionExecutor(storage).delete_all("b", candidates)

        assert [len(keys) for _, keys in storage.delete_calls] == [500, 500, 200]
        assert [key for _, keys in storage.delete_calls for key in keys] == [c.key for c in candidates]
        assert summary.batches_issued == 3
        assert summary.deleted_count == 1200

    def test_failure_stops_remaining_batches(self) -> None:
        storage = FakeStorageProvider(failures={2: 1})

        with pytest.raises(DeleteFailure) as exc_info:
            DeletionExecutor(storage).delete_all("b", make_candidates(1200))

        assert len(storage.delete_calls) == 2
        assert exc_info.value.failed_count == 1
        assert exc_info.value.batch_number == 2
        assert exc_info.value.errors[0].code == "AccessDenied"

    def test_failure_in_first_batch(self) -> None:
        storage = FakeStorageProvider(failures={1: 3})

        with pytest.raises(DeleteFailure) as exc_info:
            DeletionExecutor(storage).delete_all("b", make_candidates(10))

        assert len(storage.delete_calls) == 1
        assert exc_info.value.failed_count == 3

    def test_no_candidates(self) -> None:
        storage = FakeStorageProvider()

        summary = DeletionExecutor(storage).delete_all("b", [])

        assert storage.delete_calls == []
        assert summary.batches_issued == 0

    def test_custom_batch_size(self) -> None:
        storage = FakeStorageProvider()

        DeletionExecutor(storage, batch_size=4).delete_all("b", make_candidates(10))

        assert [len(keys) for _, keys in storage.delete_calls] == [4, 4, 2]

    @pytest.mark.parametrize("batch_size", [0, 501])
    def test_batch_size_bounds(self, batch_size: int) -> None:
        with pytest.raises(ValueError):
            DeletionExecutor(FakeStorageProvider(), batch_size=batch_size)

    def test_invalid_key_aborts_before_any_delete(self) -> None:
        storage = FakeStorageProvider()
        candidates = make_candidates(600) + [DeletionCandidate(path="s3://b/", bucket="b", key="")]

        with pytest.raises(InvariantViolation):
            DeletionExecutor(storage).delete_all("b", candidates)

        assert storage.delete_calls == []

    def test_candidate_from_other_bucket_aborts_before_any_delete(self) -> None:
        storage = FakeStorageProvider()
        candidates = make_candidates(3) + make_candidates(1, bucket="other")

        with pytest.raises(InvariantViolation) as exc_info:
            DeletionExecutor(storage).delete_all("b", candidates)

        assert exc_info.value.buckets == ["b", "other"]
        assert storage.delete_calls == []
