"""Google Cloud Storage object access.

This module provides the GcsManager class for reading exported query results
and deleting source files from GCS buckets.
"""

from typing import Any, List, Optional, Sequence

from google.api_core import exceptions as google_api_exceptions
from google.cloud import storage  # type: ignore[attr-defined]

from datasweeper.bucket.retry_utils import retry_with_backoff
from datasweeper.bucket.storage_provider import StorageProvider
from datasweeper.logging_config import get_logger
from datasweeper.objects.delete_result import BatchDeleteResult, ObjectDeleteError
from datasweeper.objects.file_record import split_object_uri

logger = get_logger(__name__)

# GCS transient failures that should be retried
TRANSIENT_EXCEPTIONS = (
    google_api_exceptions.ServiceUnavailable,  # 503
    google_api_exceptions.DeadlineExceeded,  # 504
    google_api_exceptions.InternalServerError,  # 500
    google_api_exceptions.TooManyRequests,  # 429 rate limiting
)


class GcsManager(StorageProvider):
    """Google Cloud Storage implementation of StorageProvider.

    Attributes:
        storage_client: GCS storage client
    """

    def __init__(self, gcs_project: str, storage_client: Optional[Any] = None) -> None:
        self.storage_client = storage_client or storage.Client(project=gcs_project)

    @property
    def scheme(self) -> str:
        return "gs"

    @retry_with_backoff(retries=3, exceptions=TRANSIENT_EXCEPTIONS)
    def read_text_objects(self, uri: str) -> List[str]:
        """Read one blob, or every blob under a prefix ending in "/".

        Example:
            >>> manager.read_text_objects("gs://bq-results/cleanup/4f1e/")
            ['dt,path,diff\\n...']
        """
        _, bucket_name, key = split_object_uri(uri)
        bucket = self.storage_client.bucket(bucket_name)

        if key and not key.endswith("/"):
            return [bucket.blob(key).download_as_text(encoding="utf-8")]

        blobs = sorted(self.storage_client.list_blobs(bucket_name, prefix=key), key=lambda b: b.name)
        logger.debug(f"Found {len(blobs)} blobs under {uri}")
        return [blob.download_as_text(encoding="utf-8") for blob in blobs]

    def delete_objects(self, bucket: str, keys: Sequence[str]) -> BatchDeleteResult:
        """Delete each key, collecting per-key API errors instead of raising.

        A blob that is already gone counts as deleted, matching S3's
        idempotent batch delete.
        """
        gcs_bucket = self.storage_client.bucket(bucket)
        deleted_count = 0
        errors: List[ObjectDeleteError] = []

        for key in keys:
            try:
                gcs_bucket.delete_blob(key)
                deleted_count += 1
            except google_api_exceptions.NotFound:
                logger.debug(f"Blob already deleted: gs://{bucket}/{key}")
                deleted_count += 1
            except google_api_exceptions.GoogleAPICallError as e:
                code = str(int(e.code)) if e.code is not None else "unknown"
                errors.append(ObjectDeleteError(key=key, code=code, message=e.message))

        return BatchDeleteResult(deleted_count=deleted_count, errors=errors)
