"""AWS S3 object access.

This module provides the S3Manager class for reading query result files and
issuing batched deletes against S3 buckets.
"""

from typing import Any, List, Optional, Sequence

import boto3

from datasweeper.bucket.athena_manager import AWS_RETRY_CONFIG
from datasweeper.bucket.storage_provider import StorageProvider
from datasweeper.logging_config import get_logger
from datasweeper.objects.delete_result import BatchDeleteResult, ObjectDeleteError
from datasweeper.objects.file_record import split_object_uri

logger = get_logger(__name__)


class S3Manager(StorageProvider):
    """S3 implementation of StorageProvider.

    Attributes:
        s3_client: boto3 S3 client
    """

    def __init__(self, region_name: Optional[str] = None, s3_client: Optional[Any] = None) -> None:
        self.s3_client = s3_client or boto3.client("s3", region_name=region_name, config=AWS_RETRY_CONFIG)

    @property
    def scheme(self) -> str:
        return "s3"

    def read_text_objects(self, uri: str) -> List[str]:
        """Read one object, or every object under a prefix ending in "/".

        Example:
            >>> manager.read_text_objects("s3://athena-results/cleanup/1b2c.csv")
            ['"dt","path","diff"\\n...']
        """
        _, bucket, key = split_object_uri(uri)

        if key and not key.endswith("/"):
            return [self._read_object(bucket, key)]

        paginator = self.s3_client.get_paginator("list_objects_v2")
        keys: List[str] = []
        for page in paginator.paginate(Bucket=bucket, Prefix=key):
            keys.extend(item["Key"] for item in page.get("Contents", []))

        logger.debug(f"Found {len(keys)} objects under {uri}")
        return [self._read_object(bucket, object_key) for object_key in sorted(keys)]

    def _read_object(self, bucket: str, key: str) -> str:
        response = self.s3_client.get_object(Bucket=bucket, Key=key)
        return response["Body"].read().decode("utf-8")

    def delete_objects(self, bucket: str, keys: Sequence[str]) -> BatchDeleteResult:
        # Quiet=False makes S3 list every deleted key as well as every error
        response = self.s3_client.delete_objects(
            Bucket=bucket,
            Delete={"Objects": [{"Key": key} for key in keys], "Quiet": False},
        )

        errors = [
            ObjectDeleteError(
                key=error.get("Key", ""),
                code=error.get("Code", "Unknown"),
                message=error.get("Message", ""),
            )
            for error in response.get("Errors", [])
        ]
        return BatchDeleteResult(deleted_count=len(response.get("Deleted", [])), errors=errors)
