"""Abstract storage provider interface for multi-cloud support.

This module defines the StorageProvider abstract base class implemented for
the object stores holding query results and source files (S3, GCS).
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from datasweeper.objects.delete_result import BatchDeleteResult


class StorageProvider(ABC):
    """Abstract interface for object-store reads and batched deletes.

    Example implementations:
        - S3Manager: AWS S3
        - GcsManager: Google Cloud Storage
    """

    @abstractmethod
    def read_text_objects(self, uri: str) -> List[str]:
        """Read text object(s) at a URI.

        Args:
            uri: URI of a single object, or a prefix URI ending in "/" to read
                every object under it in key order

        Returns:
            Decoded contents, one entry per object
        """
        pass

    @abstractmethod
    def delete_objects(self, bucket: str, keys: Sequence[str]) -> BatchDeleteResult:
        """Delete a batch of keys from one bucket in a single request.

        Implementations report per-key failures in the result rather than
        raising, so the caller can account for partial failures.

        Args:
            bucket: Bucket name
            keys: Object keys without a leading separator

        Returns:
            BatchDeleteResult with deleted count and per-key errors
        """
        pass

    @property
    @abstractmethod
    def scheme(self) -> str:
        """URI scheme of this object store ("s3" or "gs")."""
        pass
