"""
Blob Storage

BlobStore is the interface connectors use to persist uploaded documents.
GCSBlobStore stores them in Google Cloud Storage and returns gs:// URIs,
which Vertex AI can read directly in document mode.
"""

import logging
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional

from google.cloud import storage

from src.common.config import Config
from src.common.error_handling import ExternalServiceError

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Content store keyed by object path."""

    @abstractmethod
    def upload(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """
        Store bytes under key.

        Returns:
            Storage URI for the object (e.g., "gs://bucket/key")
        """
        pass

    @abstractmethod
    def download(self, key: str) -> bytes:
        """Read the object stored under key."""
        pass

    @abstractmethod
    def signed_url(self, key: str, ttl_seconds: int = 3600) -> str:
        """Time-limited read URL for the object."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the object stored under key."""
        pass


class GCSBlobStore(BlobStore):
    """
    Google Cloud Storage implementation.

    Errors from the storage client are wrapped in ExternalServiceError and
    propagate to the caller.
    """

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        project: Optional[str] = None,
        client: Optional[storage.Client] = None,
    ):
        self.bucket_name = bucket_name or Config.GCS_BUCKET_NAME
        self._project = project if project is not None else (Config.GCP_PROJECT_ID or None)
        self._client = client

    def _get_bucket(self) -> storage.Bucket:
        if self._client is None:
            self._client = storage.Client(project=self._project)
            logger.info(f"GCS blob store initialized for bucket: {self.bucket_name}")
        return self._client.bucket(self.bucket_name)

    def upload(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        try:
            blob = self._get_bucket().blob(key)
            blob.cache_control = "public, max-age=31536000"
            blob.upload_from_string(data, content_type=content_type)
        except Exception as e:
            raise ExternalServiceError(f"Blob upload failed for {key}: {e}", service="gcs") from e

        gcs_uri = f"gs://{self.bucket_name}/{key}"
        logger.info(f"File uploaded: {gcs_uri}")
        return gcs_uri

    def download(self, key: str) -> bytes:
        try:
            return self._get_bucket().blob(key).download_as_bytes()
        except Exception as e:
            raise ExternalServiceError(f"Blob download failed for {key}: {e}", service="gcs") from e

    def signed_url(self, key: str, ttl_seconds: int = 3600) -> str:
        try:
            return self._get_bucket().blob(key).generate_signed_url(
                version="v4",
                method="GET",
                expiration=timedelta(seconds=ttl_seconds),
            )
        except Exception as e:
            raise ExternalServiceError(f"Signed URL failed for {key}: {e}", service="gcs") from e

    def delete(self, key: str) -> None:
        try:
            self._get_bucket().blob(key).delete()
        except Exception as e:
            raise ExternalServiceError(f"Blob delete failed for {key}: {e}", service="gcs") from e
        logger.info(f"File deleted: {key}")
