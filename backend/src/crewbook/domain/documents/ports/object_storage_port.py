"""Object Storage Port - domain interface for S3-compatible storage.

The API never proxies document bytes. Storage hands out short-lived
presigned URLs for direct upload/download and reports what actually landed
in the bucket so uploads can be verified before a document becomes READY.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class ObjectMetadata:
    """Metadata of an object as reported by the store (HEAD request).

    Attributes:
        key: Object key (format: {org_id}/{member_id}/{uuid}{ext})
        size_bytes: Stored object size (Content-Length)
        content_type: Stored Content-Type, if any
        etag: Object ETag, if any
    """
    key: str
    size_bytes: int
    content_type: Optional[str] = None
    etag: Optional[str] = None


class ObjectStoragePort(ABC):
    """Port interface for presigned-URL based object storage.

    Example Usage:
        storage = S3StorageAdapter(...)

        url = await storage.generate_presigned_upload_url(
            key="org/member/uuid.pdf",
            content_type="application/pdf",
        )
        # ... client PUTs the file to url ...
        metadata = await storage.head_object("org/member/uuid.pdf")
    """

    @abstractmethod
    async def generate_presigned_upload_url(
        self,
        key: str,
        content_type: str,
        expires_in_seconds: int = 300,
    ) -> str:
        """Generate a presigned PUT URL for a direct client upload.

        The client must send the same Content-Type (and the server-side
        encryption header returned by required_upload_headers) with the PUT.

        Raises:
            StorageError: If URL generation fails
        """
        pass

    @abstractmethod
    async def generate_presigned_download_url(
        self,
        key: str,
        download_name: str,
        expires_in_seconds: int = 90,
    ) -> str:
        """Generate a presigned GET URL that downloads as an attachment.

        Raises:
            StorageError: If URL generation fails
        """
        pass

    @abstractmethod
    async def head_object(self, key: str) -> ObjectMetadata:
        """Return stored metadata for key.

        Raises:
            FileNotFoundError: If the object doesn't exist
            StorageError: If the store can't be reached
        """
        pass

    @abstractmethod
    async def delete_file(self, key: str) -> bool:
        """Delete an object.

        Returns:
            bool: True if deleted, False if it didn't exist

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    def required_upload_headers(self, content_type: str) -> dict:
        """Headers the client must send with the presigned PUT."""
        pass
