"""S3 Storage Adapter - Implementation of ObjectStoragePort using boto3.

Provides presigned upload/download URLs and object verification for AWS S3,
MinIO, and other S3-compatible services.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ...domain.documents.ports.object_storage_port import ObjectMetadata, ObjectStoragePort
from ...domain.documents.validation import build_content_disposition

logger = logging.getLogger(__name__)

SERVER_SIDE_ENCRYPTION = "AES256"
NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class S3StorageAdapter(ObjectStoragePort):
    """S3-compatible storage adapter using boto3.

    Presigned URLs are signed with SigV4 so they work against both AWS and
    MinIO. Uploads are requested with AES256 server-side encryption, which
    the client must echo in its PUT (see required_upload_headers).

    Example:
        config = load_storage_config()
        storage = S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

        upload_url = await storage.generate_presigned_upload_url(
            key="<org_id>/<member_id>/<uuid>.pdf",
            content_type="application/pdf",
        )
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
    ):
        """Initialize S3 storage adapter.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: S3 bucket name
            region: AWS region (default: 'us-east-1')

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
                config=Config(signature_version="s3v4"),
            )
            self.bucket_name = bucket_name
            self.region = region

            logger.info(
                f"Initialized S3 storage adapter: bucket={bucket_name}, "
                f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    def required_upload_headers(self, content_type: str) -> dict:
        return {
            "Content-Type": content_type,
            "x-amz-server-side-encryption": SERVER_SIDE_ENCRYPTION,
        }

    async def generate_presigned_upload_url(
        self,
        key: str,
        content_type: str,
        expires_in_seconds: int = 300,
    ) -> str:
        """Generate a presigned PUT URL for a direct client upload.

        Args:
            key: Object key to upload to
            content_type: MIME type the client will send
            expires_in_seconds: URL lifetime (default: 5 minutes)

        Returns:
            str: Presigned URL

        Raises:
            StorageError: If URL generation fails
        """
        try:
            url = self.s3_client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket_name,
                    "Key": key,
                    "ContentType": content_type,
                    "ServerSideEncryption": SERVER_SIDE_ENCRYPTION,
                },
                ExpiresIn=expires_in_seconds,
            )
            logger.info(
                f"Generated presigned upload URL: key={key}, "
                f"expires_in={expires_in_seconds}s"
            )
            return url
        except ClientError as e:
            error_code = _error_code(e)
            logger.error(f"Presigned upload URL generation failed: key={key}, error={error_code}")
            raise StorageError(f"Failed to generate upload URL: {error_code}")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Unexpected error generating upload URL: {e}")
            raise StorageError(f"Failed to generate upload URL: {e}")

    async def generate_presigned_download_url(
        self,
        key: str,
        download_name: str,
        expires_in_seconds: int = 90,
    ) -> str:
        """Generate a presigned GET URL forcing an attachment download.

        The response is served as application/octet-stream so browsers never
        render user-supplied content inline.

        Args:
            key: Object key
            download_name: File name offered to the browser
            expires_in_seconds: URL lifetime (default: 90 seconds)

        Returns:
            str: Presigned URL

        Raises:
            StorageError: If URL generation fails
        """
        try:
            url = self.s3_client.generate_presigned_url(
                "get_object",
                Params={
                    "Bucket": self.bucket_name,
                    "Key": key,
                    "ResponseContentDisposition": build_content_disposition(download_name),
                    "ResponseContentType": "application/octet-stream",
                },
                ExpiresIn=expires_in_seconds,
            )
            logger.info(
                f"Generated presigned download URL: key={key}, "
                f"expires_in={expires_in_seconds}s"
            )
            return url
        except ClientError as e:
            error_code = _error_code(e)
            logger.error(f"Presigned download URL generation failed: key={key}, error={error_code}")
            raise StorageError(f"Failed to generate download URL: {error_code}")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Unexpected error generating download URL: {e}")
            raise StorageError(f"Failed to generate download URL: {e}")

    async def head_object(self, key: str) -> ObjectMetadata:
        """Read object metadata with a HEAD request.

        Args:
            key: Object key

        Returns:
            ObjectMetadata: Size, content type and ETag of the stored object

        Raises:
            FileNotFoundError: If the object doesn't exist
            StorageError: If the request fails for any other reason
        """
        try:
            response = self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            error_code = _error_code(e)
            if error_code in NOT_FOUND_CODES:
                logger.warning(f"Object not found: key={key}")
                raise FileNotFoundError(f"Object not found: {key}")
            logger.error(f"S3 head_object failed: key={key}, error={error_code}")
            raise StorageError(f"Failed to read object metadata: {error_code}")
        except BotoCoreError as e:
            logger.error(f"Unexpected error reading object metadata: {e}")
            raise StorageError(f"Failed to read object metadata: {e}")

        return ObjectMetadata(
            key=key,
            size_bytes=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType"),
            etag=(response.get("ETag") or "").strip('"') or None,
        )

    async def file_exists(self, key: str) -> bool:
        """Check if an object exists.

        Uses HEAD request (faster than GET). Errors other than not-found are
        logged and reported as missing.
        """
        try:
            await self.head_object(key)
            return True
        except FileNotFoundError:
            return False
        except StorageError as e:
            logger.warning(f"Error checking object existence: key={key}, error={e}")
            return False

    async def delete_file(self, key: str) -> bool:
        """Delete an object.

        Args:
            key: Object key to delete

        Returns:
            bool: True if deleted, False if didn't exist

        Raises:
            StorageError: If deletion fails
        """
        if not await self.file_exists(key):
            logger.info(f"Object not found for deletion: key={key}")
            return False

        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            logger.info(f"Deleted object: key={key}")
            return True
        except ClientError as e:
            error_code = _error_code(e)
            logger.error(f"S3 deletion failed: key={key}, error={error_code}")
            raise StorageError(f"Failed to delete object: {error_code}")
        except BotoCoreError as e:
            logger.error(f"Unexpected error during deletion: {e}")
            raise StorageError(f"Failed to delete object: {e}")

    async def verify_bucket_exists(self) -> bool:
        """Verify that the configured bucket exists.

        Returns:
            bool: True if bucket exists

        Raises:
            StorageError: If bucket check fails or bucket doesn't exist
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            logger.info(f"Verified bucket exists: {self.bucket_name}")
            return True
        except ClientError as e:
            error_code = _error_code(e)
            if error_code in NOT_FOUND_CODES:
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update S3_BUCKET_NAME."
                )
            raise StorageError(f"Failed to verify bucket: {error_code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to verify bucket: {e}")
