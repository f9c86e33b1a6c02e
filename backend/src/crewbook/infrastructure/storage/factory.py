"""Storage adapter provider used as a FastAPI dependency."""

import logging
from typing import Optional

from fastapi import HTTPException, status

from .s3_storage_adapter import S3StorageAdapter
from .storage_config import load_storage_config

logger = logging.getLogger(__name__)

# Storage adapter singleton (initialized once)
_storage_adapter: Optional[S3StorageAdapter] = None


def get_storage_adapter() -> S3StorageAdapter:
    """Get or create the storage adapter singleton.

    Tests override this dependency with an adapter bound to a mocked bucket.

    Raises:
        HTTPException: If storage configuration is invalid
    """
    global _storage_adapter

    if _storage_adapter is None:
        try:
            config = load_storage_config()
            _storage_adapter = S3StorageAdapter(
                endpoint_url=config.endpoint_url,
                access_key=config.access_key,
                secret_key=config.secret_key,
                bucket_name=config.bucket_name,
                region=config.region,
            )
        except Exception as e:
            logger.error(f"Failed to initialize storage adapter: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Storage configuration error",
            )

    return _storage_adapter



def get_optional_storage_adapter() -> Optional[S3StorageAdapter]:
    """Storage adapter for health checks; None when storage is misconfigured."""
    try:
        return get_storage_adapter()
    except HTTPException:
        return None
