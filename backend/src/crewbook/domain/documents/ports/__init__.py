"""Ports (interfaces) the documents domain depends on"""

from .object_storage_port import ObjectMetadata, ObjectStoragePort

__all__ = ["ObjectMetadata", "ObjectStoragePort"]
