"""Adapters - I/O implementations of ports."""

import logging

from yearplanner.config import Config, StorageType

from .memory_store import MemoryStore
from .file_store import FileStore
from .object_store import ObjectStore
from .local_state import LocalState, LocalStateFile
from .api_client import PlannerAPIClient, SyncError

logger = logging.getLogger(__name__)


def create_store(config: Config):
    """Build the ItemStore variant selected by config.storage_type."""
    match config.storage_type:
        case StorageType.LOCAL:
            return FileStore(config.resolved_data_dir)
        case StorageType.OBJECT_STORAGE:
            if not config.bucket_name:
                raise ValueError("BUCKET_NAME is required for object storage")
            import boto3

            client = boto3.client(
                "s3",
                endpoint_url=config.object_storage_endpoint or None,
                region_name=config.object_storage_region or None,
            )
            logger.info(f"Using object storage bucket {config.bucket_name}")
            return ObjectStore(client, config.bucket_name)
        case _:
            return MemoryStore()


__all__ = [
    "create_store",
    "MemoryStore",
    "FileStore",
    "ObjectStore",
    "LocalState",
    "LocalStateFile",
    "PlannerAPIClient",
    "SyncError",
]
