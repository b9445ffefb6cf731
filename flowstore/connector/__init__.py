"""
Workflow connector for the file storage operations.

Example usage:
    from flowstore.config import FlowstoreSettings
    from flowstore.connector import ActivityRegistry, FileStorageActivity
    from flowstore.lifecycle import FileLifecycle
    from flowstore.storage import StorageBackendRegistry

    settings = FlowstoreSettings()
    storage = StorageBackendRegistry.from_settings(settings)

    registry = ActivityRegistry()
    registry.register(FileStorageActivity(FileLifecycle(storage, settings)))

    result = await registry.execute(
        "file_storage", params, ctx, timeout=settings.activity_timeout
    )
"""

from .activity import (
    Activity,
    ActivityOutput,
    ActivityResult,
    OutputType,
)
from .context import ActivityContext
from .file_storage import FileStorageActivity, to_activity_result
from .registry import ActivityRegistry

__all__ = [
    "Activity",
    "ActivityContext",
    "ActivityOutput",
    "ActivityRegistry",
    "ActivityResult",
    "FileStorageActivity",
    "OutputType",
    "to_activity_result",
]
