"""
Flowstore: file references for workflows.

A workflow passes a small serializable reference instead of file bytes; the
bytes live in one of several storage backends (inline, temp folder, shared
folder, CMIS repository, workflow engine).

Example usage:
    from flowstore import FileLifecycle, FlowstoreSettings, StorageBackendRegistry, UploadRequest

    settings = FlowstoreSettings()
    lifecycle = FileLifecycle(StorageBackendRegistry.from_settings(settings), settings)

    result = lifecycle.upload(
        UploadRequest.model_validate(
            {
                "folder": "/data/inbox",
                "filterFile": "*.pdf",
                "policy": "ARCHIVE",
                "archiveFolder": "/data/archive",
                "storageDefinition": "TEMP_FOLDER",
            }
        )
    )
    print(result.to_output()["listFilesLoaded"])
"""

from importlib.metadata import PackageNotFoundError, version

from .config import FlowstoreSettings
from .errors import (
    FileStorageError,
    FolderNotFoundError,
    InvalidReferenceError,
    InvalidStorageDefinitionError,
    LoadFailedError,
    MoveFailedError,
    PurgeFailedError,
    ReferenceNotFoundError,
    SaveFailedError,
    WriteFailedError,
)
from .lifecycle import (
    BatchResult,
    CopyRequest,
    DeleteRequest,
    DownloadRequest,
    FileLifecycle,
    PostAction,
    UploadRequest,
)
from .storage import (
    FileVariable,
    FileVariableReference,
    StorageBackendRegistry,
    StorageDefinition,
    StorageKind,
)

try:
    __version__ = version("flowstore")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "BatchResult",
    "CopyRequest",
    "DeleteRequest",
    "DownloadRequest",
    "FileLifecycle",
    "FileStorageError",
    "FileVariable",
    "FileVariableReference",
    "FlowstoreSettings",
    "FolderNotFoundError",
    "InvalidReferenceError",
    "InvalidStorageDefinitionError",
    "LoadFailedError",
    "MoveFailedError",
    "PostAction",
    "PurgeFailedError",
    "ReferenceNotFoundError",
    "SaveFailedError",
    "StorageBackendRegistry",
    "StorageDefinition",
    "StorageKind",
    "UploadRequest",
    "WriteFailedError",
    "__version__",
]
