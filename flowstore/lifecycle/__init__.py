"""Batch file lifecycle: upload, download, copy and delete."""

from .models import (
    BatchResult,
    CopyRequest,
    DeleteRequest,
    DownloadRequest,
    PostAction,
    UploadRequest,
)
from .operations import FileLifecycle

__all__ = [
    "BatchResult",
    "CopyRequest",
    "DeleteRequest",
    "DownloadRequest",
    "FileLifecycle",
    "PostAction",
    "UploadRequest",
]
