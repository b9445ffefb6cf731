"""Storage backends: inline, temp folder, folder, repository (CMIS), engine."""

from .base import StorageBackend
from .engine import EngineBackend, EngineDocumentClient, EngineFileLocator
from .folder import FolderBackend, TempFolderBackend
from .inline import InlineBackend
from .repository import RepositoryBackend

__all__ = [
    "EngineBackend",
    "EngineDocumentClient",
    "EngineFileLocator",
    "FolderBackend",
    "InlineBackend",
    "RepositoryBackend",
    "StorageBackend",
    "TempFolderBackend",
]
