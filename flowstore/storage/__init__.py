"""Storage model: definitions, file variables, references and backends.

A workflow keeps a ``FileVariableReference`` instead of the file bytes. The
``StorageBackendRegistry`` saves a ``FileVariable`` with the backend its
``StorageDefinition`` names, and resolves a reference back through the
backend recorded in the reference itself.
"""

from .backends import StorageBackend
from .content import BytesContent, FileContent, StreamContent
from .definition import RepositoryParameters, StorageDefinition, StorageKind
from .reference import FileVariableReference
from .registry import StorageBackendRegistry
from .variable import FileVariable, mime_type_from_name

__all__ = [
    "BytesContent",
    "FileContent",
    "FileVariable",
    "FileVariableReference",
    "RepositoryParameters",
    "StorageBackend",
    "StorageBackendRegistry",
    "StorageDefinition",
    "StorageKind",
    "StreamContent",
    "mime_type_from_name",
]
