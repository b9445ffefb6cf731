"""Storage backend registry.

Dispatches save by the variable's storage definition kind, and load/purge by
the reference kind. Backends are looked up in a mapping; a new backend is
added by registering an implementation of ``StorageBackend``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from typing_extensions import Self

from ..config import FlowstoreSettings
from ..errors import InvalidReferenceError, InvalidStorageDefinitionError
from .backends import (
    EngineBackend,
    EngineDocumentClient,
    FolderBackend,
    InlineBackend,
    RepositoryBackend,
    StorageBackend,
    TempFolderBackend,
)
from .definition import StorageKind
from .reference import FileVariableReference
from .variable import FileVariable

logger = logging.getLogger(__name__)


class StorageBackendRegistry:
    """
    Kind-to-backend mapping with save/load/purge dispatch.

    Construct one per process (or per test) and inject it where needed. It
    holds no per-call state, so concurrent operations may share it.
    """

    def __init__(self, backends: Mapping[StorageKind, StorageBackend] | None = None):
        self._backends: dict[StorageKind, StorageBackend] = dict(backends or {})

    @classmethod
    def from_settings(cls, settings: FlowstoreSettings) -> Self:
        """Build the standard backends from settings.

        ENGINE_NATIVE is only registered when the engine API is configured.
        """
        registry = cls(
            {
                StorageKind.INLINE: InlineBackend(max_bytes=settings.inline_max_bytes),
                StorageKind.TEMP_FOLDER: TempFolderBackend(
                    settings.temp_folder, chunk_size=settings.chunk_size
                ),
                StorageKind.FOLDER: FolderBackend(chunk_size=settings.chunk_size),
                StorageKind.REPOSITORY: RepositoryBackend(
                    settings.repository_username,
                    settings.repository_password,
                    timeout=settings.http_timeout,
                ),
            }
        )

        if settings.engine_enabled:
            client = EngineDocumentClient(
                api_url=str(settings.engine_api_url),
                client_id=settings.engine_client_id or "",
                client_secret=settings.engine_client_secret or "",
                timeout=settings.http_timeout,
            )
            registry.register(StorageKind.ENGINE_NATIVE, EngineBackend(client))

        return registry

    def register(self, kind: StorageKind, backend: StorageBackend) -> None:
        """Register (or replace) the backend serving a kind."""
        self._backends[kind] = backend

    def get(self, kind: StorageKind) -> StorageBackend | None:
        """Get the backend serving a kind."""
        return self._backends.get(kind)

    def kinds(self) -> list[StorageKind]:
        """Get all registered kinds."""
        return list(self._backends)

    def save(self, variable: FileVariable) -> FileVariableReference:
        """
        Persist a file variable with its storage definition.

        Raises:
            InvalidStorageDefinitionError: No definition, or no backend for it
            SaveFailedError: The backend write failed
        """
        definition = variable.storage_definition
        if definition is None:
            raise InvalidStorageDefinitionError(
                f"no storage definition for [{variable.name}]"
            )

        backend = self._backends.get(definition.kind)
        if backend is None:
            raise InvalidStorageDefinitionError(
                f"no backend registered for {definition.kind.value}"
            )

        logger.debug("Saving %s with %s", variable.name, definition.kind.value)
        return backend.save(variable)

    def load(self, reference: FileVariableReference | str | Mapping[str, Any]) -> FileVariable:
        """
        Resolve a reference (or its serialized form) to a file variable.

        The caller owns the returned variable and must close it.

        Raises:
            InvalidReferenceError: Unparseable reference, or no backend for it
            LoadFailedError: The backend could not resolve the locator
        """
        reference = FileVariableReference.from_value(reference)
        logger.debug("Loading %s from %s", reference.name, reference.kind.value)
        return self._backend_for(reference).load(reference)

    def purge(self, reference: FileVariableReference | str | Mapping[str, Any]) -> bool:
        """
        Remove the bytes behind a reference.

        Returns:
            False if there was nothing to remove

        Raises:
            InvalidReferenceError: Unparseable reference, or no backend for it
            PurgeFailedError: The backend failed to delete
        """
        reference = FileVariableReference.from_value(reference)
        logger.debug("Purging %s from %s", reference.name, reference.kind.value)
        return self._backend_for(reference).purge(reference)

    def close(self) -> None:
        """Close all backends."""
        for backend in self._backends.values():
            backend.close()

    def _backend_for(self, reference: FileVariableReference) -> StorageBackend:
        backend = self._backends.get(reference.kind)
        if backend is None:
            raise InvalidReferenceError(
                reference.to_json(), f"no backend registered for {reference.kind.value}"
            )
        return backend
