"""Batch file lifecycle: upload, download, copy and delete.

Every operation is one synchronous unit of work. Streams opened along the
way are closed before the operation returns, on success and on failure.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..config import FlowstoreSettings
from ..errors import FileStorageError, LoadFailedError, WriteFailedError
from ..storage import FileVariable, FileVariableReference, StorageBackendRegistry
from ..storage.backends.folder import CHUNK_SIZE
from ..storage.definition import StorageDefinition
from ..types import is_file_name
from .models import (
    BatchResult,
    CopyRequest,
    DeleteRequest,
    DownloadRequest,
    UploadRequest,
)
from .policy import apply_post_action, archive_folder_for, resolve_policy
from .source import list_candidates, resolve_folder

logger = logging.getLogger(__name__)


class FileLifecycle:
    """
    The four file operations, on top of a storage backend registry.

    Example:
        registry = StorageBackendRegistry.from_settings(settings)
        lifecycle = FileLifecycle(registry, settings)
        result = lifecycle.upload(
            UploadRequest.model_validate(
                {"folder": "/data/in", "filterFile": "*.pdf",
                 "storageDefinition": "TEMP_FOLDER"}
            )
        )
    """

    def __init__(
        self,
        registry: StorageBackendRegistry,
        settings: FlowstoreSettings | None = None,
    ):
        self._registry = registry
        self._settings = settings

    @property
    def _chunk_size(self) -> int:
        return self._settings.chunk_size if self._settings else CHUNK_SIZE

    @property
    def _default_max_files(self) -> int:
        return self._settings.default_max_files if self._settings else 0

    def upload(self, request: UploadRequest, *, scope: str | None = None) -> BatchResult:
        """
        Save the matching files of a local folder and apply the policy.

        A failing file aborts the batch unless ``best_effort`` is set. In best
        effort mode a file that cannot be stored goes to ``failed_files``; a
        stored file whose policy fails is counted and goes to
        ``policy_failed_files``.

        Args:
            request: Upload parameters
            scope: Default ENGINE_NATIVE scope ``{workflow_id}/{activity_key}``

        Raises:
            FolderNotFoundError: Source or archive folder missing
            InvalidStorageDefinitionError: Bad destination definition
            LoadFailedError: A source file could not be opened
            SaveFailedError: A backend write failed
            MoveFailedError: The policy could not be applied
        """
        folder = resolve_folder(request.folder)
        definition = request.storage_definition_object(default_scope=scope)
        action = resolve_policy(request.policy)
        # Validated before anything is saved, so a bad folder leaves the source as is
        archive = archive_folder_for(action, request.archive_folder)

        limit = request.maximum_files_to_process
        if limit is None:
            limit = self._default_max_files

        logger.info(
            "Upload from %s to %s",
            folder,
            definition.kind.value,
            extra={"operation": "upload", "folder": str(folder), "policy": action.value},
        )

        result = BatchResult()
        for path in list_candidates(folder, request.file_name, request.filter_file, limit):
            try:
                reference = self._save_path(path, definition)
            except FileStorageError as e:
                if not request.best_effort:
                    raise
                logger.warning("Skipping %s: %s", path.name, e)
                result.failed_files.append(path.name)
                continue

            # A policy failure does not undo the save
            result.record(reference)
            try:
                apply_post_action(action, path, archive)
            except FileStorageError as e:
                if not request.best_effort:
                    raise
                logger.warning("Stored %s but policy %s failed: %s", path.name, action.value, e)
                result.policy_failed_files.append(path.name)

        logger.info(
            "Upload processed %d file(s)",
            result.processed_count,
            extra={
                "operation": "upload",
                "processed": result.processed_count,
                "failed": len(result.failed_files),
                "policy_failed": len(result.policy_failed_files),
            },
        )
        return result

    def _save_path(self, path: Path, definition: StorageDefinition) -> FileVariableReference:
        try:
            variable = FileVariable.from_path(path, storage_definition=definition)
        except OSError as e:
            raise LoadFailedError(f"cannot read [{path}]: {e}") from e
        except ValueError as e:
            raise LoadFailedError(f"[{path.name}] cannot be used as a file name") from e

        with variable:
            return self._registry.save(variable)

    def download(self, request: DownloadRequest) -> BatchResult:
        """
        Write a stored file into a local folder.

        The file is named after the request, else the original name, else
        the logical name. An existing file of that name is overwritten.

        Raises:
            InvalidReferenceError: Malformed source reference
            LoadFailedError: The stored file cannot be loaded
            FolderNotFoundError: Destination folder missing
            WriteFailedError: The local write failed
        """
        reference = FileVariableReference.from_value(request.source_file)

        with self._registry.load(reference) as variable:
            folder = resolve_folder(request.folder_to_save)
            name = request.file_name or variable.original_name or variable.name
            if not is_file_name(name):
                raise WriteFailedError(f"[{name}] is not a file name")

            target = folder / name
            try:
                out = open(target, "wb")
            except OSError as e:
                raise WriteFailedError(f"cannot save to folder [{folder}]: {e}") from e

            try:
                with out, variable.content.open() as source:
                    shutil.copyfileobj(source, out, self._chunk_size)
            except OSError as e:
                # Never leave a truncated file behind
                target.unlink(missing_ok=True)
                raise WriteFailedError(f"cannot write [{target}]: {e}") from e

        logger.info(
            "Downloaded %s to %s",
            reference.name,
            target,
            extra={"operation": "download", "destination": str(target)},
        )
        return BatchResult(
            processed_count=1,
            last_name=name,
            last_mime_type=variable.mime_type,
            destination_file=str(target),
        )

    def copy(self, request: CopyRequest, *, scope: str | None = None) -> BatchResult:
        """
        Save a stored file again with another storage definition.

        The source is never deleted.

        Raises:
            InvalidReferenceError: Malformed source reference
            InvalidStorageDefinitionError: Bad destination definition
            LoadFailedError: The stored file cannot be loaded
            SaveFailedError: The backend write failed
        """
        reference = FileVariableReference.from_value(request.source_file)
        definition = request.storage_definition_object(default_scope=scope)

        with self._registry.load(reference) as variable:
            copied = self._registry.save(variable.with_storage_definition(definition))

        logger.info(
            "Copied %s from %s to %s",
            reference.name,
            reference.kind.value,
            copied.kind.value,
            extra={"operation": "copy"},
        )
        return BatchResult().record(copied)

    def delete(self, request: DeleteRequest) -> BatchResult:
        """
        Purge a stored file. A file that is already gone is not an error.

        Raises:
            InvalidReferenceError: Malformed source reference
            PurgeFailedError: The backend failed to delete
        """
        reference = FileVariableReference.from_value(request.source_file)
        purged = self._registry.purge(reference)

        logger.info(
            "Deleted %s (purged=%s)",
            reference.name,
            purged,
            extra={"operation": "delete", "purged": purged},
        )
        return BatchResult(processed_count=1, file_purged=purged)

