"""Folder backends: files stored as plain files in a local or shared folder.

TEMP_FOLDER uses a fixed root created on demand. FOLDER takes its root from
the storage definition complement, which must already exist.

Stored file names are ``{uuid}_{name}`` so two saves never collide.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from uuid import uuid4

from ...errors import (
    InvalidReferenceError,
    InvalidStorageDefinitionError,
    LoadFailedError,
    PurgeFailedError,
    ReferenceNotFoundError,
    SaveFailedError,
)
from ..content import StreamContent
from ..definition import StorageDefinition, StorageKind
from ..reference import FileVariableReference
from ..variable import FileVariable
from .base import StorageBackend

logger = logging.getLogger(__name__)

# Chunk size for file I/O (8KB)
CHUNK_SIZE = 8192


class FolderBackend(StorageBackend):
    """Shared folder storage. The absolute path of the stored file is the locator."""

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self._chunk_size = chunk_size

    @property
    def kind(self) -> StorageKind:
        return StorageKind.FOLDER

    def root_for(self, definition: StorageDefinition | None) -> Path:
        """Folder a file saved with ``definition`` goes to."""
        if definition is None or not definition.complement:
            raise InvalidStorageDefinitionError("FOLDER requires a folder path complement")
        root = Path(definition.complement).expanduser()
        if not root.is_dir():
            raise SaveFailedError(f"folder [{root}] does not exist")
        return root

    def save(self, variable: FileVariable) -> FileVariableReference:
        root = self.root_for(variable.storage_definition)
        target = root / f"{uuid4().hex}_{variable.name}"

        try:
            with variable.content.open() as source, open(target, "xb") as out:
                shutil.copyfileobj(source, out, self._chunk_size)
        except OSError as e:
            target.unlink(missing_ok=True)
            raise SaveFailedError(f"cannot write [{target}]: {e}") from e

        logger.debug("Saved %s to %s", variable.name, target)
        return FileVariableReference(
            kind=self.kind,
            locator=str(target.resolve()),
            name=variable.name,
            mime_type=variable.mime_type,
            original_name=variable.original_name,
        )

    def _stored_path(self, reference: FileVariableReference) -> Path:
        """Local path a reference points to."""
        return Path(reference.locator)

    def load(self, reference: FileVariableReference) -> FileVariable:
        path = self._stored_path(reference)
        try:
            content = StreamContent.from_path(path)
        except FileNotFoundError as e:
            raise ReferenceNotFoundError(reference.locator) from e
        except OSError as e:
            raise LoadFailedError(f"cannot read [{path}]: {e}") from e

        return FileVariable(
            name=reference.name,
            original_name=reference.original_name,
            mime_type=reference.mime_type,
            content=content,
        )

    def purge(self, reference: FileVariableReference) -> bool:
        path = self._stored_path(reference)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PurgeFailedError(f"cannot delete [{path}]: {e}") from e
        logger.debug("Purged %s", path)
        return True


class TempFolderBackend(FolderBackend):
    """Folder storage rooted in this machine's temporary folder."""

    def __init__(self, root: str | Path, chunk_size: int = CHUNK_SIZE):
        super().__init__(chunk_size)
        self._root = Path(root)

    @property
    def kind(self) -> StorageKind:
        return StorageKind.TEMP_FOLDER

    @property
    def root(self) -> Path:
        return self._root

    def root_for(self, definition: StorageDefinition | None) -> Path:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SaveFailedError(f"cannot create temp folder [{self._root}]: {e}") from e
        return self._root

    def _stored_path(self, reference: FileVariableReference) -> Path:
        """
        Local path a reference points to, which must be a file of the root.

        Raises:
            InvalidReferenceError: The locator points outside the root
        """
        path = Path(reference.locator).resolve()
        if path.parent != self._root.resolve():
            raise InvalidReferenceError(
                reference.to_json(), f"locator is outside the temp folder [{self._root}]"
            )
        return path
