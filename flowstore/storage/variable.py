"""In-memory file value passed between the lifecycle and the backends."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from types import TracebackType

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from ..types import FileName, is_file_name
from .content import BytesContent, FileContent, StreamContent
from .definition import StorageDefinition

DEFAULT_MIME_TYPE = "application/octet-stream"


def mime_type_from_name(name: str) -> str:
    """Guess a MIME type from a file name's extension."""
    mime_type, _ = mimetypes.guess_type(name)
    if mime_type is None:
        return DEFAULT_MIME_TYPE
    return mime_type


class FileVariable(BaseModel):
    """
    A file and the storage definition it should be saved with.

    Usable as a context manager: leaving the block releases an unread
    stream, so a loaded variable never leaks an open file.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: FileName
    original_name: str | None = None
    mime_type: str | None = None
    content: FileContent
    storage_definition: StorageDefinition | None = None

    @model_validator(mode="after")
    def _derive_mime_type(self) -> FileVariable:
        if not self.mime_type:
            self.mime_type = mime_type_from_name(self.name)
        return self

    @classmethod
    def from_bytes(
        cls,
        name: str,
        data: bytes,
        *,
        mime_type: str | None = None,
        original_name: str | None = None,
        storage_definition: StorageDefinition | None = None,
    ) -> FileVariable:
        return cls(
            name=name,
            original_name=original_name,
            mime_type=mime_type,
            content=BytesContent(data),
            storage_definition=storage_definition,
        )

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        *,
        storage_definition: StorageDefinition | None = None,
    ) -> FileVariable:
        """Wrap a local file as a single-use stream named after its base name.

        Raises:
            ValueError: If the base name is not a valid file name
            OSError: If the file cannot be opened
        """
        path = Path(path)
        if not is_file_name(path.name):
            raise ValueError(f"[{path.name}] cannot be used as a file name")

        content = StreamContent.from_path(path)
        try:
            return cls(
                name=path.name,
                content=content,
                storage_definition=storage_definition,
            )
        except ValidationError:
            content.close()
            raise

    def with_storage_definition(self, definition: StorageDefinition) -> FileVariable:
        """Same file (sharing its content) paired with another definition."""
        return self.model_copy(update={"storage_definition": definition})

    def read_bytes(self) -> bytes:
        """Read the whole content. Consumes a stream."""
        return self.content.read()

    def close(self) -> None:
        self.content.close()

    def __enter__(self) -> FileVariable:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
