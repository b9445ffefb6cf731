"""File content: an owned buffer or a single-use reader.

``FileContent`` is a tagged union. Both variants expose ``open()``, a context
manager yielding a binary stream that is closed when the block exits. A
``BytesContent`` may be opened any number of times; a ``StreamContent`` is
consumed by its first ``open()`` and raises ``ContentConsumedError`` after.
"""

from __future__ import annotations

import io
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Literal

from ..errors import ContentConsumedError


class BytesContent:
    """Materialized bytes owned by a file variable."""

    tag: Literal["bytes"] = "bytes"

    __slots__ = ("_data",)

    def __init__(self, data: bytes):
        self._data = bytes(data)

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def consumed(self) -> bool:
        return False

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        stream = io.BytesIO(self._data)
        try:
            yield stream
        finally:
            stream.close()

    def read(self) -> bytes:
        return self._data

    def close(self) -> None:
        """Nothing to release."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BytesContent):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def __repr__(self) -> str:
        return f"BytesContent({len(self._data)} bytes)"


class StreamContent:
    """Readable byte stream that can be consumed at most once."""

    tag: Literal["stream"] = "stream"

    def __init__(self, stream: BinaryIO, description: str = "<stream>"):
        self._stream: BinaryIO | None = stream
        self._description = description

    @classmethod
    def from_path(cls, path: str | Path) -> StreamContent:
        """Open a local file for reading.

        Raises:
            OSError: If the file cannot be opened
        """
        return cls(open(path, "rb"), description=str(path))

    @property
    def consumed(self) -> bool:
        return self._stream is None

    @property
    def description(self) -> str:
        return self._description

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        stream = self._take()
        try:
            yield stream
        finally:
            stream.close()

    def read(self) -> bytes:
        with self.open() as stream:
            return stream.read()

    def close(self) -> None:
        """Release the stream without reading it. Idempotent."""
        if self._stream is not None:
            stream, self._stream = self._stream, None
            stream.close()

    def _take(self) -> BinaryIO:
        if self._stream is None:
            raise ContentConsumedError(self._description)
        stream, self._stream = self._stream, None
        return stream

    def __repr__(self) -> str:
        state = "consumed" if self.consumed else "ready"
        return f"StreamContent({self._description}, {state})"


FileContent = BytesContent | StreamContent
