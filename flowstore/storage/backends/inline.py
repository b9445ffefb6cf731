"""INLINE backend: the bytes travel base64-encoded inside the reference."""

import base64
import binascii
import logging

from ...errors import LoadFailedError, SaveFailedError
from ..definition import StorageKind
from ..reference import FileVariableReference
from ..variable import FileVariable
from .base import StorageBackend

logger = logging.getLogger(__name__)


class InlineBackend(StorageBackend):
    """Stores nothing outside the reference; size is capped by ``max_bytes``."""

    def __init__(self, max_bytes: int = 0):
        self._max_bytes = max_bytes

    def save(self, variable: FileVariable) -> FileVariableReference:
        try:
            data = variable.read_bytes()
        except OSError as e:
            raise SaveFailedError(f"cannot read content of [{variable.name}]: {e}") from e

        if self._max_bytes and len(data) > self._max_bytes:
            raise SaveFailedError(
                f"[{variable.name}] is {len(data)} bytes, "
                f"INLINE storage is limited to {self._max_bytes}"
            )

        logger.debug("Encoded %s inline (%d bytes)", variable.name, len(data))
        return FileVariableReference(
            kind=StorageKind.INLINE,
            locator=base64.b64encode(data).decode("ascii"),
            name=variable.name,
            mime_type=variable.mime_type,
            original_name=variable.original_name,
        )

    def load(self, reference: FileVariableReference) -> FileVariable:
        try:
            data = base64.b64decode(reference.locator, validate=True)
        except (binascii.Error, ValueError) as e:
            raise LoadFailedError(f"corrupt inline payload for [{reference.name}]") from e

        return FileVariable.from_bytes(
            reference.name,
            data,
            mime_type=reference.mime_type,
            original_name=reference.original_name,
        )

    def purge(self, reference: FileVariableReference) -> bool:
        return False
