"""Serializable file reference.

A reference is the small token a workflow keeps instead of the file bytes.
It names the backend that produced it, so it can be resolved later without
being told where the file went.

Serialized form (compact JSON)::

    {"kind":"TEMP_FOLDER","locator":"/tmp/flowstore/5f0c..._invoice.pdf",
     "name":"invoice.pdf","mimeType":"application/pdf"}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import InvalidReferenceError
from ..types import FileName, MimeType
from .definition import StorageKind


class FileVariableReference(BaseModel):
    """Reference to a file stored by one of the backends."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    kind: StorageKind
    locator: str
    name: FileName
    mime_type: MimeType = Field(alias="mimeType")
    original_name: str | None = Field(default=None, alias="originalName")
    # Non-secret backend coordinates, e.g. the repository a document lives in
    location: dict[str, str] | None = None

    def to_json(self) -> str:
        """Serialize to the compact JSON form."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, text: str) -> FileVariableReference:
        """Parse the compact JSON form.

        Raises:
            InvalidReferenceError: If the text is empty or not a reference
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidReferenceError(text, "empty reference")
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise InvalidReferenceError(text, _summary(e)) from e

    @classmethod
    def from_value(cls, value: Any) -> FileVariableReference:
        """Accept a reference, its JSON text, or an already decoded mapping.

        Raises:
            InvalidReferenceError: If the value is none of these
        """
        if isinstance(value, FileVariableReference):
            return value
        if isinstance(value, str):
            return cls.from_json(value)
        if isinstance(value, Mapping):
            try:
                return cls.model_validate(dict(value))
            except ValidationError as e:
                raise InvalidReferenceError(value, _summary(e)) from e
        raise InvalidReferenceError(value, "expected a JSON string or an object")

    def __str__(self) -> str:
        return self.to_json()


def _summary(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}"
        for err in error.errors()
    )
