"""Storage definition: where and how a file variable is persisted.

Text format: ``KIND[:complement]``, for example::

    INLINE
    TEMP_FOLDER
    FOLDER:/mnt/shared/files
    REPOSITORY:{"url": "http://cmis/browser", "repositoryName": "main"}
    ENGINE_NATIVE:019353a1-b0c1-7000-8000-000000000001/step1
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import InvalidStorageDefinitionError


class StorageKind(str, Enum):
    """Backend variant."""

    INLINE = "INLINE"
    TEMP_FOLDER = "TEMP_FOLDER"
    FOLDER = "FOLDER"
    REPOSITORY = "REPOSITORY"
    ENGINE_NATIVE = "ENGINE_NATIVE"

    @classmethod
    def from_token(cls, token: str) -> StorageKind:
        """Resolve a kind token, accepting the historical aliases.

        Raises:
            InvalidStorageDefinitionError: If the token is not recognized
        """
        normalized = token.strip().upper().replace("-", "_")
        kind = _KIND_ALIASES.get(normalized)
        if kind is None:
            raise InvalidStorageDefinitionError(f"unknown storage kind [{token}]")
        return kind


_KIND_ALIASES: dict[str, StorageKind] = {
    **{kind.value: kind for kind in StorageKind},
    "JSON": StorageKind.INLINE,
    "TEMPFOLDER": StorageKind.TEMP_FOLDER,
    "CMIS": StorageKind.REPOSITORY,
    "ENGINE": StorageKind.ENGINE_NATIVE,
    "CAMUNDA": StorageKind.ENGINE_NATIVE,
}


class RepositoryParameters(BaseModel):
    """Connection to a CMIS repository and the folder documents go to."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    url: str = Field(min_length=1)
    repository_name: str = Field(min_length=1, alias="repositoryName")
    username: str | None = Field(default=None, alias="userName")
    password: str | None = Field(default=None, repr=False)
    target_folder: str = Field(default="/", alias="storageDefinitionFolder")

    @property
    def endpoint(self) -> str:
        """Browser binding URL of the repository."""
        return f"{self.url.rstrip('/')}/{self.repository_name}"

    def public_dict(self) -> dict[str, Any]:
        """Parameters without the password, with their external names."""
        return self.model_dump(by_alias=True, exclude={"password"}, exclude_none=True)


class StorageDefinition(BaseModel):
    """Parsed, immutable description of a storage backend and its complement."""

    model_config = ConfigDict(frozen=True)

    kind: StorageKind
    complement: str | None = None
    complement_structured: RepositoryParameters | None = None

    @model_validator(mode="before")
    @classmethod
    def _blank_complement_is_absent(cls, data: Any) -> Any:
        if isinstance(data, dict):
            complement = data.get("complement")
            if isinstance(complement, str) and not complement.strip():
                data = {**data, "complement": None}
        return data

    @model_validator(mode="after")
    def _check_complement(self) -> StorageDefinition:
        if self.kind == StorageKind.FOLDER and not self.complement:
            raise ValueError("FOLDER requires a folder path complement")
        if self.kind == StorageKind.REPOSITORY and self.complement_structured is None:
            raise ValueError("REPOSITORY requires repository parameters")
        return self

    @classmethod
    def parse(cls, text: str | None) -> StorageDefinition:
        """Parse ``KIND[:complement]``.

        Raises:
            InvalidStorageDefinitionError: If the text is empty, the kind is
                unknown, or the complement is missing or undecodable
        """
        kind, complement = _split(text)
        if kind == StorageKind.REPOSITORY:
            return cls._build(kind, None, complement)
        return cls._build(kind, complement, None)

    @classmethod
    def from_input(
        cls,
        kind_text: str | None,
        folder_complement: str | None = None,
        repository_complement: str | Mapping[str, Any] | None = None,
        *,
        default_scope: str | None = None,
    ) -> StorageDefinition:
        """Build a definition from the separate connector parameters.

        The kind text may embed its own complement; the explicit complements
        take precedence when non-blank. ``default_scope`` is used as the
        complement of an ENGINE_NATIVE definition that has none.

        Raises:
            InvalidStorageDefinitionError: As for :meth:`parse`
        """
        kind, complement = _split(kind_text)
        if folder_complement is not None and folder_complement.strip():
            complement = folder_complement.strip()

        if kind == StorageKind.REPOSITORY:
            structured = repository_complement
            if structured is None or (isinstance(structured, str) and not structured.strip()):
                structured = complement
            return cls._build(kind, None, structured)

        if kind == StorageKind.ENGINE_NATIVE and not complement:
            complement = default_scope
        return cls._build(kind, complement, None)

    @classmethod
    def _build(
        cls,
        kind: StorageKind,
        complement: str | None,
        structured: str | Mapping[str, Any] | None,
    ) -> StorageDefinition:
        parameters = _decode_repository(structured) if structured is not None else None
        try:
            return cls(
                kind=kind,
                complement=complement,
                complement_structured=parameters,
            )
        except ValidationError as e:
            messages = "; ".join(err["msg"] for err in e.errors())
            raise InvalidStorageDefinitionError(messages) from e

    def __str__(self) -> str:
        if self.complement_structured is not None:
            params = json.dumps(self.complement_structured.public_dict(), sort_keys=True)
            return f"{self.kind.value}:{params}"
        if self.complement:
            return f"{self.kind.value}:{self.complement}"
        return self.kind.value


def _split(text: str | None) -> tuple[StorageKind, str | None]:
    if text is None or not text.strip():
        raise InvalidStorageDefinitionError("empty storage definition")
    token, _, complement = text.strip().partition(":")
    complement = complement.strip()
    return StorageKind.from_token(token), complement or None


def _decode_repository(raw: str | Mapping[str, Any] | RepositoryParameters) -> RepositoryParameters:
    if isinstance(raw, RepositoryParameters):
        return raw
    if isinstance(raw, str):
        try:
            raw = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise InvalidStorageDefinitionError(
                "repository parameters are not valid JSON/YAML"
            ) from e
    if not isinstance(raw, Mapping):
        raise InvalidStorageDefinitionError("repository parameters must be a mapping")
    try:
        return RepositoryParameters.model_validate(dict(raw))
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise InvalidStorageDefinitionError(
            f"incomplete repository parameters ({fields})"
        ) from e
