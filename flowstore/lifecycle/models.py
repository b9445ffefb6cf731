"""Lifecycle request and result models.

Requests accept the connector's camelCase parameter names as well as their
snake_case equivalents. Unknown parameters are ignored, since one parameter
set carries the inputs of every function.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing_extensions import Self

from ..storage import FileVariableReference, StorageDefinition


class PostAction(str, Enum):
    """What happens to an uploaded source file."""

    UNCHANGED = "UNCHANGED"
    DELETE = "DELETE"
    ARCHIVE = "ARCHIVE"

    @classmethod
    def parse(cls, token: str | None) -> PostAction | None:
        """Resolve a policy token; blank means UNCHANGED, unknown gives None."""
        if token is None or not token.strip():
            return cls.UNCHANGED
        normalized = token.strip().upper()
        if normalized == "UNCHANGE":
            return cls.UNCHANGED
        try:
            return cls(normalized)
        except ValueError:
            return None


class _Request(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _StoringRequest(_Request):
    """Request that saves files, and so carries a destination definition."""

    storage_definition: str | None = Field(
        default=None,
        validation_alias=AliasChoices("storageDefinition", "storage_definition"),
    )
    storage_definition_folder_complement: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "storageDefinitionFolderComplement", "storage_definition_folder_complement"
        ),
    )
    storage_definition_cmis_complement: str | dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "storageDefinitionCmisComplement", "storage_definition_cmis_complement"
        ),
    )

    def storage_definition_object(self, default_scope: str | None = None) -> StorageDefinition:
        """
        Build the destination storage definition.

        Raises:
            InvalidStorageDefinitionError: Missing, unknown or incomplete
        """
        return StorageDefinition.from_input(
            self.storage_definition,
            self.storage_definition_folder_complement,
            self.storage_definition_cmis_complement,
            default_scope=default_scope,
        )


class UploadRequest(_StoringRequest):
    """Upload files from a local folder into storage."""

    folder: str | None = Field(
        default=None, validation_alias=AliasChoices("folder", "folderToRead", "folder_to_read")
    )
    file_name: str | None = Field(
        default=None, validation_alias=AliasChoices("fileName", "file_name")
    )
    filter_file: str | None = Field(
        default=None, validation_alias=AliasChoices("filterFile", "filter_file")
    )
    policy: str | None = None
    archive_folder: str | None = Field(
        default=None, validation_alias=AliasChoices("archiveFolder", "archive_folder")
    )
    # None falls back to the configured default; 0 or less means no cap
    maximum_files_to_process: int | None = Field(
        default=None,
        validation_alias=AliasChoices("maximumFilesToProcess", "maximum_files_to_process"),
    )
    best_effort: bool = Field(
        default=False, validation_alias=AliasChoices("bestEffort", "best_effort")
    )


class DownloadRequest(_Request):
    """Write a stored file into a local folder."""

    source_file: Any = Field(
        default=None, validation_alias=AliasChoices("sourceFile", "source_file")
    )
    folder_to_save: str | None = Field(
        default=None, validation_alias=AliasChoices("folderToSave", "folder_to_save")
    )
    file_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("fileNameToWrite", "fileName", "file_name"),
    )


class CopyRequest(_StoringRequest):
    """Copy a stored file into another (or the same) storage."""

    source_file: Any = Field(
        default=None, validation_alias=AliasChoices("sourceFile", "source_file")
    )


class DeleteRequest(_Request):
    """Purge a stored file."""

    source_file: Any = Field(
        default=None, validation_alias=AliasChoices("sourceFile", "source_file")
    )


class BatchResult(BaseModel):
    """
    Outcome of one lifecycle operation.

    ``last_*`` describe the item processed last, ``all_references`` lists
    every saved reference in processing order.
    """

    processed_count: int = 0
    all_references: list[FileVariableReference] = Field(default_factory=list)
    last_reference: FileVariableReference | None = None
    last_name: str | None = None
    last_mime_type: str | None = None
    file_purged: bool | None = None
    destination_file: str | None = None
    # Not stored
    failed_files: list[str] = Field(default_factory=list)
    # Stored and counted, but the post action was not applied
    policy_failed_files: list[str] = Field(default_factory=list)

    def record(self, reference: FileVariableReference) -> Self:
        """Count a saved file. Returns self for chaining."""
        self.all_references.append(reference)
        self.last_reference = reference
        self.last_name = reference.name
        self.last_mime_type = reference.mime_type
        self.processed_count += 1
        return self

    def to_output(self) -> dict[str, Any]:
        """Render the variables returned to the workflow."""
        output: dict[str, Any] = {"nbFilesProcessed": self.processed_count}
        if self.last_reference is not None:
            output["fileLoaded"] = self.last_reference.to_json()
            output["listFilesLoaded"] = [ref.to_json() for ref in self.all_references]
        if self.last_name is not None:
            output["fileNameLoaded"] = self.last_name
            output["fileMimeTypeLoaded"] = self.last_mime_type
        if self.file_purged is not None:
            output["filePurged"] = self.file_purged
        if self.destination_file is not None:
            output["destinationFile"] = self.destination_file
        if self.failed_files:
            output["failedFiles"] = list(self.failed_files)
        if self.policy_failed_files:
            output["policyFailedFiles"] = list(self.policy_failed_files)
        return output
