"""Error types.

Every file storage error carries a stable ``code`` that is surfaced to the
workflow engine as the tagged failure of the activity. None of them are
retryable: a failure is terminal for the operation that raised it.
"""


class FileStorageError(Exception):
    """Base exception for file storage operations."""

    code = "FILE_STORAGE_ERROR"


class InvalidStorageDefinitionError(FileStorageError):
    """Storage definition is empty, unknown, or missing its complement."""

    code = "INCORRECT_STORAGEDEFINITION"

    def __init__(self, message: str):
        super().__init__(f"Invalid storage definition: {message}")


class InvalidReferenceError(FileStorageError):
    """File reference cannot be parsed or resolved to a backend."""

    code = "ACCESS_FILEVARIABLE"

    def __init__(self, reference: object, reason: str | None = None):
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Invalid file reference: {reference!r}{detail}")
        self.reference = reference


class FolderNotFoundError(FileStorageError):
    """Folder does not exist, or is not visible from this machine."""

    code = "FOLDER_NOT_EXIST"

    def __init__(self, folder: str | None, reason: str = "does not exist"):
        super().__init__(f"Folder [{folder}] {reason}")
        self.folder = folder


class LoadFailedError(FileStorageError):
    """Backend could not resolve or read a stored file."""

    code = "LOAD_FILE_ERROR"

    def __init__(self, message: str):
        super().__init__(f"Load failed: {message}")


class ReferenceNotFoundError(LoadFailedError):
    """The stored file a reference points to does not exist."""

    def __init__(self, locator: str):
        super().__init__(f"file not found: {locator}")
        self.locator = locator


class SaveFailedError(FileStorageError):
    """Backend write failed."""

    code = "SAVE_FILEVARIABLE"

    def __init__(self, message: str):
        super().__init__(f"Save failed: {message}")


class PurgeFailedError(FileStorageError):
    """Backend deletion failed for a reason other than the file being absent."""

    code = "PURGE_FILE_ERROR"

    def __init__(self, message: str):
        super().__init__(f"Purge failed: {message}")


class WriteFailedError(FileStorageError):
    """Writing a file to a local folder failed."""

    code = "WRITE_FILE_ERROR"

    def __init__(self, message: str):
        super().__init__(f"Write failed: {message}")


class MoveFailedError(FileStorageError):
    """Post-action policy could not be applied to a source file."""

    code = "MOVE_FILE_ERROR"

    def __init__(self, message: str):
        super().__init__(f"Move failed: {message}")


class ContentConsumedError(RuntimeError):
    """A single-use stream was opened a second time."""

    def __init__(self, description: str):
        super().__init__(f"Stream already consumed: {description}")


class ConnectorError(Exception):
    """Base class for connector errors."""


class AuthenticationError(ConnectorError):
    """Authentication against the workflow engine failed."""


class ActivityNotFoundError(ConnectorError):
    """Activity implementation not found in registry."""


class ActivityTimeoutError(ConnectorError):
    """Activity execution timed out."""
