"""Storage backend interface."""

from abc import ABC, abstractmethod

from ..reference import FileVariableReference
from ..variable import FileVariable


class StorageBackend(ABC):
    """
    Capability set every storage backend implements.

    A backend holds configuration only; it keeps no per-call state and is
    called concurrently by independent lifecycle operations.
    """

    @abstractmethod
    def save(self, variable: FileVariable) -> FileVariableReference:
        """
        Persist a file variable.

        Consumes the variable's content.

        Raises:
            SaveFailedError: The write failed
            InvalidStorageDefinitionError: The definition lacks what this
                backend needs
        """

    @abstractmethod
    def load(self, reference: FileVariableReference) -> FileVariable:
        """
        Resolve a reference back to a file variable.

        The caller owns the returned variable and must close it.

        Raises:
            ReferenceNotFoundError: The stored file does not exist
            LoadFailedError: The stored file could not be read
        """

    @abstractmethod
    def purge(self, reference: FileVariableReference) -> bool:
        """
        Remove the stored bytes.

        Returns:
            True if something was removed, False if it never existed or the
            backend keeps nothing outside the reference

        Raises:
            PurgeFailedError: Deletion failed for another reason
        """

    def close(self) -> None:
        """Release backend resources (HTTP connections)."""
