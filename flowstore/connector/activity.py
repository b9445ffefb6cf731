"""Activity interface and result types."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr
from typing_extensions import Self

from .context import ActivityContext


class OutputType(str, Enum):
    """Activity output type."""

    VALUE = "value"
    FILE = "file"


class ActivityOutput(BaseModel):
    """Single activity output."""

    name: str
    output_type: OutputType
    value: Any


class ActivityResult(BaseModel):
    """
    Activity execution result.

    Either a list of outputs, or an error built with :meth:`error` carrying
    a message, a code and whether the engine may retry.
    """

    outputs: list[ActivityOutput] = Field(default_factory=list)

    # Error state (for ActivityResult.error()) - private attributes
    _is_error: bool = PrivateAttr(default=False)
    _error_message: str | None = PrivateAttr(default=None)
    _error_code: str | None = PrivateAttr(default=None)
    _retryable: bool = PrivateAttr(default=True)

    @classmethod
    def values(cls, outputs: list[ActivityOutput]) -> Self:
        """Create result with multiple outputs."""
        return cls(outputs=outputs)

    @classmethod
    def error(
        cls,
        message: str,
        code: str = "EXECUTION_ERROR",
        retryable: bool = True,
    ) -> Self:
        """Create error result."""
        result = cls()
        result._is_error = True
        result._error_message = message
        result._error_code = code
        result._retryable = retryable
        return result

    @property
    def is_error(self) -> bool:
        """Check if this is an error result."""
        return self._is_error

    @property
    def error_message(self) -> str | None:
        """Get error message if this is an error result."""
        return self._error_message

    @property
    def error_code(self) -> str | None:
        """Get error code if this is an error result."""
        return self._error_code

    @property
    def retryable(self) -> bool:
        """Check if error is retryable."""
        return self._retryable

    def to_output_dict(self) -> dict[str, Any]:
        """Convert outputs to a name -> value dict, file references included."""
        return {out.name: out.value for out in self.outputs}


class Activity(ABC):
    """
    Activity implementation interface.

    Subclass this and implement ``name`` and ``execute``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Activity name (e.g., 'file_storage')."""

    @abstractmethod
    async def execute(
        self, params: dict[str, Any], ctx: ActivityContext
    ) -> ActivityResult:
        """
        Execute the activity.

        Args:
            params: Activity input parameters (JSON-compatible dict)
            ctx: Execution context with workflow_id, activity_id, logger

        Returns:
            ActivityResult with outputs, or an error result

        Raises:
            Exception: Activity failed unexpectedly
        """

