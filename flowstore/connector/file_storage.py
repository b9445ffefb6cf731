"""The ``file_storage`` activity.

Parameters select one function with ``fileStorageFunction``; the other
parameters are those of the selected function::

    {"fileStorageFunction": "upload", "folder": "/data/in",
     "filterFile": "*.pdf", "policy": "ARCHIVE", "archiveFolder": "/data/done",
     "storageDefinition": "TEMP_FOLDER"}

File storage errors become non-retryable error results tagged with the
error code, so the workflow can route on them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from ..errors import FileStorageError
from ..lifecycle import (
    BatchResult,
    CopyRequest,
    DeleteRequest,
    DownloadRequest,
    FileLifecycle,
    UploadRequest,
)
from .activity import Activity, ActivityOutput, ActivityResult, OutputType
from .context import ActivityContext

FUNCTION_PARAMETER = "fileStorageFunction"

# Outputs holding serialized file references
FILE_OUTPUTS = frozenset({"fileLoaded", "listFilesLoaded"})

FunctionHandler = Callable[[dict[str, Any], str], BatchResult]


class FileStorageActivity(Activity):
    """Upload, download, copy or delete files through the storage backends."""

    def __init__(self, lifecycle: FileLifecycle):
        self._lifecycle = lifecycle
        self._functions: dict[str, FunctionHandler] = {
            "upload": self._upload,
            "download": self._download,
            "copy": self._copy,
            "delete": self._delete,
        }

    @property
    def name(self) -> str:
        return "file_storage"

    def functions(self) -> list[str]:
        """Names accepted by ``fileStorageFunction``."""
        return list(self._functions)

    async def execute(
        self, params: dict[str, Any], ctx: ActivityContext
    ) -> ActivityResult:
        raw = params.get(FUNCTION_PARAMETER, params.get("file_storage_function"))
        function = str(raw or "").strip().lower()
        handler = self._functions.get(function)
        if handler is None:
            ctx.logger.error(f"Unknown file storage function: {raw!r}")
            return ActivityResult.error(
                f"Unknown file storage function [{raw}], "
                f"expected one of {', '.join(self._functions)}",
                code="UNKNOWN_FUNCTION",
                retryable=False,
            )

        ctx.logger.info(f"Running {function}")
        try:
            result = await asyncio.to_thread(handler, params, ctx.scope)
        except ValidationError as e:
            ctx.logger.error(f"Invalid parameters for {function}: {e}")
            return ActivityResult.error(
                f"Invalid parameters for {function}: {e}",
                code="INVALID_PARAMETERS",
                retryable=False,
            )
        except FileStorageError as e:
            ctx.logger.error(f"{function} failed [{e.code}]: {e}")
            return ActivityResult.error(str(e), code=e.code, retryable=False)

        return to_activity_result(result)

    def _upload(self, params: dict[str, Any], scope: str) -> BatchResult:
        return self._lifecycle.upload(UploadRequest.model_validate(params), scope=scope)

    def _download(self, params: dict[str, Any], scope: str) -> BatchResult:
        return self._lifecycle.download(DownloadRequest.model_validate(params))

    def _copy(self, params: dict[str, Any], scope: str) -> BatchResult:
        return self._lifecycle.copy(CopyRequest.model_validate(params), scope=scope)

    def _delete(self, params: dict[str, Any], scope: str) -> BatchResult:
        return self._lifecycle.delete(DeleteRequest.model_validate(params))


def to_activity_result(result: BatchResult) -> ActivityResult:
    """Convert a lifecycle result to activity outputs."""
    return ActivityResult.values(
        [
            ActivityOutput(
                name=name,
                output_type=OutputType.FILE if name in FILE_OUTPUTS else OutputType.VALUE,
                value=value,
            )
            for name, value in result.to_output().items()
        ]
    )
