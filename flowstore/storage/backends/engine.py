"""ENGINE_NATIVE backend: files kept by the workflow engine itself.

Files are scoped to a workflow instance and an activity. The storage
definition complement carries the scope as ``{workflow_id}/{activity_key}``;
the locator is ``engine://{workflow_id}/{activity_key}/{filename}``.
"""

from __future__ import annotations

import logging
import re
import threading
from uuid import UUID

import httpx
from pydantic import BaseModel

from ...errors import (
    AuthenticationError,
    InvalidReferenceError,
    InvalidStorageDefinitionError,
    LoadFailedError,
    PurgeFailedError,
    ReferenceNotFoundError,
    SaveFailedError,
)
from ...types import ActivityKey, FileName
from ..definition import StorageKind
from ..reference import FileVariableReference
from ..variable import FileVariable
from .base import StorageBackend

logger = logging.getLogger(__name__)

ENGINE_PROVIDER = "engine"


class EngineFileLocator(BaseModel):
    """Location of a file in the engine's activity file storage.

    Format: engine://{workflow_id}/{activity_key}/{filename}
    Example: engine://019353a1-b0c1-7000-8000-000000000001/step1/result.txt
    """

    workflow_id: UUID
    activity_key: ActivityKey
    filename: FileName

    def to_string(self) -> str:
        return f"{ENGINE_PROVIDER}://{self.workflow_id}/{self.activity_key}/{self.filename}"

    @classmethod
    def from_string(cls, locator: str) -> EngineFileLocator:
        """Parse a locator string.

        Raises:
            InvalidReferenceError: If the locator format is invalid
        """
        # Pattern: engine://workflow_id/activity_key/filename
        pattern = rf"^{ENGINE_PROVIDER}://([0-9a-f-]+)/([^/]+)/([^/]+)$"
        match = re.match(pattern, locator, re.IGNORECASE)
        if not match:
            raise InvalidReferenceError(locator, "not an engine locator")

        try:
            return cls(
                workflow_id=UUID(match.group(1)),
                activity_key=match.group(2),
                filename=match.group(3),
            )
        except ValueError as e:
            raise InvalidReferenceError(locator, "not an engine locator") from e

    @classmethod
    def from_scope(cls, scope: str | None, filename: str) -> EngineFileLocator:
        """Build a locator from a ``{workflow_id}/{activity_key}`` scope.

        Raises:
            InvalidStorageDefinitionError: If the scope is missing or malformed
        """
        if not scope:
            raise InvalidStorageDefinitionError(
                "ENGINE_NATIVE requires a {workflow_id}/{activity_key} complement"
            )
        workflow_id, _, activity_key = scope.strip().strip("/").partition("/")
        try:
            return cls(
                workflow_id=UUID(workflow_id),
                activity_key=activity_key,
                filename=filename,
            )
        except ValueError as e:
            raise InvalidStorageDefinitionError(
                f"bad ENGINE_NATIVE scope [{scope}]"
            ) from e

    @property
    def path(self) -> str:
        return (
            f"/api/v1/workflows/{self.workflow_id}"
            f"/activities/{self.activity_key}/files/{self.filename}"
        )


class EngineDocumentClient:
    """
    Synchronous HTTP client for the engine's activity file API.

    Implements OAuth client-credentials token management with automatic
    refresh on 401. Safe to share between threads.
    """

    def __init__(
        self,
        api_url: str,
        client_id: str,
        client_secret: str,
        *,
        timeout: float = 30.0,
    ):
        self._api_url = api_url.rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._token: str | None = None
        self._lock = threading.Lock()
        self._http = httpx.Client(base_url=self._api_url, timeout=timeout)

    def close(self) -> None:
        """Close HTTP client."""
        self._http.close()

    def _obtain_token(self) -> str:
        """Obtain access token via OAuth client credentials flow."""
        response = self._http.post(
            "/api/v1/oauth/token",
            json={
                "grant_type": "client_credentials",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
        )
        if response.status_code != 200:
            raise AuthenticationError(
                f"Token request failed: {response.status_code} - {response.text}"
            )
        return response.json()["access_token"]

    def _get_token(self) -> str:
        """Get current token or obtain new one."""
        token = self._token
        if token:
            return token

        with self._lock:
            # Double-check after acquiring lock
            if self._token:
                return self._token
            self._token = self._obtain_token()
            return self._token

    def _clear_token(self) -> None:
        """Clear cached token (called on 401)."""
        with self._lock:
            self._token = None

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Make request with automatic token refresh on 401."""
        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {self._get_token()}"
        response = self._http.request(method, path, headers=headers, **kwargs)

        # Handle 401 by refreshing token and retrying once
        if response.status_code == 401:
            self._clear_token()
            headers["Authorization"] = f"Bearer {self._get_token()}"
            response = self._http.request(method, path, headers=headers, **kwargs)

        return response

    def upload(
        self, locator: EngineFileLocator, content: bytes, content_type: str | None
    ) -> None:
        """
        Upload a file.

        POST /api/v1/workflows/{workflow_id}/activities/{activity_key}/files/{filename}
        """
        headers = {"Content-Type": content_type} if content_type else None
        response = self._request("POST", locator.path, content=content, headers=headers)
        response.raise_for_status()

    def download(self, locator: EngineFileLocator) -> bytes | None:
        """
        Download a file. Returns None when the engine does not have it.

        GET /api/v1/workflows/{workflow_id}/activities/{activity_key}/files/{filename}
        """
        response = self._request("GET", locator.path)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.content

    def delete(self, locator: EngineFileLocator) -> bool:
        """
        Delete a file. Returns False when the engine does not have it.

        DELETE /api/v1/workflows/{workflow_id}/activities/{activity_key}/files/{filename}
        """
        response = self._request("DELETE", locator.path)
        if response.status_code == 404:
            return False
        response.raise_for_status()
        return True


class EngineBackend(StorageBackend):
    """Storage through the workflow engine's file API."""

    def __init__(self, client: EngineDocumentClient):
        self._client = client

    def save(self, variable: FileVariable) -> FileVariableReference:
        definition = variable.storage_definition
        locator = EngineFileLocator.from_scope(
            definition.complement if definition else None, variable.name
        )

        # The whole body is kept so the request can be replayed after a 401
        try:
            data = variable.read_bytes()
            self._client.upload(locator, data, variable.mime_type)
        except OSError as e:
            raise SaveFailedError(f"cannot read content of [{variable.name}]: {e}") from e
        except (httpx.HTTPError, AuthenticationError) as e:
            raise SaveFailedError(f"engine upload of [{variable.name}] failed: {e}") from e

        logger.debug("Uploaded %s (%d bytes) to engine", locator.to_string(), len(data))
        return FileVariableReference(
            kind=StorageKind.ENGINE_NATIVE,
            locator=locator.to_string(),
            name=variable.name,
            mime_type=variable.mime_type,
            original_name=variable.original_name,
        )

    def load(self, reference: FileVariableReference) -> FileVariable:
        locator = EngineFileLocator.from_string(reference.locator)
        try:
            data = self._client.download(locator)
        except (httpx.HTTPError, AuthenticationError) as e:
            raise LoadFailedError(f"engine download of [{reference.locator}] failed: {e}") from e
        if data is None:
            raise ReferenceNotFoundError(reference.locator)

        return FileVariable.from_bytes(
            reference.name,
            data,
            mime_type=reference.mime_type,
            original_name=reference.original_name,
        )

    def purge(self, reference: FileVariableReference) -> bool:
        locator = EngineFileLocator.from_string(reference.locator)
        try:
            return self._client.delete(locator)
        except (httpx.HTTPError, AuthenticationError) as e:
            raise PurgeFailedError(f"engine delete of [{reference.locator}] failed: {e}") from e

    def close(self) -> None:
        self._client.close()

