"""REPOSITORY backend: documents in a CMIS repository (browser binding).

The reference keeps the document object id as locator, and the repository
URL and name as its location. Credentials are never written into the
reference: loads and purges use the credentials this backend is configured
with.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...errors import (
    InvalidReferenceError,
    InvalidStorageDefinitionError,
    LoadFailedError,
    PurgeFailedError,
    ReferenceNotFoundError,
    SaveFailedError,
)
from ..definition import RepositoryParameters, StorageKind
from ..reference import FileVariableReference
from ..variable import FileVariable
from .base import StorageBackend

logger = logging.getLogger(__name__)


class RepositoryBackend(StorageBackend):
    """CMIS 1.1 browser binding storage."""

    def __init__(
        self,
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = 30.0,
    ):
        self._username = username
        self._password = password
        self._timeout = timeout

    def _client(self, username: str | None, password: str | None) -> httpx.Client:
        auth = (username, password or "") if username else None
        return httpx.Client(auth=auth, timeout=self._timeout)

    def save(self, variable: FileVariable) -> FileVariableReference:
        definition = variable.storage_definition
        if definition is None or definition.complement_structured is None:
            raise InvalidStorageDefinitionError("REPOSITORY requires repository parameters")
        params = definition.complement_structured

        folder_url = f"{params.endpoint}/root{_folder_path(params.target_folder)}"
        form = {
            "cmisaction": "createDocument",
            "propertyId[0]": "cmis:objectTypeId",
            "propertyValue[0]": "cmis:document",
            "propertyId[1]": "cmis:name",
            "propertyValue[1]": variable.name,
            "succinct": "true",
        }

        try:
            with (
                self._client(
                    params.username or self._username,
                    params.password or self._password,
                ) as client,
                variable.content.open() as stream,
            ):
                response = client.post(
                    folder_url,
                    data=form,
                    files={"content": (variable.name, stream, variable.mime_type)},
                )
                response.raise_for_status()
                object_id = _object_id(response.json())
        except httpx.HTTPStatusError as e:
            raise SaveFailedError(
                f"repository refused [{variable.name}]: "
                f"{e.response.status_code} - {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            raise SaveFailedError(f"repository request failed: {e}") from e
        except OSError as e:
            raise SaveFailedError(f"cannot read content of [{variable.name}]: {e}") from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SaveFailedError("repository response has no object id") from e

        logger.debug("Created document %s in %s", object_id, folder_url)
        return FileVariableReference(
            kind=StorageKind.REPOSITORY,
            locator=object_id,
            name=variable.name,
            mime_type=variable.mime_type,
            original_name=variable.original_name,
            location={"url": params.url, "repositoryName": params.repository_name},
        )

    def load(self, reference: FileVariableReference) -> FileVariable:
        root_url = f"{_endpoint(reference)}/root"
        try:
            with self._client(self._username, self._password) as client:
                response = client.get(
                    root_url,
                    params={"objectId": reference.locator, "cmisselector": "content"},
                )
                if response.status_code == 404:
                    raise ReferenceNotFoundError(reference.locator)
                response.raise_for_status()
                data = response.content
        except httpx.HTTPStatusError as e:
            raise LoadFailedError(
                f"repository refused [{reference.locator}]: "
                f"{e.response.status_code} - {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            raise LoadFailedError(f"repository request failed: {e}") from e

        return FileVariable.from_bytes(
            reference.name,
            data,
            mime_type=reference.mime_type,
            original_name=reference.original_name,
        )

    def purge(self, reference: FileVariableReference) -> bool:
        root_url = f"{_endpoint(reference)}/root"
        try:
            with self._client(self._username, self._password) as client:
                response = client.post(
                    root_url,
                    data={
                        "cmisaction": "delete",
                        "objectId": reference.locator,
                        "allVersions": "true",
                    },
                )
                if response.status_code == 404:
                    return False
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PurgeFailedError(
                f"repository refused [{reference.locator}]: "
                f"{e.response.status_code} - {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            raise PurgeFailedError(f"repository request failed: {e}") from e
        logger.debug("Deleted document %s", reference.locator)
        return True


def _folder_path(folder: str) -> str:
    folder = folder.strip().strip("/")
    return f"/{folder}" if folder else ""


def _endpoint(reference: FileVariableReference) -> str:
    location = reference.location or {}
    try:
        params = RepositoryParameters(
            url=location["url"], repositoryName=location["repositoryName"]
        )
    except (KeyError, ValueError) as e:
        raise InvalidReferenceError(
            reference.to_json(), "repository location is missing"
        ) from e
    return params.endpoint


def _object_id(body: Any) -> str:
    properties = body.get("succinctProperties") or body["properties"]
    value = properties["cmis:objectId"]
    # Non-succinct responses wrap each property as {"value": ...}
    if isinstance(value, dict):
        value = value["value"]
    if not value:
        raise ValueError("empty object id")
    return str(value)
