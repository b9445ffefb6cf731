"""Tests for the ENGINE_NATIVE backend."""

from uuid import UUID

import pytest
from pytest_httpx import HTTPXMock

from flowstore.errors import (
    AuthenticationError,
    InvalidReferenceError,
    InvalidStorageDefinitionError,
    LoadFailedError,
    PurgeFailedError,
    ReferenceNotFoundError,
    SaveFailedError,
)
from flowstore.storage import FileVariable, FileVariableReference, StorageDefinition, StorageKind
from flowstore.storage.backends import EngineBackend, EngineDocumentClient, EngineFileLocator

API_URL = "http://localhost:8080"
TOKEN_URL = f"{API_URL}/api/v1/oauth/token"
WORKFLOW_ID = "019353a1-b0c1-7000-8000-000000000001"
FILE_URL = f"{API_URL}/api/v1/workflows/{WORKFLOW_ID}/activities/step1/files/report.txt"
LOCATOR = f"engine://{WORKFLOW_ID}/step1/report.txt"


@pytest.fixture
def client():
    client = EngineDocumentClient(API_URL, "test_client", "test_secret")
    yield client
    client.close()


@pytest.fixture
def backend(client):
    return EngineBackend(client)


def engine_reference() -> FileVariableReference:
    return FileVariableReference(
        kind=StorageKind.ENGINE_NATIVE,
        locator=LOCATOR,
        name="report.txt",
        mime_type="text/plain",
    )


class TestEngineFileLocator:
    """Test locator parsing."""

    def test_to_string(self):
        locator = EngineFileLocator(
            workflow_id=UUID(WORKFLOW_ID), activity_key="step1", filename="report.txt"
        )
        assert locator.to_string() == LOCATOR

    def test_from_string(self):
        locator = EngineFileLocator.from_string(LOCATOR)
        assert locator.workflow_id == UUID(WORKFLOW_ID)
        assert locator.activity_key == "step1"
        assert locator.filename == "report.txt"
        assert locator.path == (
            f"/api/v1/workflows/{WORKFLOW_ID}/activities/step1/files/report.txt"
        )

    @pytest.mark.parametrize(
        "text",
        [
            "/tmp/report.txt",
            "engine://not-a-uuid/step1/report.txt",
            f"engine://{WORKFLOW_ID}/report.txt",
            f"s3://{WORKFLOW_ID}/step1/report.txt",
        ],
    )
    def test_from_string_invalid(self, text):
        with pytest.raises(InvalidReferenceError):
            EngineFileLocator.from_string(text)

    def test_from_scope(self):
        locator = EngineFileLocator.from_scope(f"/{WORKFLOW_ID}/step1/", "report.txt")
        assert locator.to_string() == LOCATOR

    @pytest.mark.parametrize("scope", [None, "", "not-a-uuid/step1", WORKFLOW_ID])
    def test_from_scope_invalid(self, scope):
        with pytest.raises(InvalidStorageDefinitionError):
            EngineFileLocator.from_scope(scope, "report.txt")


class TestEngineDocumentClientToken:
    """Test token management."""

    def test_token_cached(self, httpx_mock: HTTPXMock, client):
        httpx_mock.add_response(method="POST", url=TOKEN_URL, json={"access_token": "t1"})
        httpx_mock.add_response(method="GET", url=FILE_URL, content=b"a")
        httpx_mock.add_response(method="GET", url=FILE_URL, content=b"b")

        locator = EngineFileLocator.from_string(LOCATOR)
        assert client.download(locator) == b"a"
        assert client.download(locator) == b"b"

        token_requests = httpx_mock.get_requests(url=TOKEN_URL)
        assert len(token_requests) == 1

    def test_refresh_on_401(self, httpx_mock: HTTPXMock, client):
        httpx_mock.add_response(method="POST", url=TOKEN_URL, json={"access_token": "old"})
        httpx_mock.add_response(method="GET", url=FILE_URL, status_code=401)
        httpx_mock.add_response(method="POST", url=TOKEN_URL, json={"access_token": "new"})
        httpx_mock.add_response(method="GET", url=FILE_URL, content=b"data")

        assert client.download(EngineFileLocator.from_string(LOCATOR)) == b"data"

        file_requests = httpx_mock.get_requests(url=FILE_URL)
        assert file_requests[0].headers["Authorization"] == "Bearer old"
        assert file_requests[1].headers["Authorization"] == "Bearer new"

    def test_token_failure(self, httpx_mock: HTTPXMock, client):
        httpx_mock.add_response(
            method="POST", url=TOKEN_URL, status_code=401, text="Invalid credentials"
        )
        with pytest.raises(AuthenticationError, match="Token request failed"):
            client._obtain_token()


class TestEngineBackend:
    """Test EngineBackend save/load/purge."""

    def test_save(self, httpx_mock: HTTPXMock, backend):
        httpx_mock.add_response(method="POST", url=TOKEN_URL, json={"access_token": "t"})
        httpx_mock.add_response(method="POST", url=FILE_URL, status_code=201)
        variable = FileVariable.from_bytes(
            "report.txt",
            b"quarterly",
            storage_definition=StorageDefinition.parse(f"ENGINE_NATIVE:{WORKFLOW_ID}/step1"),
        )

        reference = backend.save(variable)

        assert reference.kind == StorageKind.ENGINE_NATIVE
        assert reference.locator == LOCATOR
        upload = httpx_mock.get_request(url=FILE_URL)
        assert upload.read() == b"quarterly"
        assert upload.headers["Content-Type"] == "text/plain"
        assert upload.headers["Authorization"] == "Bearer t"

    def test_save_without_scope(self, backend):
        variable = FileVariable.from_bytes(
            "report.txt", b"x", storage_definition=StorageDefinition.parse("ENGINE_NATIVE")
        )
        with pytest.raises(InvalidStorageDefinitionError):
            backend.save(variable)

    def test_save_authentication_failure(self, httpx_mock: HTTPXMock, backend):
        httpx_mock.add_response(method="POST", url=TOKEN_URL, status_code=403)
        variable = FileVariable.from_bytes(
            "report.txt",
            b"x",
            storage_definition=StorageDefinition.parse(f"ENGINE_NATIVE:{WORKFLOW_ID}/step1"),
        )
        with pytest.raises(SaveFailedError, match="Token request failed"):
            backend.save(variable)

    def test_load(self, httpx_mock: HTTPXMock, backend):
        httpx_mock.add_response(method="POST", url=TOKEN_URL, json={"access_token": "t"})
        httpx_mock.add_response(method="GET", url=FILE_URL, content=b"quarterly")

        with backend.load(engine_reference()) as variable:
            assert variable.name == "report.txt"
            assert variable.read_bytes() == b"quarterly"

    def test_load_missing(self, httpx_mock: HTTPXMock, backend):
        httpx_mock.add_response(method="POST", url=TOKEN_URL, json={"access_token": "t"})
        httpx_mock.add_response(method="GET", url=FILE_URL, status_code=404)

        with pytest.raises(ReferenceNotFoundError):
            backend.load(engine_reference())

    def test_load_server_error(self, httpx_mock: HTTPXMock, backend):
        httpx_mock.add_response(method="POST", url=TOKEN_URL, json={"access_token": "t"})
        httpx_mock.add_response(method="GET", url=FILE_URL, status_code=500)

        with pytest.raises(LoadFailedError):
            backend.load(engine_reference())

    def test_load_bad_locator(self, backend):
        reference = engine_reference().model_copy(update={"locator": "/tmp/report.txt"})
        with pytest.raises(InvalidReferenceError):
            backend.load(reference)

    def test_purge_idempotent(self, httpx_mock: HTTPXMock, backend):
        httpx_mock.add_response(method="POST", url=TOKEN_URL, json={"access_token": "t"})
        httpx_mock.add_response(method="DELETE", url=FILE_URL, status_code=204)
        httpx_mock.add_response(method="DELETE", url=FILE_URL, status_code=404)

        assert backend.purge(engine_reference()) is True
        assert backend.purge(engine_reference()) is False

    def test_purge_failure(self, httpx_mock: HTTPXMock, backend):
        httpx_mock.add_response(method="POST", url=TOKEN_URL, json={"access_token": "t"})
        httpx_mock.add_response(method="DELETE", url=FILE_URL, status_code=500)

        with pytest.raises(PurgeFailedError):
            backend.purge(engine_reference())
