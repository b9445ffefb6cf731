"""Tests for the REPOSITORY (CMIS browser binding) backend."""

import base64

import httpx
import pytest
from pytest_httpx import HTTPXMock

from flowstore.errors import (
    InvalidReferenceError,
    InvalidStorageDefinitionError,
    LoadFailedError,
    PurgeFailedError,
    ReferenceNotFoundError,
    SaveFailedError,
)
from flowstore.storage import FileVariable, FileVariableReference, StorageDefinition, StorageKind
from flowstore.storage.backends import RepositoryBackend

ENDPOINT = "http://cmis.local/browser/main"

DEFINITION = StorageDefinition.from_input(
    "REPOSITORY",
    repository_complement={
        "url": "http://cmis.local/browser",
        "repositoryName": "main",
        "userName": "alice",
        "password": "s3cret",
        "storageDefinitionFolder": "/invoices/",
    },
)


def basic_auth(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return f"Basic {token}"


def stored_reference() -> FileVariableReference:
    return FileVariableReference(
        kind=StorageKind.REPOSITORY,
        locator="doc-1",
        name="invoice.pdf",
        mime_type="application/pdf",
        location={"url": "http://cmis.local/browser", "repositoryName": "main"},
    )


class TestRepositorySave:
    """Test document creation."""

    def test_save_creates_document(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="POST",
            url=f"{ENDPOINT}/root/invoices",
            json={"succinctProperties": {"cmis:objectId": "doc-1"}},
        )
        variable = FileVariable.from_bytes(
            "invoice.pdf", b"%PDF-1.7", storage_definition=DEFINITION
        )

        reference = RepositoryBackend().save(variable)

        assert reference.kind == StorageKind.REPOSITORY
        assert reference.locator == "doc-1"
        assert reference.location == {
            "url": "http://cmis.local/browser",
            "repositoryName": "main",
        }
        assert "s3cret" not in reference.to_json()

        request = httpx_mock.get_request()
        assert request.headers["Authorization"] == basic_auth("alice", "s3cret")
        body = request.read()
        assert b"createDocument" in body
        assert b"invoice.pdf" in body
        assert b"%PDF-1.7" in body

    def test_save_reads_full_properties(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="POST",
            url=f"{ENDPOINT}/root/invoices",
            json={"properties": {"cmis:objectId": {"value": "doc-2"}}},
        )
        variable = FileVariable.from_bytes("a.txt", b"x", storage_definition=DEFINITION)

        assert RepositoryBackend().save(variable).locator == "doc-2"

    def test_save_uses_configured_credentials(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="POST",
            url=f"{ENDPOINT}/root",
            json={"succinctProperties": {"cmis:objectId": "doc-3"}},
        )
        definition = StorageDefinition.from_input(
            "CMIS",
            repository_complement={"url": "http://cmis.local/browser", "repositoryName": "main"},
        )
        variable = FileVariable.from_bytes("a.txt", b"x", storage_definition=definition)

        RepositoryBackend("bob", "pw").save(variable)

        assert httpx_mock.get_request().headers["Authorization"] == basic_auth("bob", "pw")

    def test_save_refused(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="POST", url=f"{ENDPOINT}/root/invoices", status_code=409, text="exists"
        )
        variable = FileVariable.from_bytes("a.txt", b"x", storage_definition=DEFINITION)

        with pytest.raises(SaveFailedError, match="409"):
            RepositoryBackend().save(variable)

    def test_save_connection_error(self, httpx_mock: HTTPXMock):
        httpx_mock.add_exception(httpx.ConnectError("refused"))
        variable = FileVariable.from_bytes("a.txt", b"x", storage_definition=DEFINITION)

        with pytest.raises(SaveFailedError, match="request failed"):
            RepositoryBackend().save(variable)

    def test_save_without_object_id(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="POST", url=f"{ENDPOINT}/root/invoices", json={"succinctProperties": {}}
        )
        variable = FileVariable.from_bytes("a.txt", b"x", storage_definition=DEFINITION)

        with pytest.raises(SaveFailedError, match="no object id"):
            RepositoryBackend().save(variable)

    def test_save_requires_parameters(self):
        variable = FileVariable.from_bytes(
            "a.txt", b"x", storage_definition=StorageDefinition.parse("INLINE")
        )
        with pytest.raises(InvalidStorageDefinitionError):
            RepositoryBackend().save(variable)


class TestRepositoryLoad:
    """Test document retrieval."""

    def test_load(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="GET",
            url=f"{ENDPOINT}/root?objectId=doc-1&cmisselector=content",
            content=b"%PDF-1.7",
        )

        with RepositoryBackend("bob", "pw").load(stored_reference()) as variable:
            assert variable.name == "invoice.pdf"
            assert variable.mime_type == "application/pdf"
            assert variable.read_bytes() == b"%PDF-1.7"

        assert httpx_mock.get_request().headers["Authorization"] == basic_auth("bob", "pw")

    def test_load_missing(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="GET",
            url=f"{ENDPOINT}/root?objectId=doc-1&cmisselector=content",
            status_code=404,
        )
        with pytest.raises(ReferenceNotFoundError):
            RepositoryBackend().load(stored_reference())

    def test_load_server_error(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="GET",
            url=f"{ENDPOINT}/root?objectId=doc-1&cmisselector=content",
            status_code=500,
            text="boom",
        )
        with pytest.raises(LoadFailedError, match="500"):
            RepositoryBackend().load(stored_reference())

    def test_load_without_location(self):
        reference = stored_reference().model_copy(update={"location": None})
        with pytest.raises(InvalidReferenceError, match="repository location"):
            RepositoryBackend().load(reference)


class TestRepositoryPurge:
    """Test document deletion."""

    def test_purge(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(method="POST", url=f"{ENDPOINT}/root")

        assert RepositoryBackend().purge(stored_reference()) is True

        body = httpx_mock.get_request().read()
        assert b"cmisaction=delete" in body
        assert b"objectId=doc-1" in body

    def test_purge_missing(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(method="POST", url=f"{ENDPOINT}/root", status_code=404)

        assert RepositoryBackend().purge(stored_reference()) is False

    def test_purge_failure(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(method="POST", url=f"{ENDPOINT}/root", status_code=403)

        with pytest.raises(PurgeFailedError, match="403"):
            RepositoryBackend().purge(stored_reference())
