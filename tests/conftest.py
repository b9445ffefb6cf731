"""Shared fixtures."""

from pathlib import Path

import pytest

from flowstore.config import FlowstoreSettings
from flowstore.lifecycle import FileLifecycle
from flowstore.storage import StorageBackendRegistry


@pytest.fixture
def settings(tmp_path: Path) -> FlowstoreSettings:
    return FlowstoreSettings(temp_folder=tmp_path / "temp", inline_max_bytes=1024)


@pytest.fixture
def registry(settings: FlowstoreSettings):
    registry = StorageBackendRegistry.from_settings(settings)
    yield registry
    registry.close()


@pytest.fixture
def lifecycle(registry: StorageBackendRegistry, settings: FlowstoreSettings) -> FileLifecycle:
    return FileLifecycle(registry, settings)


@pytest.fixture
def inbox(tmp_path: Path) -> Path:
    folder = tmp_path / "inbox"
    folder.mkdir()
    return folder


@pytest.fixture
def outbox(tmp_path: Path) -> Path:
    folder = tmp_path / "outbox"
    folder.mkdir()
    return folder
