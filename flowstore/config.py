"""Flowstore configuration."""

import tempfile
from pathlib import Path

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_temp_folder() -> Path:
    return Path(tempfile.gettempdir()) / "flowstore"


class FlowstoreSettings(BaseSettings):
    """
    Flowstore configuration.

    Uses Pydantic BaseSettings for automatic environment variable loading.
    Environment variables are prefixed with FLOWSTORE_.

    Optional environment variables:
        FLOWSTORE_TEMP_FOLDER: Root folder of the TEMP_FOLDER backend
            (default: <system temp>/flowstore)
        FLOWSTORE_CHUNK_SIZE: Stream copy chunk size in bytes (default: 8192)
        FLOWSTORE_INLINE_MAX_BYTES: Largest payload stored INLINE, 0 for no
            limit (default: 1 MiB)
        FLOWSTORE_DEFAULT_MAX_FILES: Upload cap when a request gives none,
            0 or less for no cap (default: 0)
        FLOWSTORE_HTTP_TIMEOUT: Timeout of repository/engine calls in seconds
            (default: 30)
        FLOWSTORE_ACTIVITY_TIMEOUT: Timeout of one activity run in seconds
            (default: 300)
        FLOWSTORE_ENGINE_API_URL: Workflow engine API base URL; the
            ENGINE_NATIVE backend is only available when set
        FLOWSTORE_ENGINE_CLIENT_ID / FLOWSTORE_ENGINE_CLIENT_SECRET: OAuth
            client credentials for the engine API
        FLOWSTORE_REPOSITORY_USERNAME / FLOWSTORE_REPOSITORY_PASSWORD:
            Credentials used to load and purge REPOSITORY references
    """

    model_config = SettingsConfigDict(
        env_prefix="FLOWSTORE_",
        extra="ignore",
    )

    temp_folder: Path = Field(default_factory=_default_temp_folder)

    chunk_size: int = Field(default=8192, ge=1)

    # 0 disables the limit
    inline_max_bytes: int = Field(default=1024 * 1024, ge=0)

    default_max_files: int = 0

    http_timeout: float = Field(default=30.0, gt=0)

    activity_timeout: float = Field(default=300.0, gt=0)

    engine_api_url: HttpUrl | None = None
    engine_client_id: str | None = None
    engine_client_secret: str | None = None

    repository_username: str | None = None
    repository_password: str | None = None

    @property
    def engine_enabled(self) -> bool:
        """True when the engine API is configured with credentials."""
        return bool(
            self.engine_api_url and self.engine_client_id and self.engine_client_secret
        )
