"""Node configuration."""

from functools import lru_cache
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Always load `backend/.env` no matter where the host process is started from.
    _backend_env_file = (Path(__file__).resolve().parents[2] / ".env").as_posix()
    model_config = SettingsConfigDict(env_file=_backend_env_file, env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Maisa Worker Node"
    maisa_base_url: str | None = Field(default=None, env="MAISA_BASE_URL")
    maisa_api_key: str | None = Field(default=None, env="MAISA_API_KEY")
    # "legacy" -> /run/{id} paths with a `data` envelope and `result` completion marker.
    # "runs"   -> /runs/{id}/detail paths with a `status` enumerator.
    maisa_api_variant: str = Field(default="legacy", env="MAISA_API_VARIANT")
    # Per-request HTTP timeout (seconds), independent of the polling deadline.
    maisa_http_timeout: float = Field(default=60, env="MAISA_HTTP_TIMEOUT")
    maisa_polling_interval: float = Field(default=5, env="MAISA_POLLING_INTERVAL")
    maisa_timeout: float = Field(default=300, env="MAISA_TIMEOUT")
    maisa_auto_download: bool = Field(default=True, env="MAISA_AUTO_DOWNLOAD")
    # When enabled, a terminal failed/error status raises instead of being returned as a result.
    maisa_fail_on_remote_error: bool = Field(default=False, env="MAISA_FAIL_ON_REMOTE_ERROR")
    # Items are processed one after another unless this is raised.
    node_max_workers: int = Field(default=1, env="NODE_MAX_WORKERS")


@lru_cache
def get_settings() -> Settings:
    return Settings()
