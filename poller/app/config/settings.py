from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from poller.app.constants import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_INTERVAL_MS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    status_api_base_url: str = Field("http://localhost:8000", validation_alias="STATUS_API_BASE_URL")
    status_path: str = Field("/status", validation_alias="STATUS_PATH")

    retry_interval_ms: int = Field(DEFAULT_RETRY_INTERVAL_MS, validation_alias="RETRY_INTERVAL_MS")
    # Checks issued before giving up; the next tick moves the session to error.
    max_attempts: int = Field(DEFAULT_MAX_ATTEMPTS, validation_alias="MAX_ATTEMPTS")

    request_connect_timeout_seconds: float = Field(5.0, validation_alias="REQUEST_CONNECT_TIMEOUT_SECONDS")
    request_read_timeout_seconds: float = Field(30.0, validation_alias="REQUEST_READ_TIMEOUT_SECONDS")
