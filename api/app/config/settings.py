"""Settings for the API."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from api.app.constants import (
    DEFAULT_SAFE_VERDICT_TAG,
    DEFAULT_UNSAFE_VERDICT_TAG,
    ResolverMode,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    api_host: str = Field("0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(8000, validation_alias="API_PORT")

    asset_store_backend: str = Field("cloudinary", validation_alias="ASSET_STORE_BACKEND")
    cloudinary_cloud_name: str = Field("", validation_alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str = Field("", validation_alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str = Field("", validation_alias="CLOUDINARY_API_SECRET")
    cloudinary_api_base_url: str = Field("https://api.cloudinary.com", validation_alias="CLOUDINARY_API_BASE_URL")
    cloudinary_resource_type: str = Field("image", validation_alias="CLOUDINARY_RESOURCE_TYPE")
    asset_store_connect_timeout_seconds: float = Field(5.0, validation_alias="ASSET_STORE_CONNECT_TIMEOUT_SECONDS")
    asset_store_read_timeout_seconds: float = Field(10.0, validation_alias="ASSET_STORE_READ_TIMEOUT_SECONDS")

    safe_verdict_tag: str = Field(DEFAULT_SAFE_VERDICT_TAG, validation_alias="SAFE_VERDICT_TAG")
    unsafe_verdict_tag: str = Field(DEFAULT_UNSAFE_VERDICT_TAG, validation_alias="UNSAFE_VERDICT_TAG")

    # "single" answers from one read; "blocking" re-reads until a verdict or its own budget runs out.
    resolver_mode: str = Field(ResolverMode.SINGLE, validation_alias="RESOLVER_MODE")
    blocking_max_attempts: int = Field(7, validation_alias="BLOCKING_MAX_ATTEMPTS")
    blocking_retry_delay_seconds: float = Field(3.0, validation_alias="BLOCKING_RETRY_DELAY_SECONDS")
    blocking_max_wait_seconds: float = Field(21.0, validation_alias="BLOCKING_MAX_WAIT_SECONDS")

    readiness_ping_timeout_seconds: float = Field(5.0, validation_alias="READINESS_PING_TIMEOUT_SECONDS")

    # JSON object of public_id -> tags, loaded into the inmemory backend at startup.
    inmemory_asset_store_seed: dict[str, list[str]] = Field(default_factory=dict, validation_alias="INMEMORY_ASSET_STORE_SEED")
