from functools import lru_cache
from typing import Any

from pydantic import AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Enable FastAPI debug mode and SQL echo")
    environment: str = Field(
        default="development",
        description="Runtime environment (development|staging|production)",
    )
    api_base_url: AnyUrl = Field(
        default="https://sa-api-server-1.replit.app/api/v1",
        description="Base URL of the remote market API; request paths are appended to it",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Transport-level timeout applied to every API request",
        gt=0,
    )
    storage_url: str = Field(
        default="sqlite:///../data/session.db",
        description="SQLAlchemy URL of the durable key-value store holding the credential",
    )
    credential_storage_key: str = Field(
        default="auth_token",
        description="Storage key holding the raw bearer credential",
    )
    session_storage_key: str = Field(
        default="auth-storage",
        description="Storage key holding the cached, non-authoritative session snapshot",
    )
    generic_error_message: str = Field(
        default="An unexpected error occurred",
        description="Message used when an error response carries no parsable body",
    )
    network_error_message: str = Field(
        default="Network request failed",
        description="Message used when a transport failure carries no description",
    )
    health_check_timeout_seconds: float = Field(
        default=10.0,
        description="Per-endpoint timeout used by the upstream health probe",
        gt=0,
    )

    @field_validator("credential_storage_key", "session_storage_key")
    @classmethod
    def _require_storage_key(cls, value: str) -> str:
        candidate = value.strip()
        if not candidate:
            raise ValueError("storage keys must be non-empty")
        return candidate

    @field_validator("api_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.rstrip("/")
        return value

    @property
    def resolved_api_base_url(self) -> str:
        return str(self.api_base_url).rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
