from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_NAME = "geoip-service"

LISTEN_HOST = "0.0.0.0"
REQUEST_TIMEOUT_SECONDS = 30.0
KEEP_ALIVE_TIMEOUT_SECONDS = 60
SHUTDOWN_GRACE_SECONDS = 30.0

LOG_LEVELS = ("debug", "info", "warn", "error")


class Settings(BaseSettings):
    """Process configuration read once at startup."""

    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    PORT: int = Field(default=8080, ge=0, le=65535, alias="PORT")
    GRPC_PORT: int = Field(default=9090, ge=0, le=65535, alias="GRPC_PORT")
    GEOIP_DB_PATH: str = Field(default="./GeoLite2-Country.mmdb", alias="GEOIP_DB_PATH")
    LOG_LEVEL: str = Field(default="info", alias="LOG_LEVEL")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str | None) -> str:
        """Unknown levels fall back to info instead of failing startup."""
        level = str(value or "").strip().lower()
        return level if level in LOG_LEVELS else "info"


@lru_cache
def get_settings() -> Settings:
    return Settings()
