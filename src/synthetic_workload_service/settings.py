"""Application-wide configuration helpers."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Typed settings leveraging environment variables for overrides."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    service_name: str = Field(default="synthetic-workload-service")
    api_prefix: str = Field(
        default="/api",
        description="Prefix under which the workload endpoints are mounted.",
    )
    metrics_path: str = Field(default="/metrics")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    model_config = {
        "env_file": ".env",
        "env_prefix": "WORKLOAD_",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value


@lru_cache
def get_settings() -> Settings:
    """Cache Settings to avoid re-parsing env on every injection."""

    return Settings()
