"""Commerce API settings, read from the environment.

Field names map to upper-case environment variables (``mongodb_url`` ->
``MONGODB_URL``). Setting ``ENV_FILE`` points pydantic-settings at an
additional env file; real environment variables still win over it.
"""

import os
from enum import Enum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_MONGODB_SCHEMES = ("mongodb://", "mongodb+srv://")


class AppEnvironment(str, Enum):
    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """Typed view of the process environment."""

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Service
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "commerce-api"
    app_log_level: str = "INFO"
    app_host: str = "0.0.0.0"
    app_port: int = 3000

    # Logging and metrics
    observability_enabled: bool = True
    observability_structured_logs: bool = True
    observability_request_id_header: str = "X-Request-ID"
    # Required in the X-Metrics-Token header to read /metrics
    metrics_token: str | None = None

    # MongoDB
    mongodb_url: str = "mongodb://127.0.0.1:27017"
    mongodb_database: str = "nvsu_db"
    # Upper bound for any single driver operation
    mongodb_timeout_ms: int = 10000
    mongodb_server_selection_timeout_ms: int = 5000

    # HTTP
    max_request_size_mb: int = 1
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS_ORIGINS split on commas, blanks dropped."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @field_validator("app_env", mode="before")
    @classmethod
    def parse_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        if isinstance(v, AppEnvironment):
            return v
        allowed = [env.value for env in AppEnvironment]
        if str(v).lower() not in allowed:
            raise ValueError(f"app_env must be one of {allowed}, got '{v}'")
        return AppEnvironment(str(v).lower())

    @field_validator("mongodb_url")
    @classmethod
    def check_mongodb_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(_MONGODB_SCHEMES):
            raise ValueError("MONGODB_URL must use the mongodb:// or mongodb+srv:// scheme")
        return v

    @field_validator("mongodb_database")
    @classmethod
    def check_mongodb_database(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("MONGODB_DATABASE must be set")
        return v

    @model_validator(mode="after")
    def check_prod_cors(self) -> "Settings":
        """Refuse local browser origins when running in prod."""
        if self.app_env != AppEnvironment.PROD:
            return self

        local = [o for o in self.cors_origins_list if "localhost" in o or "127.0.0.1" in o]
        if local:
            raise ValueError(f"CORS origins must not contain localhost in production: {local[0]}")
        return self


settings = Settings()
