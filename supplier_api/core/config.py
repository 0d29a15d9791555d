"""Application configuration with strict environment validation."""

from pathlib import Path
from typing import Annotated
import warnings
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # --- API metadata ---
    PROJECT_NAME: str = "Supplier API"
    ENVIRONMENT: str = "production"

    # --- Security & database ---
    SECRET_KEY: str = Field(..., min_length=16)
    SECRET_KEY_FALLBACKS: Annotated[list[str], NoDecode] = Field(default_factory=list)
    DATABASE_URL: str = "sqlite:///./suppliers.db"
    ASYNC_DATABASE_URL: str | None = None
    CREATE_TABLES_ON_STARTUP: bool = False
    LOG_LEVEL: str = "INFO"
    METRICS_ENABLED: bool = True
    METRICS_NAMESPACE: str = "supplier_api"
    METRICS_LATENCY_BUCKETS: Annotated[list[float], NoDecode] = Field(default_factory=lambda: [0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0])

    # --- Tokens ---
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "supplier-api"
    JWT_AUDIENCE: str = "https://localhost"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # --- Password policy ---
    PASSWORD_REQUIRED_LENGTH: int = 6
    PASSWORD_REQUIRE_DIGIT: bool = True
    PASSWORD_REQUIRE_LOWERCASE: bool = True
    PASSWORD_REQUIRE_UPPERCASE: bool = True
    PASSWORD_REQUIRE_NON_ALPHANUMERIC: bool = True

    # --- Lockout ---
    LOCKOUT_ENABLED: bool = True
    LOCKOUT_MAX_FAILED_ATTEMPTS: int = 5
    LOCKOUT_MINUTES: int = 5

    # --- Authorization ---
    SUPPLIER_DELETE_CLAIM: str = "DeleteSupplier"

    # --- Initial admin ---
    INITIAL_ADMIN_EMAIL: str | None = Field(default=None, description="Email for a user created on startup with the supplier-delete claim.")
    INITIAL_ADMIN_PASSWORD: str | None = Field(default=None, min_length=6, description="Password for the initial admin user.")

    @staticmethod
    def _split_list(value: str | list[str] | None) -> list[str]:
        if not value:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return [item for item in value if isinstance(item, str) and item.strip()]

    @staticmethod
    def _split_float_list(value: str | list[float] | None) -> list[float]:
        if value is None:
            return []
        items = value.split(",") if isinstance(value, str) else value
        floats: list[float] = []
        for item in items:
            try:
                floats.append(float(item))
            except (TypeError, ValueError):
                continue
        return floats

    @field_validator("SECRET_KEY_FALLBACKS", mode="before")
    @classmethod
    def validate_fallbacks(cls, value: str | list[str] | None) -> list[str]:
        return cls._split_list(value)

    @field_validator("METRICS_LATENCY_BUCKETS", mode="before")
    @classmethod
    def validate_metric_buckets(cls, value: str | list[float] | None) -> list[float]:
        return cls._split_float_list(value) or [0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0]

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        if not value or value.lower() == "changeme":
            raise ValueError("SECRET_KEY must be set to a non-default, secure value.")
        return value

    @field_validator("LOCKOUT_MAX_FAILED_ATTEMPTS", "LOCKOUT_MINUTES", "ACCESS_TOKEN_EXPIRE_MINUTES")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive.")
        return value

    @model_validator(mode="after")
    def ensure_async_database_url(self) -> "Settings":
        """Ensure an async URL is always available."""
        if not self.ASYNC_DATABASE_URL:
            self.ASYNC_DATABASE_URL = self._derive_async_url(self.DATABASE_URL)
        if not self.ASYNC_DATABASE_URL:
            raise ValueError(f"Could not derive async database URL from: {self.DATABASE_URL}")
        return self

    @model_validator(mode="after")
    def check_initial_admin_config(self) -> "Settings":
        if self.INITIAL_ADMIN_EMAIL and not self.INITIAL_ADMIN_PASSWORD:
            raise ValueError("INITIAL_ADMIN_PASSWORD must be set if INITIAL_ADMIN_EMAIL is set.")
        if not self.INITIAL_ADMIN_EMAIL and self.INITIAL_ADMIN_PASSWORD:
            warnings.warn("INITIAL_ADMIN_PASSWORD is set but INITIAL_ADMIN_EMAIL is not; initial admin will not be created.")
        return self

    @staticmethod
    def _derive_async_url(url: str | None) -> str | None:
        """Best-effort conversion from sync to async driver."""
        if not url:
            return None
        if "+asyncpg" in url or "+aiosqlite" in url:
            return url
        if url.startswith("sqlite:///"):
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        if url.startswith("sqlite:"):
            return url.replace("sqlite:", "sqlite+aiosqlite:", 1)
        if "://" not in url:
            return url

        scheme, rest = url.split("://", 1)
        if scheme.startswith("postgres"):
            return f"postgresql+asyncpg://{rest}"
        return url

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


settings = Settings()
