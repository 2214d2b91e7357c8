"""Application settings loaded from the environment or a `.env` file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "your-secret-key"


class DataDirectory(BaseModel):
    """Filesystem layout for the backend's local state."""

    root: Path = Field(default_factory=lambda: Path.home() / ".micromiro")

    @property
    def logs(self) -> Path:
        return self.root / "logs"


class DuckDBSettings(BaseModel):
    """Warehouse location and connection pool limits."""

    path: Optional[Path] = None
    pool_size: int = Field(8, ge=1, description="Maximum concurrent cursors")
    pool_timeout_seconds: float = Field(
        10.0,
        gt=0,
        description="How long a request waits for a free cursor before failing",
    )


class AuthSettings(BaseModel):
    """Token signing and password hashing parameters."""

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = Field(24, ge=1)
    bcrypt_rounds: int = Field(12, ge=4, le=31)


class MicroMiroSettings(BaseSettings):
    """Top-level settings.

    Values come from ``MICROMIRO_*`` environment variables; nested fields use a
    double underscore, e.g. ``MICROMIRO_DUCKDB__POOL_SIZE=4`` or
    ``MICROMIRO_AUTH__JWT_SECRET=...``.
    """

    model_config = SettingsConfigDict(
        env_prefix="MICROMIRO_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = "INFO"
    data_dir: DataDirectory = Field(default_factory=DataDirectory)
    duckdb: DuckDBSettings = Field(default_factory=DuckDBSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @model_validator(mode="after")
    def _resolve_paths(self) -> "MicroMiroSettings":
        if self.duckdb.path is None:
            self.duckdb.path = self.data_dir.root / "micromiro.duckdb"
        return self


@lru_cache(maxsize=1)
def get_settings() -> MicroMiroSettings:
    """Return the process-wide settings instance."""
    return MicroMiroSettings()
