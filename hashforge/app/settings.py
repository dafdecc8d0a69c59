############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# settings.py: Application configuration and environment settings
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_version() -> str:
    """Read version from pyproject.toml (single source of truth)."""
    from importlib.metadata import PackageNotFoundError, version
    try:
        return version("hashforge")
    except PackageNotFoundError:
        pass
    # Fallback: read pyproject.toml directly (works in dev without pip install)
    try:
        import tomllib
        toml_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
        return data["project"]["version"]
    except (OSError, KeyError, ValueError):
        return "0.0.0"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HASHFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "hashforge"
    app_version: str = Field(default_factory=_get_version)
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"
    log_file: Optional[str] = None

    # Encodings used when the caller does not pick one
    default_salt_encoding: str = "hex"
    default_hash_encoding: str = "hex"

    # Parameter bounds are advisory unless this is set
    enforce_parameter_bounds: bool = False

    # Deadline for hashing calls dispatched to a worker thread
    worker_timeout_seconds: Optional[float] = None

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        """Only json and console renderers exist."""
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @field_validator("default_salt_encoding", "default_hash_encoding")
    @classmethod
    def check_encoding(cls, v: str) -> str:
        """Callers may only default to hex or base64."""
        v = v.lower()
        if v not in ("hex", "base64"):
            raise ValueError("encoding must be 'hex' or 'base64'")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
