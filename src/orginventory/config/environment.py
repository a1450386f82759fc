"""Environment-driven connection settings.

Credentials never live in the YAML configuration.  They are read from the
process environment (or a local ``.env`` file) using the ``ORGINV_`` prefix:

- ``ORGINV_INSTANCE_URL`` – e.g. ``https://example.my.salesforce.com``;
- ``ORGINV_ACCESS_TOKEN`` – a session id or OAuth access token;
- ``ORGINV_API_VERSION`` – optional REST API version override.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["ConnectionSettings", "load_connection_settings"]


class ConnectionSettings(BaseSettings):
    """Typed view of the ``ORGINV_`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ORGINV_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    instance_url: str | None = Field(default=None)
    access_token: SecretStr | None = Field(default=None)
    api_version: str | None = Field(default=None, pattern=r"^\d+\.\d$")

    @field_validator("instance_url")
    @classmethod
    def _normalise_instance_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().rstrip("/")
        if not normalized:
            return None
        if not normalized.startswith("https://"):
            msg = "instance_url must start with https://"
            raise ValueError(msg)
        return normalized


def load_connection_settings(*, env_file: Path | None = None, **overrides: Any) -> ConnectionSettings:
    """Load connection settings, letting explicit keyword values win over the environment."""

    init_kwargs: dict[str, Any] = {key: value for key, value in overrides.items() if value is not None}
    if env_file is not None:
        init_kwargs["_env_file"] = env_file
    return ConnectionSettings(**init_kwargs)
