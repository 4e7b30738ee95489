"""
Configuration management using Pydantic for validation.

Supports loading from:
- YAML files (primary)
- Environment variables with LITHO_ prefix
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

READONLY_SCOPE = "https://www.googleapis.com/auth/photoslibrary.readonly"


class OAuthSettings(BaseModel):
    """OAuth client registration and local callback listener."""

    client_id: str = Field(
        min_length=1,
        description="OAuth client ID of the installed-app registration",
    )
    client_secret: str = Field(
        min_length=1,
        description="OAuth client secret of the installed-app registration",
    )
    token_endpoint: str = Field(
        default="https://oauth2.googleapis.com/token",
        description="Token endpoint used for code and refresh-token exchanges",
    )
    auth_endpoint: str = Field(
        default="https://accounts.google.com/o/oauth2/v2/auth",
        description="Authorization endpoint the operator opens in a browser",
    )
    scope: str = Field(
        default=READONLY_SCOPE,
        description="OAuth scope requested during authorization",
    )
    callback_host: str = Field(
        default="localhost",
        description="Host the one-shot redirect listener binds to",
    )
    callback_port: int = Field(
        default=7878,
        ge=1,
        le=65535,
        description="Port the one-shot redirect listener binds to. "
        "Must match a redirect URI registered for the client.",
    )
    auth_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Give up waiting for the browser redirect after this many seconds "
        "(default: wait until the operator completes the flow)",
    )
    open_browser: bool = Field(
        default=False,
        description="Also open the authorization URL in the default browser",
    )
    keyring_service: str | None = Field(
        default=None,
        description="Keyring service name for the cached refresh token (default: client_id)",
    )

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.callback_host}:{self.callback_port}"

    @property
    def token_service(self) -> str:
        return self.keyring_service or self.client_id


class SyncSettings(BaseModel):
    """Download location and remote API pacing."""

    photos_dir: Path = Field(
        default=Path("./photos"),
        description="Root of the year/month/day download tree",
    )
    api_base_url: str = Field(
        default="https://photoslibrary.googleapis.com",
        description="Base URL of the Photos Library API",
    )
    page_size: int = Field(
        default=25,
        ge=1,
        le=100,
        description="Items requested per search page",
    )
    fetch_pause_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Pause between search pages",
    )
    write_pause_seconds: float = Field(
        default=0.25,
        ge=0.0,
        description="Pause after each downloaded file",
    )
    request_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for every HTTP request",
    )

    @field_validator("photos_dir", mode="before")
    @classmethod
    def parse_photos_dir(cls, v):
        """Convert string path to Path object."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class Settings(BaseSettings):
    """
    Main application settings.

    Can be loaded from:
    - YAML file: Settings.from_yaml("config.yaml")
    - Environment variables: LITHO_OAUTH__CLIENT_ID=..., LITHO_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="LITHO_",
        env_nested_delimiter="__",
        extra="ignore",  # Ignore unknown fields for forward compatibility
    )

    oauth: OAuthSettings = Field(
        description="OAuth client settings",
    )
    sync: SyncSettings = Field(
        default_factory=SyncSettings,
        description="Download settings",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @model_validator(mode="after")
    def validate_photos_dir(self) -> "Settings":
        """The download root may be missing but must not be a regular file."""
        if self.sync.photos_dir.exists() and not self.sync.photos_dir.is_dir():
            raise ValueError(f"photos_dir is not a directory: {self.sync.photos_dir}")
        return self

    @classmethod
    def from_yaml(cls, path: Path | str) -> "Settings":
        """
        Load settings from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Settings instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save settings to a YAML file."""
        path = Path(path)

        data = self.model_dump(mode="json")

        with open(path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
