"""Configuration management for the Library API.

Settings are read from the environment (``LIBRARY_API_`` prefix) and from an
optional ``.env`` file, validated with Pydantic v2 and exposed through a
process-wide singleton.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseSettings):
    """Library API configuration.

    Groups the settings for:
    - Application metadata reported by the OpenAPI document
    - Database location
    - HTTP binding and route prefix
    - Pagination limits and the late-loan threshold
    - Logging and Logfire observability
    """

    model_config = SettingsConfigDict(
        env_prefix="LIBRARY_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- application ---

    app_name: str = Field(
        default="library-api",
        description="Application name shown in the OpenAPI document",
        pattern=r"^[a-z0-9-]+$",
    )

    app_version: str = Field(
        default="0.1.0",
        description="Application version",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # --- storage ---

    database_path: Path = Field(
        default=Path("data/library.db"),
        description="Location of the SQLite file when database_url is unset",
    )

    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL, overrides database_path when set",
    )

    # --- http ---

    host: str = Field(
        default="127.0.0.1",
        description="Interface the HTTP server binds to",
    )

    port: int = Field(
        default=8080,
        description="Port the HTTP server listens on",
        ge=1024,
        le=65535,
    )

    api_prefix: str = Field(
        default="",
        description="Path prefix for every route, e.g. '/api'",
    )

    # --- paging and lending ---

    default_page_size: int = Field(
        default=20,
        description="Page size used when a list request does not send one",
        ge=1,
    )

    max_page_size: int = Field(
        default=100,
        description="Largest page size a client may request",
        ge=1,
        le=2000,
    )

    late_loan_days: int = Field(
        default=4,
        description="Days after which an unreturned loan counts as late",
        ge=0,
    )

    # --- logging and tracing ---

    debug: bool = Field(
        default=False,
        description="Enable debug mode (SQL echo, verbose errors)",
    )

    log_level: str = Field(
        default="INFO",
        description="Threshold for application log records",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    environment: str = Field(
        default="development",
        description="Deployment environment reported to Logfire",
    )

    logfire_enabled: bool = Field(
        default=False,
        description="Send traces to Logfire and instrument FastAPI/SQLAlchemy",
    )

    logfire_token: str | None = Field(
        default=None,
        description="Logfire write token",
        repr=False,
    )

    @field_validator("database_path")
    @classmethod
    def resolve_database_path(cls, v: Path) -> Path:
        """Make the path absolute and create the directory holding the file."""
        path = v.absolute()
        path.parent.mkdir(parents=True, exist_ok=True)
        if not path.parent.is_dir():
            raise ValueError(f"Cannot use {path.parent} as database directory")
        return path

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Prefix must be empty or look like '/segment'."""
        if v and (not v.startswith("/") or v.endswith("/")):
            raise ValueError("API prefix must start with '/' and must not end with '/'")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    def get_database_url(self) -> str:
        """The explicit database_url, else a SQLite URL for database_path."""
        return self.database_url or f"sqlite:///{self.database_path}"


class _ConfigStore:
    current: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the process-wide configuration, reading the environment once."""
    if _ConfigStore.current is None:
        _ConfigStore.current = ServerConfig()
    return _ConfigStore.current


def set_config(config: ServerConfig) -> None:
    """Install an explicit configuration (application factory and tests)."""
    _ConfigStore.current = config


def reset_config() -> None:
    """Reset configuration so the next get_config() re-reads the environment."""
    _ConfigStore.current = None
