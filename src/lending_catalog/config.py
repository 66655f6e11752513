"""Configuration management for the Lending Catalog service.

Settings are read from the environment (``LENDING_CATALOG_`` prefix) or a
local ``.env`` file and validated with Pydantic v2. The configuration covers:
1. Service metadata - name and version reported in logs and traces
2. Persistence - database URL or SQLite file location
3. HTTP transport - bind host and port
4. Observability - logging level and Logfire export
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogConfig(BaseSettings):
    """Lending Catalog service configuration."""

    model_config = SettingsConfigDict(
        # Use LENDING_CATALOG_ prefix for all env vars
        env_prefix="LENDING_CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Service Metadata ===

    service_name: str = Field(
        default="lending-catalog",
        description="Service name used in logs and trace metadata",
        pattern=r"^[a-z0-9-]+$",
    )

    service_version: str = Field(
        default="0.1.0",
        description="Service version reported to the tracing backend",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # === Database Configuration ===

    database_url: str | None = Field(
        default=None,
        description="Explicit SQLAlchemy database URL; overrides database_path",
    )

    database_path: Path = Field(
        default=Path("data/library.db"),
        description="SQLite database file path",
    )

    sqlite_busy_timeout: float = Field(
        default=5.0,
        description="Seconds a SQLite writer waits for the database lock",
        gt=0,
    )

    seed_on_startup: bool = Field(
        default=False,
        description="Load the sample catalog when the database has no books",
    )

    # === HTTP Configuration ===

    http_host: str = Field(
        default="127.0.0.1",
        description="HTTP server bind address",
    )

    http_port: int = Field(
        default=8080,
        description="HTTP server port",
        ge=1024,  # Avoid privileged ports
        le=65535,
    )

    # === Development Configuration ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    # === Observability ===

    environment: str = Field(
        default="development",
        description="Deployment environment reported with traces",
    )

    logfire_token: str | None = Field(
        default=None,
        description="Logfire write token",
        repr=False,  # Hide from string representation
    )

    send_to_logfire: bool = Field(
        default=False,
        description="Export spans to Logfire",
    )

    logfire_console: bool = Field(
        default=False,
        description="Print spans to the console",
    )

    # === Validation Methods ===

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: Path) -> Path:
        """Resolve the database path and make sure its directory exists."""
        abs_path = v.absolute()
        abs_path.parent.mkdir(parents=True, exist_ok=True)

        if not abs_path.parent.is_dir():
            raise ValueError(f"Database directory {abs_path.parent} is not accessible")

        return abs_path

    @field_validator("service_name")
    @classmethod
    def validate_service_name(cls, v: str) -> str:
        if len(v) < 3:
            raise ValueError("Service name must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Service name must not exceed 50 characters")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        return v.upper() if isinstance(v, str) else v

    # === Computed Properties ===

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug or self.log_level == "DEBUG"

    @property
    def service_info(self) -> dict[str, str]:
        """Service identification used in startup logs."""
        return {
            "name": self.service_name,
            "version": self.service_version,
            "environment": self.environment,
        }

    def get_database_url(self) -> str:
        """Get SQLAlchemy database URL.

        An explicit ``database_url`` wins; otherwise the SQLite file at
        ``database_path`` is used.
        """
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.database_path}"


# === Process Configuration ===


class _ConfigStore:
    """Internal storage for the process configuration."""

    _instance: CatalogConfig | None = None


def get_config() -> CatalogConfig:
    """Get or create the process configuration.

    Only the entry point reads this; components receive their settings
    explicitly from ``create_app``.
    """
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = CatalogConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
