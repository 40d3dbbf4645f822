"""Application settings and configuration management.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings include
the relational store connection options, the school image directory and
its public URL prefix, timeouts for the I/O boundaries, CORS origins, and
the upload size limit.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from school_directory.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.db_host, settings.db_port)

    Environment variables can override defaults:
        >>> DB_HOST=db.internal
        >>> DB_PASS=secret
        >>> IMAGE_DIR=/srv/school_directory/schoolImages
"""

import functools
import pathlib
from typing import Any

import pydantic
import pydantic_settings


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    All settings can be overridden via environment variables or .env file.
    The connection options keep the short ``DB_*`` variable names used by
    existing deployments (``DB_HOST``, ``DB_USER``, ``DB_PASS``,
    ``DB_NAME``, ``DB_PORT``).

    Attributes:
        db_host: Database server host name.
        db_user: Database user.
        db_password: Database password (``DB_PASS``).
        db_name: Database name.
        db_port: Database server port.
        db_connect_timeout_seconds: Handshake timeout for new connections.
        db_statement_timeout_ms: Server-side limit for a single query.
        image_dir: Directory where uploaded school images are written.
        image_url_prefix: Logical prefix of stored image references.
        asset_write_timeout_seconds: Upper bound for one image write.
        max_upload_size_bytes: Maximum accepted image size (default 5MB).
        allow_origins: List of allowed CORS origins (["*"] allows all).
        log_level: Root logging level applied by the app factory.

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     db_host="db.internal",
            ...     image_dir=pathlib.Path("/srv/images"),
            ... )
            >>> settings.ensure_directories()
    """

    db_host: str = pydantic.Field(
        default="localhost",
        validation_alias=pydantic.AliasChoices("db_host", "DB_HOST"),
    )
    db_user: str = pydantic.Field(
        default="root",
        validation_alias=pydantic.AliasChoices("db_user", "DB_USER"),
    )
    db_password: str = pydantic.Field(
        default="",
        validation_alias=pydantic.AliasChoices(
            "db_password", "DB_PASS", "DB_PASSWORD"
        ),
    )
    db_name: str = pydantic.Field(
        default="assignment",
        validation_alias=pydantic.AliasChoices("db_name", "DB_NAME"),
    )
    db_port: int = pydantic.Field(
        default=3306,
        validation_alias=pydantic.AliasChoices("db_port", "DB_PORT"),
    )
    db_connect_timeout_seconds: int = 5
    db_statement_timeout_ms: int = 5000
    image_dir: pathlib.Path = pathlib.Path("public/schoolImages")
    image_url_prefix: str = "/schoolImages"
    asset_write_timeout_seconds: float = 10.0
    max_upload_size_bytes: int = 5 * 1024 * 1024
    allow_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    def ensure_directories(self) -> None:
        """Create the school image directory if it does not exist yet."""
        self.image_dir.mkdir(parents=True, exist_ok=True)

    def connection_kwargs(self) -> dict[str, Any]:
        """Build keyword arguments for ``psycopg2.connect``.

        Both timeouts are applied here: the handshake timeout through
        ``connect_timeout`` and the per-query limit through the
        ``statement_timeout`` session option.

        Returns:
            Mapping of connection keyword arguments.
        """
        return {
            "host": self.db_host,
            "user": self.db_user,
            "password": self.db_password,
            "dbname": self.db_name,
            "port": self.db_port,
            "connect_timeout": self.db_connect_timeout_seconds,
            "options": f"-c statement_timeout={self.db_statement_timeout_ms}",
        }


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance with directories initialized.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the application. The image directory is created on
    first call. Subsequent calls return the same cached instance.

    Returns:
        Settings instance with all configuration values populated.
    """
    settings = Settings()
    settings.ensure_directories()
    return settings
