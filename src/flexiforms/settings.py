"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import logging
import ssl
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flexiforms.exceptions import SettingsError

logger = logging.getLogger(__name__)

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "flexiforms"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    store_dir: str = Field(
        default="data/forms",
        validation_alias="STORE_DIR",
        description="Directory holding the file-backed form definition store.",
    )

    rpc_base_url: str | None = Field(
        default=None,
        validation_alias="RPC_BASE_URL",
        description="Base URL of the remote `formDesigner` procedures, e.g. 'https://host/api/trpc'.",
    )
    rpc_token: str | None = Field(
        default=None,
        validation_alias="RPC_TOKEN",
        description="Bearer token identifying the authenticated user.",
    )
    http_proxy: str | None = Field(default=None, validation_alias="HTTP_PROXY", description="HTTP proxy URL.")
    https_proxy: str | None = Field(
        default=None,
        validation_alias="HTTPS_PROXY",
        description="HTTPS proxy URL.",
    )
    cert_path: str | None = Field(
        default=None,
        validation_alias="CERT_PATH",
        description="Path to SSL certificate.",
    )
    timeout: float = Field(
        default=30.0,
        validation_alias="TIMEOUT",
        description="Request timeout in seconds.",
    )

    @field_validator("rpc_base_url")
    @classmethod
    def _require_https_outside_localhost(cls, value: str | None) -> str | None:
        """Reject plain HTTP RPC endpoints unless they are local."""
        if not value:
            return value
        parsed = urlparse(value)
        if parsed.scheme == "https":
            return value.rstrip("/")
        if parsed.scheme == "http" and (parsed.hostname or "").lower() in _LOCAL_HOSTS:
            return value.rstrip("/")
        message = "RPC_BASE_URL must use https outside local development"
        raise ValueError(message)

    @property
    def store_path(self) -> Path:
        """Return the store directory as a path."""
        return Path(self.store_dir)


def _cert_store_has_ca(ssl_context: ssl.SSLContext) -> bool:
    return bool(ssl_context.get_ca_certs())


def _get_certifi_cafile() -> str | None:
    try:
        import certifi  # noqa: PLC0415
    except ImportError:
        return None
    return certifi.where()


def build_ssl_context(settings: Settings) -> ssl.SSLContext:
    """Build a strict SSL context from settings.

    Without `CERT_PATH`, the host trust store is used; when it holds no CA
    certificates the `certifi` bundle is loaded instead.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        ssl.SSLContext: Configured TLS context.
    """
    ssl_context = ssl.create_default_context(cafile=settings.cert_path)
    if settings.cert_path is None and not _cert_store_has_ca(ssl_context):
        certifi_cafile = _get_certifi_cafile()
        if certifi_cafile is not None:
            ssl_context = ssl.create_default_context(cafile=certifi_cafile)
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


def build_httpx_client_kwargs(settings: Settings) -> dict[str, Any]:
    """Build kwargs used for the RPC `httpx.Client`.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        dict[str, Any]: Arguments for the client constructor.
    """
    kwargs: dict[str, Any] = {
        "verify": build_ssl_context(settings),
        "timeout": settings.timeout,
    }

    headers = {"Accept": "application/json"}
    if settings.rpc_token:
        headers["Authorization"] = f"Bearer {settings.rpc_token}"
    kwargs["headers"] = headers

    proxy_url = settings.https_proxy or settings.http_proxy
    if proxy_url:
        kwargs["proxy"] = proxy_url
    return kwargs


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        if _is_missing_settings_error(exc):
            ensure_env_file_exists()
            try:
                return Settings()
            except Exception as retry_exc:
                raise SettingsError(exc=retry_exc) from retry_exc
        raise SettingsError(exc=exc) from exc


def ensure_env_file_exists(
    *,
    env_path: Path = Path(".env"),
    template_path: Path = Path(".env.template"),
) -> None:
    """Create `.env` from template when missing.

    Args:
        env_path (Path): Target environment file path.
        template_path (Path): Template file path.
    """
    if env_path.exists() or not template_path.exists():
        return
    env_path.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info(
        "Created environment file from template",
        extra={"env_path": str(env_path), "template_path": str(template_path)},
    )


def _is_missing_settings_error(exc: Exception) -> bool:
    """Return whether the settings failure is due to missing values.

    Args:
        exc (Exception): Caught settings initialization error.

    Returns:
        bool: True when the error represents missing settings values.
    """
    if not isinstance(exc, ValidationError):
        return False
    return any(error.get("type") == "missing" for error in exc.errors())
