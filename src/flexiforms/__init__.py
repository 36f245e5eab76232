"""FlexiForms package."""

from flexiforms.async_runner import run_async
from flexiforms.exceptions import (
    AsyncExecutionError,
    AuthenticationError,
    DefinitionNotFoundError,
    DependencyError,
    DuplicateEntityTypeError,
    FieldNotFoundError,
    FormValidationError,
    PackageError,
    RpcError,
    SettingsError,
    StoreError,
)
from flexiforms.logging import configure_logging, get_logger
from flexiforms.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("flexiforms")

__all__ = [
    "AsyncExecutionError",
    "AuthenticationError",
    "DefinitionNotFoundError",
    "DependencyError",
    "DuplicateEntityTypeError",
    "FieldNotFoundError",
    "FormValidationError",
    "PackageError",
    "RpcError",
    "Settings",
    "SettingsError",
    "StoreError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
    "run_async",
]
