"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class AsyncExecutionError(PackageError):
    """Raised when an awaited submit or save callback fails outside an event loop."""

    result: BaseException
    message: str = "Async operation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.result}"


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when optional runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass
class StoreError(PackageError):
    """Raised when the definition store rejects an operation."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass
class DuplicateEntityTypeError(StoreError):
    """Raised when a second definition is created for an existing entity type."""

    entity_type: str = ""


@dataclass
class DefinitionNotFoundError(StoreError):
    """Raised when a form definition id does not exist."""

    definition_id: int | None = None


@dataclass
class FieldNotFoundError(StoreError):
    """Raised when a persisted field row id does not exist."""

    field_id: int | None = None


@dataclass(frozen=True)
class RpcError(PackageError):
    """Raised when a remote `formDesigner.*` call fails."""

    message: str
    code: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.code}: {self.message}" if self.code else self.message


@dataclass(frozen=True)
class AuthenticationError(RpcError):
    """Raised when the remote boundary rejects the caller identity."""


@dataclass(frozen=True)
class FormValidationError(PackageError):
    """Raised when a data record fails field-level validation."""

    field_name: str
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message
