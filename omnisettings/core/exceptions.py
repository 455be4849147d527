"""
omnisettings Exception Hierarchy

Provides typed exceptions for settings resolution and typed access.
All omnisettings exceptions inherit from SettingsError.

Exception Hierarchy:
    SettingsError (base)
    ├── FatalConfigError (resolution aborted, nothing published)
    │   ├── BootstrapError (bootstrap resource missing/corrupt)
    │   ├── BundleError (stage bundle corrupt)
    │   ├── ExternalSettingsError (override file malformed/unreachable)
    │   └── LoaderError (pluggable loader failed)
    └── SettingParseError (typed value not well-formed, raised at access time)

Usage:
    from omnisettings.core.exceptions import FatalConfigError, SettingParseError

    try:
        settings = SettingsResolver(loaders=[...]).resolve()
    except FatalConfigError as e:
        logger.critical(f"Cannot start: {e}")
        raise

    try:
        port = accessor.get_integer_setting("port")
    except SettingParseError as e:
        logger.error(f"Bad setting: {e}")
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


# ============================================================================
# Base Exception
# ============================================================================

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ErrorContext:
    """
    Additional context for debugging errors.

    Attributes:
        source: Name of the settings source involved (file, loader, ...)
        operation: What operation was being performed
        stage: Active stage at the time of the error, when known
        timestamp: When the error occurred
        metadata: Additional debugging information
    """
    source: Optional[str] = None
    operation: Optional[str] = None
    stage: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)
    metadata: dict[str, Any] = field(default_factory=dict)


class SettingsError(Exception):
    """
    Base exception for all omnisettings errors.

    Attributes:
        message: Human-readable error message
        context: Additional debugging context
        cause: Original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.cause = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.context.source:
            parts.append(f"[source={self.context.source}]")
        if self.context.operation:
            parts.append(f"[op={self.context.operation}]")
        if self.context.stage:
            parts.append(f"[stage={self.context.stage}]")
        return " ".join(parts)


# ============================================================================
# Resolution Errors
# ============================================================================

class FatalConfigError(SettingsError):
    """
    Raised when settings resolution cannot complete.

    Startup must abort; no partial settings are published.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, context, cause=cause)


class BootstrapError(FatalConfigError):
    """
    Raised when the bootstrap resource is missing, unreadable or invalid.

    Example:
        raise BootstrapError(
            "No bootstrap resource found",
            resource="config/omni-settings",
        )
    """

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext(source=resource, operation="bootstrap")
        super().__init__(message, context, cause=cause)
        self.resource = resource


class BundleError(FatalConfigError):
    """Raised when a stage bundle exists but cannot be parsed."""

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext(source=resource, operation="load_stage_bundle")
        super().__init__(message, context, cause=cause)
        self.resource = resource


class ExternalSettingsError(FatalConfigError):
    """
    Raised when the external override path is malformed or unreachable.

    Example:
        raise ExternalSettingsError(
            "Error loading settings from /etc/app.properties",
            path="/etc/app.properties",
            cause=e,
        )
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext(source=path, operation="load_external")
        super().__init__(message, context, cause=cause)
        self.path = path


class LoaderError(FatalConfigError):
    """
    Raised when a pluggable loader fails during load.

    The loader's own exception is kept as ``cause`` and chained.
    """

    def __init__(
        self,
        message: str,
        loader_name: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext(source=loader_name, operation="run_loader")
        super().__init__(message, context, cause=cause)
        self.loader_name = loader_name


# ============================================================================
# Access Errors
# ============================================================================

class SettingParseError(SettingsError):
    """
    Raised when a typed setting cannot be derived from its string value.

    Reported to the requesting caller only; the frozen mapping is unaffected.
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        value: Optional[str] = None,
        kind: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        context = context or ErrorContext(source=key, operation=f"parse_{kind}" if kind else None)
        super().__init__(message, context, cause=cause)
        self.key = key
        self.value = value
        self.kind = kind


# ============================================================================
# Exports
# ============================================================================

__all__ = [
    # Base
    "SettingsError",
    "ErrorContext",

    # Resolution errors
    "FatalConfigError",
    "BootstrapError",
    "BundleError",
    "ExternalSettingsError",
    "LoaderError",

    # Access errors
    "SettingParseError",
]
