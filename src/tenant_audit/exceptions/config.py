"""Configuration exceptions: paths, settings, the volumes directory."""

from pathlib import Path
from typing import Any

from .base import TenantAuditError


class ConfigurationError(TenantAuditError):
    """Base class for configuration-related errors."""

    pass


class InvalidPathError(ConfigurationError):
    """Raised when a provided path is invalid."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid path: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class VolumesDirError(ConfigurationError):
    """Raised when the tenant volumes directory cannot be listed.

    This is the only process-level failure: no tenant is audited.
    """

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot read volumes directory: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason
