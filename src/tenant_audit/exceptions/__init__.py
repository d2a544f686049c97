"""Exception hierarchy for tenant-audit."""

from .audit import (
    AuditError,
    FileAccessError,
    FileTooLargeError,
    WalkError,
)
from .base import TenantAuditError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
    VolumesDirError,
)

__all__ = [
    "TenantAuditError",
    "AuditError",
    "FileAccessError",
    "FileTooLargeError",
    "WalkError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "VolumesDirError",
]
