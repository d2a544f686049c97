"""Audit-time exceptions: file access and directory traversal."""

from pathlib import Path

from .base import TenantAuditError


class AuditError(TenantAuditError):
    """Base class for errors raised while auditing a tenant."""
    pass


class FileAccessError(AuditError):
    """Raised when a file cannot be opened, statted, or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class FileTooLargeError(FileAccessError):
    """Raised when a file exceeds the content inspection size cap."""

    def __init__(self, filepath: Path, size: int, limit: int):
        super().__init__(
            filepath,
            f"file is too large (size: {size} bytes, limit: {limit} bytes)",
        )
        self.size = size
        self.limit = limit


class WalkError(AuditError):
    """Raised when a directory cannot be traversed; aborts the whole walk."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Error walking directory {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason
