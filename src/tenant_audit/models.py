"""Data models for walk results and audit reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class WalkResult:
    """Outcome of one walk invocation.

    ``percentages`` is relative to ``total_files`` of this invocation only.
    After nested results are merged in, the values are sums and no longer
    add up to 100.
    """

    percentages: dict[str, float] = field(default_factory=dict)
    file_flags: dict[str, list[str]] = field(default_factory=dict)
    folder_flags: set[str] = field(default_factory=set)
    skipped: dict[str, str] = field(default_factory=dict)
    total_files: int = 0
    failed: bool = False
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> WalkResult:
        return cls(failed=True, error=error)

    @property
    def has_flags(self) -> bool:
        """Only flagged files count; excluded folders alone do not."""
        return bool(self.file_flags)

    def merge(self, other: WalkResult) -> None:
        """Fold a nested walk into this one.

        Percentages are added per extension without renormalizing. File flags
        and skipped files are unioned with the other side winning on equal
        keys; folder flags are a set union. ``total_files`` is left alone.
        """
        for ext, pct in other.percentages.items():
            self.percentages[ext] = self.percentages.get(ext, 0.0) + pct
        self.file_flags.update(other.file_flags)
        self.folder_flags |= other.folder_flags
        self.skipped.update(other.skipped)

    def to_dict(self) -> dict:
        return {
            "percentages": dict(self.percentages),
            "file_flags": {path: list(flags) for path, flags in self.file_flags.items()},
            "folder_flags": sorted(self.folder_flags),
            "skipped": dict(self.skipped),
            "total_files": self.total_files,
            "failed": self.failed,
            "error": self.error,
        }


@dataclass
class TenantReport:
    """Walk result for a single tenant root."""

    tenant: Path
    result: WalkResult

    @property
    def has_flags(self) -> bool:
        return self.result.has_flags

    @property
    def failed(self) -> bool:
        return self.result.failed

    def to_dict(self) -> dict:
        return {"tenant": str(self.tenant), **self.result.to_dict()}


@dataclass
class AuditSummary:
    """Cross-tenant results of a full audit run."""

    volumes_dir: Path
    reports: list[TenantReport] = field(default_factory=list)

    @property
    def flagged_reports(self) -> list[TenantReport]:
        return [r for r in self.reports if not r.failed and r.has_flags]

    @property
    def failed_reports(self) -> list[TenantReport]:
        return [r for r in self.reports if r.failed]

    @property
    def all_file_flags(self) -> dict[str, list[str]]:
        """Every flagged file across tenants, in tenant order."""
        merged: dict[str, list[str]] = {}
        for report in self.flagged_reports:
            merged.update(report.result.file_flags)
        return merged

    @property
    def all_folder_flags(self) -> list[str]:
        """Distinct excluded folders across every tenant that did not fail, sorted."""
        folders: set[str] = set()
        for report in self.reports:
            if report.failed:
                continue
            folders |= report.result.folder_flags
        return sorted(folders)

    @property
    def has_flags(self) -> bool:
        return bool(self.flagged_reports)

    def to_dict(self) -> dict:
        return {
            "volumes_dir": str(self.volumes_dir),
            "tenants": [r.to_dict() for r in self.reports],
            "summary": {
                "tenants_scanned": len(self.reports),
                "tenants_flagged": len(self.flagged_reports),
                "tenants_failed": len(self.failed_reports),
                "file_flags": self.all_file_flags,
                "folder_flags": self.all_folder_flags,
            },
        }
