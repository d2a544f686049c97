"""Plain-text report formatter.

Layout per flagged tenant::

    Directory: /volumes/abc

    Languages:
    * 50% js
    * 50% py

    Flags found in files:
    /volumes/abc/b.js:
    - Nezha was detected

Tenants without flagged files are left out. The run ends with a summary of
every flagged file, then every excluded folder across all tenants that did
not fail, including tenants that were left out.
"""

from ..models import AuditSummary, TenantReport
from .base import BaseFormatter

NO_FLAGS_MESSAGE = "No flags found in any tenant."


def format_percentage_line(ext: str, percentage: float) -> str:
    """Format one language line, e.g. ``* 50% py``."""
    return f"* {percentage:.0f}% {ext[1:] if ext.startswith('.') else ext}"


def _flag_lines(file_flags: dict[str, list[str]]) -> list[str]:
    lines = []
    for path in sorted(file_flags):
        lines.append(f"{path}:")
        lines.extend(f"- {flag}" for flag in file_flags[path])
    return lines


class TextFormatter(BaseFormatter):
    """Render the human-readable per-tenant report and summary."""

    def format(self, summary: AuditSummary) -> str:
        sections = [self.format_report(r) for r in summary.flagged_reports]
        sections.extend(
            f"Walk failed: {r.tenant} ({r.result.error})" for r in summary.failed_reports
        )
        sections.append(self.format_summary(summary))
        return "\n\n".join(sections)

    def format_report(self, report: TenantReport) -> str:
        result = report.result
        if result.failed:
            return f"Walk failed: {report.tenant} ({result.error})"

        lines = [f"Directory: {report.tenant}", "", "Languages:"]
        ranked = sorted(result.percentages.items(), key=lambda item: (-item[1], item[0]))
        lines.extend(format_percentage_line(ext, pct) for ext, pct in ranked)

        lines.extend(["", "Flags found in files:"])
        lines.extend(_flag_lines(result.file_flags))

        if result.folder_flags:
            lines.extend(["", "Flagged folders:"])
            lines.extend(f"- {folder}" for folder in sorted(result.folder_flags))

        return "\n".join(lines)

    def format_summary(self, summary: AuditSummary) -> str:
        if summary.has_flags:
            lines = ["Summary:", "", "Flagged files:"]
            lines.extend(_flag_lines(summary.all_file_flags))
        else:
            lines = ["Summary:", NO_FLAGS_MESSAGE]

        # Folders come from every tenant, reported or not
        folders = summary.all_folder_flags
        if folders:
            lines.extend(["", "Excluded folders (all tenants):"])
            lines.extend(f"- {folder}" for folder in folders)

        return "\n".join(lines)
