"""Base formatter interface for audit output rendering."""

from abc import ABC, abstractmethod

from ..models import AuditSummary, TenantReport


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    def render(self, summary: AuditSummary) -> None:
        """Print the full audit to stdout."""
        print(self.format(summary))

    def render_report(self, report: TenantReport) -> None:
        """Print a single tenant report to stdout."""
        print(self.format_report(report))

    @abstractmethod
    def format(self, summary: AuditSummary) -> str:
        """Return formatted string representation of a full audit."""

    @abstractmethod
    def format_report(self, report: TenantReport) -> str:
        """Return formatted string representation of one tenant."""
