"""JSON formatter for tenant-audit."""

import json

from ..models import AuditSummary, TenantReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render audit results as JSON."""

    def format(self, summary: AuditSummary) -> str:
        return json.dumps(summary.to_dict(), indent=2)

    def format_report(self, report: TenantReport) -> str:
        return json.dumps(report.to_dict(), indent=2)
