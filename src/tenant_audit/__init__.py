"""
tenant-audit - Multi-tenant volume auditing

Walks every tenant directory under a volumes root, reports the mix of file
extensions in each, and flags files or folders matching simple content and
naming heuristics.
"""

__version__ = "0.1.0"

from .audit import audit_tenant, list_tenants, run_audit
from .config import DEFAULT_CONFIG, AuditConfig, load_config
from .flags import evaluate
from .models import AuditSummary, TenantReport, WalkResult
from .walker import walk

__all__ = [
    "run_audit",  # Main entry point
    "audit_tenant",
    "list_tenants",
    "walk",
    "evaluate",
    "AuditConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "WalkResult",
    "TenantReport",
    "AuditSummary",
]
