"""Tenant enumeration and per-tenant orchestration."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

from .config import DEFAULT_CONFIG, AuditConfig
from .exceptions import InvalidPathError, VolumesDirError
from .logging_config import get_logger
from .models import AuditSummary, TenantReport
from .walker import walk

logger = get_logger(__name__)


def list_tenants(volumes_dir: Union[str, Path]) -> list[Path]:
    """
    List tenant roots: the immediate subdirectories of ``volumes_dir``.

    Raises:
        VolumesDirError: If the directory cannot be listed
    """
    volumes = Path(volumes_dir)
    try:
        entries = sorted(volumes.iterdir())
    except OSError as e:
        raise VolumesDirError(volumes, e.strerror or str(e))

    tenants = [entry for entry in entries if entry.is_dir()]
    logger.debug(f"Found {len(tenants)} tenant(s) in {volumes}")
    return tenants


def audit_tenant(tenant: Union[str, Path], config: AuditConfig = DEFAULT_CONFIG) -> TenantReport:
    """
    Walk one tenant root from depth 1.

    A root that does not exist yields a failed report, like any other
    listing error.

    Raises:
        InvalidPathError: If the root exists but is not a directory
    """
    tenant_path = Path(tenant)
    if tenant_path.exists() and not tenant_path.is_dir():
        raise InvalidPathError(tenant_path, "Not a directory")
    logger.info(f"Auditing {tenant_path}")
    return TenantReport(tenant=tenant_path, result=walk(tenant_path, 1, config))


def run_audit(
    config: AuditConfig = DEFAULT_CONFIG, workers: Optional[int] = None
) -> AuditSummary:
    """
    Audit every tenant under ``config.volumes_dir``.

    Tenants share no state, so with more than one worker they are walked in
    a thread pool. Reports keep the tenant listing order either way.

    Args:
        config: Audit configuration
        workers: Overrides ``config.workers`` when given

    Raises:
        VolumesDirError: If the volumes directory cannot be listed
    """
    tenants = list_tenants(config.volumes_path)
    max_workers = workers if workers is not None else config.workers

    if not max_workers or max_workers == 1 or len(tenants) < 2:
        reports = [audit_tenant(tenant, config) for tenant in tenants]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            reports = list(executor.map(lambda t: audit_tenant(t, config), tenants))

    summary = AuditSummary(volumes_dir=config.volumes_path, reports=reports)
    logger.info(
        f"Audited {len(reports)} tenant(s): {len(summary.flagged_reports)} flagged, "
        f"{len(summary.failed_reports)} failed"
    )
    return summary
