"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AuditConfig, load_config

err_console = Console(stderr=True)


def resolve_config(
    config: Optional[Path] = None,
    volumes_dir: Optional[Path] = None,
    max_depth: Optional[int] = None,
    max_file_size_mb: Optional[float] = None,
    workers: Optional[int] = None,
    follow_symlinks: Optional[bool] = None,
    rewalk: Optional[bool] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> AuditConfig:
    """Build the audit config from CLI options."""
    overrides = {
        "volumes_dir": str(volumes_dir) if volumes_dir is not None else None,
        "max_depth": max_depth,
        "max_file_size_mb": max_file_size_mb,
        "workers": workers,
        "follow_symlinks": follow_symlinks,
        "rewalk_flagged_dirs": rewalk,
    }
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)
