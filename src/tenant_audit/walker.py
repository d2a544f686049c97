"""Bounded directory walker.

``walk`` traverses one directory tree, tallies file extensions into
percentages, prunes excluded directories, and inspects the content of
selected files. Every subdirectory that holds a flagged file is then walked
again one level deeper and its result is merged into the parent's, with
percentages added per extension. Walks deeper than ``max_depth`` return an
empty result.
"""

import os
import stat
from collections import Counter
from pathlib import Path
from typing import Optional, Union

from .config import DEFAULT_CONFIG, AuditConfig
from .exceptions import FileAccessError, WalkError
from .file_ops import file_extension, is_excluded_dir, read_file_with_limit
from .flags import evaluate
from .logging_config import get_logger
from .models import WalkResult

logger = get_logger(__name__)


def walk(
    root: Union[str, Path], depth: int = 1, config: AuditConfig = DEFAULT_CONFIG
) -> WalkResult:
    """
    Walk a directory tree and return its extension mix and flags.

    Args:
        root: Directory to walk
        depth: Nesting level of this call, 1 for a tenant root
        config: Audit configuration

    Returns:
        WalkResult for the subtree. Empty when ``depth`` exceeds
        ``config.max_depth``; marked failed when a directory could not be
        listed, in which case partial results are discarded.
    """
    if depth > config.max_depth:
        logger.debug(f"Depth {depth} exceeds max depth {config.max_depth}: {root}")
        return WalkResult()

    root_dir = os.path.abspath(root)

    try:
        result = _traverse(root_dir, config)
    except WalkError as e:
        logger.error(f"Error walking directory {root_dir}: {e.reason}")
        return WalkResult.failure(e.reason)

    if config.rewalk_flagged_dirs:
        _merge_flagged_subdirs(root_dir, depth, config, result)

    return result


def _raise_walk_error(err: OSError) -> None:
    """os.walk error callback: any unreadable directory aborts the walk."""
    raise WalkError(Path(err.filename or ""), f"{err.filename}: {err.strerror or err}")


def _traverse(root_dir: str, config: AuditConfig) -> WalkResult:
    """Single pass over the tree; no nested walks."""
    result = WalkResult()
    counts: Counter = Counter()
    total_files = 0

    for dirpath, dirnames, filenames in os.walk(
        root_dir, topdown=True, onerror=_raise_walk_error, followlinks=False
    ):
        kept = []
        for name in dirnames:
            if is_excluded_dir(name, config.excluded_dir_names, config.excluded_dir_prefixes):
                excluded = os.path.join(dirpath, name)
                logger.debug(f"Excluded directory: {excluded}")
                result.folder_flags.add(excluded)
            else:
                kept.append(name)
        # Pruning in place stops os.walk from descending
        dirnames[:] = kept

        for name in filenames:
            path = os.path.join(dirpath, name)
            reason = _untallied_reason(path)
            if reason:
                logger.warning(f"Skipping {path}: {reason}")
                result.skipped[path] = reason
                continue

            ext = file_extension(name)
            counts[ext] += 1
            total_files += 1

            if ext in config.inspected_extensions:
                _inspect_file(path, config, result)

    result.total_files = total_files
    if total_files:
        result.percentages = {
            ext: count / total_files * 100.0 for ext, count in counts.items()
        }

    return result


def _untallied_reason(path: str) -> Optional[str]:
    """Return why an entry is left out of the tally, or None to count it.

    Regular files and symlinks are counted. FIFOs, sockets and device nodes
    are not, and are never opened.
    """
    try:
        mode = os.lstat(path).st_mode
    except OSError as e:
        return f"cannot stat: {e.strerror or e}"
    if stat.S_ISREG(mode) or stat.S_ISLNK(mode):
        return None
    return "not a regular file"


def _inspect_file(path: str, config: AuditConfig, result: WalkResult) -> None:
    """Evaluate one file's content and record any flags on ``result``."""
    if not config.follow_symlinks and os.path.islink(path):
        logger.debug(f"Not following symlink: {path}")
        result.skipped[path] = "symlink not followed"
        return

    try:
        content = read_file_with_limit(Path(path), config.max_file_size_bytes)
    except FileAccessError as e:
        logger.warning(f"Skipping {path}: {e.reason}")
        result.skipped[path] = e.reason
        return

    flags = evaluate(content, path, config.enabled_rules)
    if flags:
        result.file_flags[path] = flags


def _merge_flagged_subdirs(
    root_dir: str, depth: int, config: AuditConfig, result: WalkResult
) -> None:
    """Re-walk the directory of each flagged file below ``root_dir`` and merge.

    Runs once per flagged file found by this walk's own traversal, so a
    directory holding several flagged files is added several times.
    """
    for path in sorted(result.file_flags):
        subdir = os.path.dirname(path)
        if subdir == root_dir:
            continue

        nested = walk(subdir, depth + 1, config)
        if nested.failed:
            logger.debug(f"Nested walk of {subdir} failed; not merged")
            continue
        result.merge(nested)
