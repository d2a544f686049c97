"""
File helpers for tenant-audit.

Provides extension parsing, the directory exclusion predicate, and a
size-limited file read.
"""

import os
import stat
from collections.abc import Iterable
from pathlib import Path

from .exceptions import FileAccessError, FileTooLargeError


def file_extension(path: str) -> str:
    """
    Return the extension of a path's base name.

    The extension is the suffix starting at the final dot, so ``a.tar.gz``
    gives ``.gz`` and ``.bashrc`` gives ``.bashrc``. Names without a dot give
    the empty string. Case is preserved.
    """
    name = os.path.basename(path)
    idx = name.rfind(".")
    if idx < 0:
        return ""
    return name[idx:]


def is_excluded_dir(
    name: str, excluded_names: Iterable[str], excluded_prefixes: Iterable[str]
) -> bool:
    """
    Check if a directory should be pruned with its whole subtree.

    Args:
        name: Directory base name
        excluded_names: Names matched exactly (e.g. ``node_modules``)
        excluded_prefixes: Name prefixes (e.g. ``.`` for hidden directories)

    Returns:
        True if the directory is excluded
    """
    if name in excluded_names:
        return True
    return name.startswith(tuple(excluded_prefixes))


def read_file_with_limit(
    filepath: Path,
    limit: int,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> str:
    """
    Read a whole file unless it is larger than ``limit`` bytes.

    Args:
        filepath: File to read
        limit: Maximum size in bytes
        encoding: Text encoding
        errors: How to handle encoding errors

    Returns:
        File contents as string

    Raises:
        FileTooLargeError: If the file exceeds the limit
        FileAccessError: If the file cannot be opened, statted, or read, or
            is not a regular file
    """
    try:
        # O_NONBLOCK keeps open() from waiting on a FIFO with no writer
        fd = os.open(filepath, os.O_RDONLY | getattr(os, "O_NONBLOCK", 0))
        with os.fdopen(fd, "rb") as f:
            st = os.fstat(f.fileno())
            if not stat.S_ISREG(st.st_mode):
                raise FileAccessError(filepath, "not a regular file")
            size = st.st_size
            if size > limit:
                raise FileTooLargeError(filepath, size, limit)
            # The file may have grown since fstat
            data = f.read(limit + 1)
    except FileAccessError:
        raise
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")

    if len(data) > limit:
        raise FileTooLargeError(filepath, len(data), limit)

    return data.decode(encoding, errors=errors)
