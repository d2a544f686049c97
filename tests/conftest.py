"""Shared test fixtures for tenant-audit tests."""

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory, monkeypatch):
    """Keep user/project config files and TENANT_AUDIT_* variables out of tests."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(home)
    for key in list(os.environ):
        if key.startswith("TENANT_AUDIT_"):
            monkeypatch.delenv(key)
    return home


def write_file(root: Path, rel: str, content="") -> Path:
    """Create ``root/rel`` with text or bytes content, making parents."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write():
    """Expose write_file to tests."""
    return write_file


@pytest.fixture
def tenant(tmp_path):
    """An empty tenant root directory."""
    root = tmp_path / "volumes" / "tenant-a"
    root.mkdir(parents=True)
    return root
