"""Allow ``python -m tenant_audit``."""

from .cli import app

if __name__ == "__main__":
    app()
