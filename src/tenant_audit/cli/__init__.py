"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="tenant-audit",
    help="tenant-audit - Audit tenant volumes for suspicious files",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .audit import main as _main_callback  # noqa: F401, E402
from .walk import walk as _walk  # noqa: F401, E402
from .check import check as _check  # noqa: F401, E402
