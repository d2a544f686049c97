"""Walk command: audit a single directory as if it were a tenant root."""

from pathlib import Path

import click
import typer

from ..audit import audit_tenant
from ..exceptions import TenantAuditError
from ..formatters import get_formatter
from ..logging_config import setup_logging
from . import app
from ._common import err_console, resolve_config


@app.command()
def walk(
    ctx: typer.Context,
    path: Path = typer.Argument(
        ...,
        help="Directory to walk",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    fmt: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text (default), json",
        click_type=click.Choice(["text", "json"], case_sensitive=False),
    ),
):
    """
    Walk one directory and print its report, flagged or not.

    [bold cyan]Examples:[/bold cyan]

      tenant-audit walk /srv/volumes/0f3a

      tenant-audit -v walk ./some-dir --format json
    """
    verbose = ctx.obj.get("verbose", False)
    logger = setup_logging(verbose=verbose)

    try:
        settings = resolve_config(config=ctx.obj.get("config_file"), verbose=verbose)
        report = audit_tenant(path, settings)
    except TenantAuditError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    get_formatter(fmt.lower()).render_report(report)

    if report.failed:
        raise typer.Exit(1)
