"""Main audit command: walk every tenant under the volumes directory."""

from pathlib import Path
from typing import Optional

import click
import typer

from ..audit import run_audit
from ..exceptions import TenantAuditError, VolumesDirError
from ..formatters import get_formatter
from ..logging_config import setup_logging
from . import app
from ._common import err_console, resolve_config


@app.callback(invoke_without_command=True, no_args_is_help=False)
def main(
    ctx: typer.Context,
    volumes_dir: Optional[Path] = typer.Option(
        None,
        "-d",
        "--volumes-dir",
        help="Directory holding one subdirectory per tenant",
        file_okay=False,
        dir_okay=True,
    ),
    fmt: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text (default), json",
        click_type=click.Choice(["text", "json"], case_sensitive=False),
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        help="Deepest nested re-walk of flagged subdirectories",
        min=1,
    ),
    max_file_size_mb: Optional[float] = typer.Option(
        None,
        "--max-file-size-mb",
        help="Files larger than this are counted but not inspected",
        min=0.001,
    ),
    no_rewalk: bool = typer.Option(
        False,
        "--no-rewalk",
        help="Count each file once instead of re-walking flagged subdirectories",
    ),
    follow_symlinks: bool = typer.Option(
        False,
        "--follow-symlinks",
        help="Inspect content through symlinked files",
    ),
    fail_on_flags: bool = typer.Option(
        False,
        "--fail-on-flags",
        help="Exit 2 if any tenant has flagged files",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Tenants walked in parallel (default: sequential)",
        min=1,
        max=32,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also append log records to this file",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Audit every tenant volume and report suspicious files.

    Each subdirectory of the volumes directory is walked: file extensions are
    tallied, excluded folders (node_modules, plugins, assets, hidden) are
    pruned, and .js/.py files are checked for suspicious content. Only
    tenants with flagged files are reported, followed by a summary.

    [bold cyan]Examples:[/bold cyan]

      tenant-audit

      tenant-audit -d /srv/volumes --format json

      tenant-audit walk /srv/volumes/0f3a

      tenant-audit check /srv/volumes/0f3a/index.js
    """
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config
    ctx.obj["verbose"] = verbose

    if ctx.invoked_subcommand is not None:
        return

    from .. import __version__

    if version:
        err_console.print(f"[bold cyan]tenant-audit[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    logger = setup_logging(
        verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None
    )

    try:
        settings = resolve_config(
            config=config,
            volumes_dir=volumes_dir,
            max_depth=max_depth,
            max_file_size_mb=max_file_size_mb,
            workers=workers,
            follow_symlinks=True if follow_symlinks else None,
            rewalk=False if no_rewalk else None,
            verbose=verbose,
            quiet=quiet,
        )
        if settings.verbosity != "normal" and not (verbose or quiet):
            # verbosity came from a config file or TENANT_AUDIT_VERBOSITY
            logger = setup_logging(
                verbose=settings.verbosity == "verbose",
                quiet=settings.verbosity == "quiet",
                log_file=str(log_file) if log_file else None,
            )

        summary = run_audit(settings)
        get_formatter(fmt.lower()).render(summary)

        if fail_on_flags and summary.has_flags:
            raise typer.Exit(2)

    except typer.Exit:
        raise

    except VolumesDirError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        err_console.print(f"[red]Error reading volumes directory:[/red] {e.reason}")
        raise typer.Exit(1)

    except TenantAuditError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Audit interrupted by user")
        err_console.print("\n[yellow]Audit interrupted[/yellow]")
        raise typer.Exit(130)
