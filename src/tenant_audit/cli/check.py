"""Check command: evaluate the flag rules against a single file."""

from pathlib import Path

import typer

from ..exceptions import FileAccessError, FileTooLargeError, TenantAuditError
from ..file_ops import read_file_with_limit
from ..flags import evaluate
from ..logging_config import setup_logging
from . import app
from ._common import err_console, resolve_config


@app.command()
def check(
    ctx: typer.Context,
    path: Path = typer.Argument(
        ...,
        help="File to evaluate",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
):
    """
    Print the flags a single file would receive.

    Any extension is evaluated, not only .js and .py. Files over the size
    cap are not read.
    """
    verbose = ctx.obj.get("verbose", False)
    logger = setup_logging(verbose=verbose)

    try:
        settings = resolve_config(config=ctx.obj.get("config_file"), verbose=verbose)
        content = read_file_with_limit(path, settings.max_file_size_bytes)
    except FileTooLargeError as e:
        err_console.print(f"[yellow]Not inspected:[/yellow] {e.reason}")
        raise typer.Exit(0)
    except FileAccessError as e:
        err_console.print(f"[red]Error:[/red] {e.reason}")
        raise typer.Exit(1)
    except TenantAuditError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    flags = evaluate(content, str(path.resolve()), settings.enabled_rules)
    if not flags:
        print("No flags.")
        return

    print(f"{path}:")
    for flag in flags:
        print(f"- {flag}")
