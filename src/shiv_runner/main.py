# noqa: D401
"""CLI entry point for the shiv profile runner."""

from __future__ import annotations

import shlex
from typing import Optional, Sequence

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import RunnerSettings, load_selection, load_settings
from .invocation import build_invocation, gcode_variables
from .logging import configure_logging, get_logger
from .models import Invocation, ProfileSelection
from .process import LaunchError, ShivRunnerError, get_launcher, run_timed
from .profiles import build_config_stack

USAGE_EXIT_CODE = 2
USAGE_TEMPLATE = "usage: {prog} binary_stl_file [shiv_options]"
DEFAULT_PROG_NAME = "shiv-export"

# Everything after the input path belongs to shiv
PASSTHROUGH_CONTEXT = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
}

app = typer.Typer(
    name=DEFAULT_PROG_NAME,
    help="Slice a binary STL with shiv using layered machine/extruder/material profiles.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)
LOGGER = get_logger(__name__)


class UsageError(ShivRunnerError):
    """The required input path was not given."""

    def __init__(self, prog: str) -> None:
        super().__init__(USAGE_TEMPLATE.format(prog=prog))
        self.prog = prog


def validate_args(input_path: Optional[str], prog: str) -> str:
    """Return the input path, or raise UsageError if it is missing or empty."""
    if not input_path:
        raise UsageError(prog)
    return input_path


def prepare_invocation(
    input_path: str,
    extra_args: Sequence[str],
    selection: ProfileSelection,
    settings: RunnerSettings,
    stamp_variables: bool = False,
) -> Invocation:
    """Resolve the config stack and output path into an engine command."""
    stack = build_config_stack(selection, settings.config_dir)
    variables = gcode_variables(selection) if stamp_variables else None
    return build_invocation(
        input_path,
        extra_args,
        stack,
        bin_path=settings.bin_path,
        variables=variables,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"shiv-runner version {__version__}")
        raise typer.Exit()


@app.command(context_settings=PASSTHROUGH_CONTEXT)
def main(
    ctx: typer.Context,
    input_path: Optional[str] = typer.Argument(
        None,
        metavar="BINARY_STL_FILE",
        help="Binary STL file (.gz, .bz2, .xz and .lz4 are decompressed on the fly)",
        show_default=False,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the shiv command instead of running it",
    ),
    gcode_vars: bool = typer.Option(
        False,
        "--gcode-vars",
        help="Stamp date and profile names into the G-code as gcode_variable settings",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose logging",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Slice an STL with shiv. Options after the input file are passed to shiv unchanged.

    Profiles are chosen with the MACHINE, EXTRUDER and MATERIAL environment
    variables (defaults: ultra3d, left, inland_pla).
    """
    load_dotenv(find_dotenv(usecwd=True))
    settings = load_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)

    prog = ctx.find_root().info_name or DEFAULT_PROG_NAME
    try:
        input_path = validate_args(input_path, prog)
    except UsageError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(USAGE_EXIT_CODE)

    selection = load_selection()
    invocation = prepare_invocation(
        input_path,
        ctx.args,
        selection,
        settings,
        stamp_variables=gcode_vars,
    )

    if dry_run:
        console.print(shlex.join(invocation.command), markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit()

    try:
        result = run_timed(get_launcher(), invocation)
    except LaunchError as e:
        LOGGER.error("Failed to run slicer", error=str(e), exit_code=e.exit_code)
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(e.exit_code)

    err_console.print(f"[dim]real {result.elapsed_seconds:.3f}s[/dim]", highlight=False)
    raise typer.Exit(result.exit_code)


if __name__ == "__main__":
    app()
