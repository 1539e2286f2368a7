"""Typer application and CLI entry point for spectry.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``validate``, ``format``, ``export``,
``inspect``, ``example``, ``request``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~spectry.exceptions.SpectryError` instances that escape a command
exit with the error's code; any other exception is written to a crash log
under the data directory.

See Also:
    :mod:`spectry.config`: Configuration resolution.
    :mod:`spectry.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from spectry import __version__
from spectry.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="spectry",
    help="Validate OpenAPI/Swagger documents and try their operations.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Sub-commands
# ------------------------------------------------------------------ #

from spectry.commands.config import config_app  # noqa: E402
from spectry.commands.console import example_command, request_command  # noqa: E402
from spectry.commands.document import (  # noqa: E402
    export_command,
    format_command,
    validate_command,
)
from spectry.commands.inspect import inspect_app  # noqa: E402

app.command("validate")(validate_command)
app.command("format")(format_command)
app.command("export")(export_command)
app.command("example")(example_command)
app.command("request")(request_command)
app.add_typer(inspect_app, name="inspect", help="Inspect what a spec declares.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"spectry {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    """Route ``spectry`` log records to stderr through Rich when verbose."""
    logger = logging.getLogger("spectry")
    if not verbose:
        logger.setLevel(logging.WARNING)
        return
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(
            RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        )


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the effective configuration, installs the global
    :class:`~spectry.output.OutputManager`, and stores the configuration in
    ``ctx.obj`` for sub-commands.
    """
    from spectry.config import resolve_config
    from spectry.exceptions import ConfigError
    from spectry.output import OutputFormat, OutputManager, error, set_output

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    # Provisional manager so config errors can be reported.
    set_output(
        OutputManager(
            format=OutputFormat(cli_format or "auto"),
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )
    _setup_logging(verbose)

    try:
        config = resolve_config(cli_timeout=timeout, cli_format=cli_format)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    try:
        fmt = OutputFormat(config.output.format)
    except ValueError:
        error(f"Unknown output format in config: {config.output.format}")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from spectry.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``spectry`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from spectry.exceptions import SpectryError
        from spectry.output import error

        if isinstance(exc, SpectryError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
