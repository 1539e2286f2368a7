"""Output formatting with strict stdout/stderr discipline.

* **stdout** -- primary data only: response bodies, formatted documents,
  tables, curl previews. This is what downstream tools pipe and parse.
* **stderr** -- all diagnostics: status lines, timings, warnings and errors.
  Never contaminates the data stream.
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped to another process.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

:class:`OutputManager` holds the format preferences and both consoles; it is
created once in :func:`~spectry.app.main_callback` and installed via
:func:`set_output`. The module-level helpers (:func:`info`, :func:`error`,
...) delegate to that global instance so commands need not pass it around.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from spectry.models import ResponseRecord, Severity, ValidationIssue


class OutputFormat(str, Enum):
    """Enumeration of supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise. Callers can force a specific
    format via the ``--json`` or ``--plain`` CLI flags.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for all CLI output.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential informational messages on stderr.
        verbose: Enable debug-level messages and response headers on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout. A trailing newline is appended."""
        print(text, file=sys.stdout, flush=True)

    def print_json(self, data: Any) -> None:
        """Print *data* as 2-space indented JSON, highlighted in Rich mode."""
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(text)

    def print_source(self, text: str, lexer: str) -> None:
        """Print document or shell text, highlighted with *lexer* in Rich mode."""
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, lexer, theme="monokai", word_wrap=True))
        else:
            self.print_data(text)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print tabular data to stdout in the active format.

        * **Rich mode** -- styled :class:`~rich.table.Table`.
        * **JSON mode** -- array of objects keyed by header names.
        * **Plain mode** -- tab-separated values, one row per line.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))

        elif self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))

        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    def print_response(self, record: ResponseRecord) -> None:
        """Render an execution result.

        In JSON mode the whole record goes to stdout as one object. Otherwise
        the status line and duration go to stderr, the headers too when
        verbose, and the body text to stdout.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(record.model_dump(), indent=2, ensure_ascii=False))
            return

        status = f"{record.status} {record.status_text}".strip()
        timing = f"{record.duration_ms:.0f} ms"
        if self._no_color:
            print(f"{status} ({timing})", file=sys.stderr, flush=True)
        else:
            colour = "green" if record.ok else ("red" if record.is_network_error else "yellow")
            self._stderr.print(
                f"[bold {colour}]{escape(status)}[/bold {colour}] [dim]({timing})[/dim]",
                highlight=False,
            )

        if self._verbose:
            for name, value in record.headers.items():
                self._diag(f"{name}: {value}", style="dim")

        if record.note:
            self.warning(record.note)

        if not record.body:
            return
        if self._format == OutputFormat.RICH and _looks_like_json(record.body):
            self._stdout.print(Syntax(record.body, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(record.body)

    def print_issues(self, issues: list[ValidationIssue]) -> None:
        """Print validation issues. JSON mode writes them to stdout; else stderr."""
        if self._format == OutputFormat.JSON:
            self.print_data(
                json.dumps([i.model_dump(mode="json") for i in issues], indent=2)
            )
            return
        for issue in issues:
            where = f"line {issue.line}: " if issue.line is not None else ""
            if issue.severity == Severity.ERROR:
                self.error(f"{where}{issue.message}")
            else:
                self.warning(f"{where}{issue.message}")

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diag(message)

    def success(self, message: str) -> None:
        """Print a green success message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diag(message, style="green")

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr. NOT suppressed by ``--quiet``."""
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {escape(message)}", highlight=False)

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False)

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown with ``--verbose``."""
        if self._verbose:
            self._diag(f"[debug] {message}", style="dim")

    def _diag(self, message: str, style: Optional[str] = None) -> None:
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(message, style=style, markup=False, highlight=False)


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


def _looks_like_json(text: str) -> bool:
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_json(data: Any) -> None:
    get_output().print_json(data)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def debug(message: str) -> None:
    get_output().debug(message)
