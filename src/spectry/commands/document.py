"""Document commands -- validate, format, and export spec text.

These mirror the editor actions of the console: checking the text for
problems, re-emitting it as tidy YAML, and saving it as ``openapi.yaml``.
"""

from __future__ import annotations

from pathlib import Path

import typer

from spectry.commands._common import exit_on_error, read_source
from spectry.exit_codes import EXIT_SPEC_PARSE_ERROR
from spectry.output import get_output, success
from spectry.parser import export_spec, format_spec_text, validate_text


def validate_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Spec file path, URL, or '-' for stdin."),
) -> None:
    """Check a spec and list every error and warning.

    Exits with code 7 when the text cannot be parsed as a specification.
    Warnings alone do not fail the command.

    Example::

        spectry validate openapi.yaml
        spectry --json validate https://petstore3.swagger.io/api/v3/openapi.json
    """
    with exit_on_error():
        text = read_source(ctx, source)

    result = validate_text(text)
    output = get_output()
    output.print_issues(result.issues)

    if not result.is_valid:
        raise typer.Exit(code=EXIT_SPEC_PARSE_ERROR)

    if result.document is not None:
        doc = result.document
        label = "Swagger" if doc.is_swagger else "OpenAPI"
        title = doc.title or "untitled"
        if result.warnings:
            success(
                f"{label} {doc.version} document '{title}' parsed with "
                f"{len(result.warnings)} warning(s)"
            )
        else:
            success(f"{label} {doc.version} document '{title}' is valid")


def format_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Spec file path, URL, or '-' for stdin."),
) -> None:
    """Print the spec re-formatted as YAML (2-space indent, 120 columns).

    Example::

        spectry format openapi.json > openapi.yaml
    """
    with exit_on_error():
        text = format_spec_text(read_source(ctx, source))
    get_output().print_source(text.rstrip("\n"), "yaml")


def export_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Spec file path, URL, or '-' for stdin."),
    directory: Path = typer.Option(
        Path("."), "--dir", "-d", help="Directory to write openapi.yaml into."
    ),
) -> None:
    """Save the spec text unchanged as ``openapi.yaml``.

    Example::

        spectry export https://example.com/openapi.json --dir ./specs
    """
    with exit_on_error():
        target = export_spec(read_source(ctx, source), directory)
    success(f"Wrote {target}")
