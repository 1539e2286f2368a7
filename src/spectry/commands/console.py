"""Console commands -- synthesize example bodies and try operations.

``spectry example`` prints the request body the console would pre-fill for
an operation. ``spectry request`` drives a full
:class:`~spectry.session.ConsoleSession` round trip: load the spec, select
the operation, bind parameters from the command line, build the request,
and either preview it as ``curl`` (``--dry-run``) or send it.

Status line and timing go to stderr; the response body goes to stdout so it
can be piped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from spectry.client import RequestExecutor, to_curl
from spectry.commands._common import (
    exit_on_error,
    get_config,
    load_document,
    parse_pairs,
    read_source,
)
from spectry.exceptions import InvalidUsageError
from spectry.exit_codes import EXIT_NETWORK_ERROR
from spectry.generator import example_body
from spectry.models import ParameterLocation
from spectry.output import debug, get_output, info
from spectry.session import ConsoleSession

_SOURCE_HELP = "Spec file path, URL, or '-' for stdin."


def example_command(
    ctx: typer.Context,
    source: str = typer.Argument(help=_SOURCE_HELP),
    path: str = typer.Argument(help="Path template, e.g. /pet."),
    method: str = typer.Argument(help="HTTP method."),
) -> None:
    """Print the example request body synthesized for an operation.

    Example::

        spectry example openapi.yaml /pet post
    """
    with exit_on_error():
        doc = load_document(ctx, source)
        body = example_body(doc.operation(path, method), doc)

    if body is None:
        info(f"{method.upper()} {path} declares no request body.")
        return
    get_output().print_source(body, "json")


def request_command(
    ctx: typer.Context,
    source: str = typer.Argument(help=_SOURCE_HELP),
    method: str = typer.Argument(help="HTTP method."),
    path: str = typer.Argument(help="Path template, e.g. /pet/{petId}."),
    server: Optional[str] = typer.Option(
        None, "--server", "-s", help="Server base URL (defaults to the spec's first server)."
    ),
    path_values: Optional[list[str]] = typer.Option(
        None, "--path", "-P", help="Path parameter as name=value (repeatable)."
    ),
    query_values: Optional[list[str]] = typer.Option(
        None, "--query", "-Q", help="Query parameter as name=value (repeatable)."
    ),
    header_values: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Header as name=value (repeatable)."
    ),
    cookie_values: Optional[list[str]] = typer.Option(
        None, "--cookie", "-C", help="Cookie as name=value (repeatable)."
    ),
    body: Optional[str] = typer.Option(None, "--body", "-b", help="Request body text."),
    body_file: Optional[Path] = typer.Option(
        None,
        "--body-file",
        exists=True,
        dir_okay=False,
        readable=True,
        help="Read the request body from a file.",
    ),
    no_example: bool = typer.Option(
        False, "--no-example", help="Do not pre-fill the body with a synthesized example."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the request as curl instead of sending it."
    ),
) -> None:
    """Send a request for one operation and print the response.

    Parameters declared with an example or default are pre-bound; command
    line values override them. For POST, PUT and PATCH the body starts as
    the synthesized example unless ``--body``, ``--body-file`` or
    ``--no-example`` is given.

    Exits with code 6 when the request could not be delivered.

    Example::

        spectry request openapi.yaml get /pet/{petId} --path petId=10
        spectry request openapi.yaml post /pet --dry-run
    """
    config = get_config(ctx)
    session = ConsoleSession(default_server=server or config.default_server)

    with exit_on_error():
        if body is not None and body_file is not None:
            raise InvalidUsageError("Use either --body or --body-file, not both")

        session.load_spec(source, read_source(ctx, source))
        session.select_operation(path, method)

        bindings = (
            (ParameterLocation.PATH, parse_pairs(path_values, "--path")),
            (ParameterLocation.QUERY, parse_pairs(query_values, "--query")),
            (ParameterLocation.HEADER, parse_pairs(header_values, "--header")),
            (ParameterLocation.COOKIE, parse_pairs(cookie_values, "--cookie")),
        )
        for location, pairs in bindings:
            for name, value in pairs:
                session.set_parameter(location, name, value)

        if body_file is not None:
            session.set_body(body_file.read_text(encoding="utf-8"))
        elif body is not None:
            session.set_body(body)
        elif no_example:
            session.set_body("")

        request = session.build_request()

    if dry_run:
        get_output().print_source(to_curl(request), "bash")
        return

    debug(f"{request.method} {request.url}")
    with exit_on_error(), RequestExecutor(config.request) as executor:
        record = session.execute(executor)

    get_output().print_response(record)
    if record.is_network_error:
        raise typer.Exit(code=EXIT_NETWORK_ERROR)
