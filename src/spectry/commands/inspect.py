"""Inspect commands -- examine what a spec declares.

Provides the ``spectry inspect`` sub-command group with read-only views of a
loaded document: general info, servers, operations, component schemas, and
the full extracted shape of a single operation. Each sub-command takes the
spec source (file, URL, or ``-``) as its first argument.
"""

from __future__ import annotations

from collections.abc import Mapping

import typer

from spectry.commands._common import exit_on_error, load_document
from spectry.output import OutputFormat, get_output, info

inspect_app = typer.Typer(no_args_is_help=True)

_SOURCE_HELP = "Spec file path, URL, or '-' for stdin."


@inspect_app.command("info")
def inspect_info(
    ctx: typer.Context,
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """Show API info (title, version, spec version, counts).

    Example::

        spectry inspect info openapi.yaml
        spectry --json inspect info openapi.yaml
    """
    with exit_on_error():
        doc = load_document(ctx, source)

    data = {
        "title": doc.title or "",
        "version": str(doc.info.get("version", "")),
        "spec_version": f"{doc.version_field} {doc.version}",
        "description": str(doc.info.get("description", "") or ""),
        "servers": [s.url for s in doc.servers()],
        "operations": len(doc.operations()),
        "schemas": len(doc.schemas()),
    }

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json(data)
        return

    rows = [
        [key.replace("_", " ").title(), ", ".join(v) if isinstance(v, list) else str(v)]
        for key, v in data.items()
    ]
    output.print_table(["Field", "Value"], rows, title=doc.title or "API")


@inspect_app.command("servers")
def inspect_servers(
    ctx: typer.Context,
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """List the servers a request can target.

    When the document declares none, the placeholder server is listed.
    """
    with exit_on_error():
        doc = load_document(ctx, source)

    rows = [[s.url, s.description or "-"] for s in doc.servers()]
    get_output().print_table(["URL", "Description"], rows, title="Servers")


@inspect_app.command("paths")
def inspect_paths(
    ctx: typer.Context,
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """List every operation in declaration order.

    Example::

        spectry inspect paths openapi.yaml
    """
    with exit_on_error():
        doc = load_document(ctx, source)
        operations = doc.operations()

    rows: list[list[str]] = []
    for op in operations:
        rows.append([
            op.method.value.upper(),
            op.path,
            op.summary or "-",
            "Yes" if op.deprecated else "",
        ])

    get_output().print_table(
        ["Method", "Path", "Summary", "Deprecated"],
        rows,
        title=f"{doc.title or 'API'} -- Paths ({len(rows)})",
    )


@inspect_app.command("schemas")
def inspect_schemas(
    ctx: typer.Context,
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """List ``components.schemas`` entries with their type and first properties."""
    with exit_on_error():
        doc = load_document(ctx, source)

    schemas = doc.schemas()
    if not schemas:
        info("No schemas defined in this spec.")
        return

    rows: list[list[str]] = []
    for name, schema in schemas.items():
        if isinstance(schema, Mapping):
            schema_type = str(schema.get("type", "object"))
            props = schema.get("properties")
            prop_names = list(props) if isinstance(props, Mapping) else []
        else:
            schema_type, prop_names = "unknown", []
        summary = ", ".join(prop_names[:5])
        if len(prop_names) > 5:
            summary += "..."
        rows.append([name, schema_type, summary])

    get_output().print_table(["Schema", "Type", "Properties"], rows, title=f"Schemas ({len(rows)})")


@inspect_app.command("operation")
def inspect_operation(
    ctx: typer.Context,
    source: str = typer.Argument(help=_SOURCE_HELP),
    path: str = typer.Argument(help="Path template, e.g. /pet/{petId}."),
    method: str = typer.Argument(help="HTTP method."),
) -> None:
    """Show the parameters, request body and responses of one operation.

    Example::

        spectry inspect operation openapi.yaml /pet/{petId} get
    """
    with exit_on_error():
        doc = load_document(ctx, source)
        operation = doc.operation(path, method)

    get_output().print_json(operation.model_dump(mode="json", by_alias=True, exclude_none=True))
