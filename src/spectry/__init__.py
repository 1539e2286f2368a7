"""spectry -- Validate OpenAPI/Swagger documents and try their operations.

This package is the core of an API "try it" console: it parses a
specification, synthesizes example request bodies from its schemas, builds
concrete HTTP requests from a user's draft, and sends them, normalising
every outcome (including network failures) into one response record.

Typical workflow::

    spectry validate openapi.yaml
    spectry example openapi.yaml /pet post
    spectry request openapi.yaml get /pet/{petId} --path petId=10

Modules:
    app: Typer application and CLI entry point.
    session: Console state -- loaded specs, draft, last response.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration management.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric process exit codes.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
