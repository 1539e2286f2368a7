"""OpenAPI spec parser -- parse text, expose operations, resolve ``$ref`` pointers.

This sub-package turns raw specification text (JSON or YAML) into an
immutable :class:`~spectry.parser.document.SpecDocument` that the rest of
spectry reads from.

Typical usage::

    from spectry.parser import load_text, parse

    document = parse(load_text("https://petstore3.swagger.io/api/v3/openapi.json"))
    operation = document.operation("/pet/{petId}", "get")

Sub-modules:

* :mod:`~spectry.parser.loader` -- parsing, validation, retrieval, export.
* :mod:`~spectry.parser.document` -- the frozen document and its accessors.
* :mod:`~spectry.parser.extractor` -- builds
  :class:`~spectry.models.Operation` views from ``paths``.
* :mod:`~spectry.parser.resolver` -- single-level ``$ref`` resolution.
"""

from spectry.parser.document import SpecDocument
from spectry.parser.loader import (
    ValidationResult,
    export_spec,
    format_spec_text,
    load_text,
    parse,
    validate_text,
)
from spectry.parser.resolver import resolve

__all__ = [
    "SpecDocument",
    "ValidationResult",
    "export_spec",
    "format_spec_text",
    "load_text",
    "parse",
    "resolve",
    "validate_text",
]
