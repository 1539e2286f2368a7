"""Synthesize placeholder example values from schema fragments.

:func:`synthesize` produces a deterministic, schema-shaped value that serves
as a starting request body. It is not a fuzzer: leaf values come from a
small fixed table rather than from the schema's constraints.

Precedence (first match wins):

1. An explicit ``example`` is returned verbatim.
2. A ``$ref`` is resolved via :func:`~spectry.parser.resolver.resolve` and
   the target is synthesized instead.
3. An object with ``properties`` becomes a dict with one entry per property,
   in declaration order, each synthesized with the same rules.
4. Anything else falls to the leaf rules in :func:`_leaf_value`. At the top
   level an unrecognised schema becomes ``{}``; below it, ``None``.

Recursion is capped at :data:`MAX_DEPTH` levels so that self-referential
schemas (``Node.children -> Node``) terminate.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from spectry.parser.document import thaw
from spectry.parser.resolver import resolve

if TYPE_CHECKING:
    from spectry.models import Operation
    from spectry.parser.document import SpecDocument

MAX_DEPTH = 16
"""Maximum number of property levels and reference hops expanded on one branch."""

EXAMPLE_EMAIL = "user@example.com"
EXAMPLE_UUID = "3fa85f64-5717-4562-b3fc-2c963f66afa6"
EXAMPLE_URI = "https://example.com"
EXAMPLE_TEXT = "sample text"

_LEAF_TYPES = frozenset({"string", "number", "integer", "boolean", "array", "object"})


def synthesize(schema: Mapping[str, Any], document: SpecDocument) -> Any:
    """Return a representative example value for *schema*.

    Args:
        schema: A schema fragment, possibly a ``{"$ref": ...}`` mapping.
        document: The document that ``$ref`` pointers are resolved against.

    Returns:
        A JSON-compatible value (dict, list, str, int, float, bool or None).

    Raises:
        UnknownReferenceError: If a reference anywhere in the expanded tree
            names an undeclared schema. Synthesis fails as a whole rather
            than leaving a ``None`` hole.
        UnsupportedReferenceError: If a reference has an unsupported shape.

    Example::

        synthesize({"type": "object", "properties": {
            "name": {"type": "string"},
            "id": {"type": "integer", "example": 10},
        }}, document)
        # {"name": "string", "id": 10}
    """
    return _synthesize(schema, document, depth=0, nested=False)


def _synthesize(schema: Any, document: SpecDocument, depth: int, nested: bool) -> Any:
    # depth counts every reference hop and property level; nested is False
    # until the first property descent.
    if not isinstance(schema, Mapping):
        return None if nested else {}

    if "example" in schema:
        return thaw(schema["example"])

    if "$ref" in schema:
        if depth >= MAX_DEPTH:
            return None
        return _synthesize(resolve(schema, document), document, depth + 1, nested)

    if _is_object_with_properties(schema):
        if depth >= MAX_DEPTH:
            return None
        return {
            name: _synthesize(prop, document, depth + 1, nested=True)
            for name, prop in schema["properties"].items()
        }

    if not nested and schema.get("type") not in _LEAF_TYPES:
        return {}
    return _leaf_value(schema)


def _is_object_with_properties(schema: Mapping[str, Any]) -> bool:
    if not isinstance(schema.get("properties"), Mapping):
        return False
    return schema.get("type", "object") == "object"


def _leaf_value(schema: Mapping[str, Any]) -> Any:
    """Placeholder for a schema without example or expandable properties."""
    schema_type = schema.get("type")
    enum = schema.get("enum")
    has_enum = isinstance(enum, (list, tuple)) and len(enum) > 0

    if schema_type == "string":
        fmt = schema.get("format")
        if fmt == "email":
            return EXAMPLE_EMAIL
        if fmt == "uuid":
            return EXAMPLE_UUID
        if fmt == "date-time":
            return _now_iso()
        if fmt == "uri":
            return EXAMPLE_URI
        if has_enum:
            return thaw(enum[0])
        if "minLength" in schema:
            return EXAMPLE_TEXT
        return "string"

    if schema_type in ("number", "integer"):
        if has_enum:
            return thaw(enum[0])
        if "minimum" in schema:
            return schema["minimum"]
        return 1 if schema_type == "integer" else 1.0

    if schema_type == "boolean":
        return True
    if schema_type == "array":
        return []
    if schema_type == "object":
        return {}
    return None


def _now_iso() -> str:
    """Current UTC time as ``2024-01-31T12:00:00.000Z``."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ------------------------------------------------------------------ #
# Request bodies
# ------------------------------------------------------------------ #


def _pick_media_type(content_types: list[str]) -> Optional[str]:
    """Prefer a JSON media type, else the first declared one."""
    for media_type in content_types:
        if media_type.split(";")[0].strip().endswith("json"):
            return media_type
    return content_types[0] if content_types else None


def example_body(operation: Operation, document: SpecDocument) -> Optional[str]:
    """Return a starting request body for *operation* as indented JSON text.

    The JSON media type of the request body is preferred. A media-level
    ``example`` wins over the schema; otherwise the schema is synthesized.

    Returns:
        2-space indented JSON, or ``None`` when the operation declares no
        request body (or no schema for it).

    Raises:
        ResolutionError: If the body schema references a missing schema.
    """
    body = operation.request_body
    if body is None:
        return None
    media_type = _pick_media_type(body.content_types)
    if media_type is None:
        return None

    media = body.content[media_type]
    if media.example is not None:
        value = media.example
    elif media.schema_ is not None:
        value = synthesize(media.schema_, document)
    else:
        return None
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)
