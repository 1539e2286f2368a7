"""Resolve ``$ref`` schema pointers against a parsed document.

Only local component references of the form
``#/components/schemas/<Name>`` are supported. Any other pointer (arbitrary
JSON Pointer targets, other component sections, external files or URLs)
raises :class:`~spectry.exceptions.UnsupportedReferenceError` instead of
quietly producing an empty schema.

Resolution is single-level: the schema returned by :func:`resolve` may
itself contain ``$ref`` pointers inside ``properties`` or ``items``. Those
are resolved by the caller when it descends, which keeps cyclic schemas
finite here.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from spectry.exceptions import DocumentError, UnsupportedReferenceError
from spectry.parser.document import SpecDocument

logger = logging.getLogger(__name__)

_SCHEMA_REF = re.compile(r"^#/components/schemas/(?P<name>[^/]+)$")


def is_ref(schema: Any) -> bool:
    """Return ``True`` if *schema* is a mapping carrying a ``$ref`` key."""
    return isinstance(schema, Mapping) and "$ref" in schema


def ref_name(ref: str) -> str:
    """Return the schema name a ``#/components/schemas/<Name>`` pointer names.

    JSON Pointer escapes (``~1`` for ``/``, ``~0`` for ``~``) are decoded.

    Raises:
        UnsupportedReferenceError: If *ref* has any other shape.
    """
    match = _SCHEMA_REF.match(ref)
    if match is None:
        raise UnsupportedReferenceError(ref)
    return match.group("name").replace("~1", "/").replace("~0", "~")


def resolve(schema: Mapping[str, Any], document: SpecDocument) -> Mapping[str, Any]:
    """Return the concrete schema *schema* stands for.

    A schema without ``$ref`` is returned unchanged (the very same object),
    so resolving twice is the same as resolving once.

    Args:
        schema: An inline schema or a ``{"$ref": ...}`` mapping.
        document: The document whose ``components.schemas`` holds targets.

    Returns:
        The referenced schema, or *schema* itself.

    Raises:
        UnknownReferenceError: If the named schema is not declared.
        UnsupportedReferenceError: If the pointer is not a local schema
            component reference.
        DocumentError: If *schema* is not a mapping.
    """
    if not isinstance(schema, Mapping):
        raise DocumentError(f"Schema must be an object, got {type(schema).__name__}")
    if "$ref" not in schema:
        return schema

    ref = schema["$ref"]
    if not isinstance(ref, str):
        raise UnsupportedReferenceError(repr(ref))

    name = ref_name(ref)
    logger.debug("resolving $ref %s", ref)
    return document.schema(name)
