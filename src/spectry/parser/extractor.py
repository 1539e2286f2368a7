"""Extract operations, parameters, request bodies and responses from a document.

This module walks a :class:`~spectry.parser.document.SpecDocument` and builds
the read-only :class:`~spectry.models.Operation` views the console works
with. Schemas are copied as declared: a ``{"$ref": ...}`` schema stays a
reference here and is resolved lazily by
:mod:`~spectry.parser.resolver` when the synthesizer descends into it.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.

Swagger 2 documents are read in the same pass. An ``in: body`` parameter
becomes the request body, ``formData`` parameters are skipped, and a
parameter declaring ``type`` directly gets an equivalent inline schema.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError

from spectry.exceptions import DocumentError, UnsupportedReferenceError
from spectry.models import (
    HTTPMethod,
    MediaTypeInfo,
    Operation,
    Parameter,
    ParameterLocation,
    RequestBodyInfo,
    ResponseInfo,
)
from spectry.parser.document import thaw

if TYPE_CHECKING:
    from spectry.parser.document import SpecDocument

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)
_LOCATIONS = frozenset(loc.value for loc in ParameterLocation)
_COMPONENT_REF = re.compile(r"^#/components/(?P<section>[^/]+)/(?P<name>[^/]+)$")

# Swagger 2 keywords that move into an inline schema.
_SWAGGER_SCHEMA_KEYS = (
    "type",
    "format",
    "enum",
    "items",
    "default",
    "minimum",
    "maximum",
    "minLength",
    "maxLength",
    "pattern",
)


def extract_operations(document: SpecDocument) -> list[Operation]:
    """Extract every operation declared under ``paths``.

    Args:
        document: The parsed document.

    Returns:
        Operations in path declaration order, then method declaration order.

    Raises:
        UnsupportedReferenceError: If a parameter uses a ``$ref`` other than
            ``#/components/parameters/<Name>``.
        DocumentError: If a parameter reference points nowhere, or an
            operation field has a shape no model accepts.
    """
    operations: list[Operation] = []

    for path, path_item in document.paths().items():
        if not isinstance(path_item, Mapping):
            continue

        path_params = path_item.get("parameters", ())

        for method_str, operation in path_item.items():
            if method_str.lower() not in _HTTP_METHODS or not isinstance(operation, Mapping):
                continue

            try:
                merged = _merge_parameters(document, path_params, operation.get("parameters", ()))
                parameters = [
                    _extract_parameter(p)
                    for p in merged
                    if p.get("in") in _LOCATIONS and p.get("name")
                ]

                request_body = _extract_request_body(document, operation.get("requestBody"))
                if request_body is None:
                    request_body = _swagger_body(merged, operation)

                operations.append(
                    Operation(
                        path=path,
                        method=HTTPMethod(method_str.lower()),
                        operation_id=_text(operation.get("operationId")),
                        summary=_text(operation.get("summary")),
                        description=_text(operation.get("description")),
                        tags=_tags(operation.get("tags")),
                        parameters=parameters,
                        request_body=request_body,
                        responses=_extract_responses(operation.get("responses")),
                        deprecated=bool(operation.get("deprecated", False)),
                    )
                )
            except ValidationError as exc:
                raise DocumentError(
                    f"Invalid operation {method_str.upper()} {path}: {exc}"
                ) from exc

    return operations


def _text(value: Any) -> Optional[str]:
    """Scalar spec field as text; YAML may hand back numbers or dates."""
    return None if value is None else str(value)


def _tags(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(tag) for tag in value if tag is not None]


def _component(document: SpecDocument, ref: str, section: str) -> Mapping[str, Any]:
    """Follow ``#/components/<section>/<Name>`` for non-schema objects."""
    match = _COMPONENT_REF.match(ref)
    if match is None or match.group("section") != section:
        raise UnsupportedReferenceError(ref)
    name = match.group("name").replace("~1", "/").replace("~0", "~")
    target = document.components(section).get(name)
    if not isinstance(target, Mapping):
        raise DocumentError(f"Cannot resolve $ref '{ref}': '{name}' not found in components.{section}")
    return target


def _merge_parameters(
    document: SpecDocument,
    path_params: Any,
    op_params: Any,
) -> list[Mapping[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level ones that share the same
    ``(name, in)`` key. Parameter references are followed first.
    """
    merged: dict[tuple[str, str], Mapping[str, Any]] = {}
    for source in (path_params or (), op_params or ()):
        for param in source:
            if not isinstance(param, Mapping):
                continue
            if "$ref" in param:
                param = _component(document, str(param["$ref"]), "parameters")
            key = (str(param.get("name", "")), str(param.get("in", "")))
            merged[key] = param
    return list(merged.values())


def _extract_parameter(param: Mapping[str, Any]) -> Parameter:
    schema = param.get("schema")
    if isinstance(schema, Mapping):
        schema_dict = thaw(schema)
    else:
        schema_dict = {k: thaw(param[k]) for k in _SWAGGER_SCHEMA_KEYS if k in param}

    location = ParameterLocation(param["in"])
    return Parameter(
        name=str(param["name"]),
        location=location,
        # Path parameters are always required per the OpenAPI spec.
        required=bool(param.get("required", False)) or location == ParameterLocation.PATH,
        description=_text(param.get("description")),
        deprecated=bool(param.get("deprecated", False)),
        schema=schema_dict,
        example=thaw(param.get("example")),
    )


def _extract_request_body(document: SpecDocument, body: Any) -> Optional[RequestBodyInfo]:
    if not isinstance(body, Mapping):
        return None
    if "$ref" in body:
        body = _component(document, str(body["$ref"]), "requestBodies")

    content: dict[str, MediaTypeInfo] = {}
    for media_type, media in (body.get("content") or {}).items():
        if not isinstance(media, Mapping):
            continue
        schema = media.get("schema")
        content[media_type] = MediaTypeInfo(
            schema=thaw(schema) if isinstance(schema, Mapping) else None,
            example=thaw(media.get("example")),
        )

    return RequestBodyInfo(
        required=bool(body.get("required", False)),
        description=_text(body.get("description")),
        content=content,
    )


def _swagger_body(params: list[Mapping[str, Any]], operation: Mapping[str, Any]) -> Optional[RequestBodyInfo]:
    """Build a request body from a Swagger 2 ``in: body`` parameter."""
    for param in params:
        if param.get("in") != "body":
            continue
        schema = param.get("schema")
        consumes = operation.get("consumes") or ("application/json",)
        return RequestBodyInfo(
            required=bool(param.get("required", False)),
            description=_text(param.get("description")),
            content={
                str(media_type): MediaTypeInfo(
                    schema=thaw(schema) if isinstance(schema, Mapping) else None
                )
                for media_type in consumes
            },
        )
    return None


def _extract_responses(responses: Any) -> list[ResponseInfo]:
    if not isinstance(responses, Mapping):
        return []

    result: list[ResponseInfo] = []
    for status_code, response in responses.items():
        if not isinstance(response, Mapping):
            continue
        content = response.get("content") or {}
        content_types = list(content.keys())
        schema = None
        for media in content.values():
            if isinstance(media, Mapping) and isinstance(media.get("schema"), Mapping):
                schema = thaw(media["schema"])
                break
        if schema is None and isinstance(response.get("schema"), Mapping):
            schema = thaw(response["schema"])

        result.append(
            ResponseInfo(
                status_code=str(status_code),
                description=_text(response.get("description")),
                content_types=content_types,
                schema=schema,
            )
        )
    return result
