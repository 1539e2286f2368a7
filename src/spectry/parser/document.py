"""Immutable in-memory representation of a parsed OpenAPI/Swagger document.

A :class:`SpecDocument` is produced only by
:func:`~spectry.parser.loader.parse`. Its tree is deep-frozen on
construction: mappings become read-only :class:`types.MappingProxyType`
views and sequences become tuples, so nothing downstream can edit a loaded
document in place. Editing the spec means parsing new text into a new
document.

Callers reach into the tree through accessors that either return the
expected shape or raise a typed :class:`~spectry.exceptions.DocumentError`;
``None`` never stands in for a missing operation or schema.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional

from spectry.exceptions import DocumentError, OperationNotFoundError, UnknownReferenceError
from spectry.models import HTTPMethod, Operation, ServerInfo, ValidationIssue

DEFAULT_SERVER_URL = "https://api.example.com"
"""Placeholder server offered when a document declares none."""


def freeze(value: Any) -> Any:
    """Return a deep read-only copy of a JSON-like value."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Return a deep mutable copy (dicts and lists) of a frozen value."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


class SpecDocument:
    """A parsed specification rooted at an ``openapi`` or ``swagger`` marker.

    Args:
        data: The root mapping, as produced by the JSON/YAML parser.
        raw_text: The exact text the document was parsed from.
        warnings: Non-fatal validation issues found while parsing.
    """

    __slots__ = ("_data", "_raw_text", "_warnings", "_operations")

    def __init__(
        self,
        data: Mapping[str, Any],
        raw_text: str = "",
        warnings: tuple[ValidationIssue, ...] = (),
    ) -> None:
        self._data: Mapping[str, Any] = freeze(data)
        self._raw_text = raw_text
        self._warnings = tuple(warnings)
        self._operations: Optional[tuple[Operation, ...]] = None

    def __repr__(self) -> str:
        return f"SpecDocument({self.version_field}={self.version!r}, title={self.title!r})"

    # ------------------------------------------------------------------ #
    # Raw access
    # ------------------------------------------------------------------ #

    @property
    def raw(self) -> Mapping[str, Any]:
        """The frozen root mapping."""
        return self._data

    @property
    def raw_text(self) -> str:
        """The source text, byte-identical to what was parsed."""
        return self._raw_text

    @property
    def warnings(self) -> tuple[ValidationIssue, ...]:
        return self._warnings

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the whole document."""
        return thaw(self._data)

    # ------------------------------------------------------------------ #
    # Version / info
    # ------------------------------------------------------------------ #

    @property
    def version_field(self) -> str:
        """Either ``"openapi"`` or ``"swagger"``."""
        return "openapi" if "openapi" in self._data else "swagger"

    @property
    def version(self) -> str:
        """The version marker's value, as text."""
        return str(self._data[self.version_field])

    @property
    def is_swagger(self) -> bool:
        return self.version_field == "swagger"

    @property
    def info(self) -> Mapping[str, Any]:
        info = self._data.get("info")
        return info if isinstance(info, Mapping) else MappingProxyType({})

    @property
    def title(self) -> Optional[str]:
        title = self.info.get("title")
        return str(title) if title else None

    # ------------------------------------------------------------------ #
    # Servers
    # ------------------------------------------------------------------ #

    def servers(self) -> list[ServerInfo]:
        """Return the servers a request can target, never empty.

        ``servers`` entries are used as declared. A Swagger 2 document
        without them gets one server per declared scheme built from
        ``host`` and ``basePath``. When neither exists the placeholder
        :data:`DEFAULT_SERVER_URL` is offered.
        """
        declared = self._data.get("servers")
        if isinstance(declared, tuple) and declared:
            return [
                ServerInfo(url=str(s.get("url", "/")), description=s.get("description"))
                for s in declared
                if isinstance(s, Mapping)
            ]

        host = self._data.get("host")
        if self.is_swagger and host:
            base_path = str(self._data.get("basePath", "") or "")
            schemes = self._data.get("schemes") or ("https",)
            return [ServerInfo(url=f"{scheme}://{host}{base_path}") for scheme in schemes]

        return [ServerInfo(url=DEFAULT_SERVER_URL)]

    # ------------------------------------------------------------------ #
    # Paths / operations
    # ------------------------------------------------------------------ #

    def paths(self) -> Mapping[str, Any]:
        paths = self._data.get("paths")
        return paths if isinstance(paths, Mapping) else MappingProxyType({})

    def operations(self) -> tuple[Operation, ...]:
        """Every operation in the document, in path then method declaration order."""
        if self._operations is None:
            from spectry.parser.extractor import extract_operations

            self._operations = tuple(extract_operations(self))
        return self._operations

    def methods(self, path: str) -> list[HTTPMethod]:
        """Methods declared on *path*, in declaration order."""
        return [op.method for op in self.operations() if op.path == path]

    def operation(self, path: str, method: str | HTTPMethod) -> Operation:
        """Look up the operation for ``(path, method)``.

        Raises:
            OperationNotFoundError: If the path or method is not declared.
        """
        wanted = method.value if isinstance(method, HTTPMethod) else method.lower()
        for op in self.operations():
            if op.path == path and op.method.value == wanted:
                return op
        raise OperationNotFoundError(path, wanted)

    # ------------------------------------------------------------------ #
    # Components
    # ------------------------------------------------------------------ #

    def components(self, section: str) -> Mapping[str, Any]:
        """Return ``components.<section>``, or an empty mapping when absent."""
        components = self._data.get("components")
        if not isinstance(components, Mapping):
            return MappingProxyType({})
        found = components.get(section)
        return found if isinstance(found, Mapping) else MappingProxyType({})

    def schemas(self) -> Mapping[str, Any]:
        return self.components("schemas")

    def schema(self, name: str) -> Mapping[str, Any]:
        """Return ``components.schemas[name]``.

        Raises:
            UnknownReferenceError: If no schema of that name is declared.
            DocumentError: If the entry exists but is not a mapping.
        """
        schemas = self.schemas()
        if name not in schemas:
            raise UnknownReferenceError(name)
        found = schemas[name]
        if not isinstance(found, Mapping):
            raise DocumentError(f"Schema '{name}' is not an object")
        return found
