"""Canonical Pydantic models shared across all spectry modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`UIConfig`, :class:`RequestConfig`, :class:`OutputConfig`, and
    :class:`GlobalConfig`.

**Document models** -- read-only views derived from a parsed
:class:`~spectry.parser.document.SpecDocument`:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`Parameter`,
    :class:`MediaTypeInfo`, :class:`RequestBodyInfo`, :class:`ResponseInfo`,
    :class:`Operation`, :class:`ServerInfo`, and :class:`ValidationIssue`.

**Console models** -- the request/response cycle driven by
:class:`~spectry.session.ConsoleSession`:
    :class:`ParameterBinding`, :class:`RequestDraft`, :class:`HttpRequest`,
    and :class:`ResponseRecord`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Config ---


class UIConfig(BaseModel):
    """Presentation preferences persisted between sessions.

    None of these values are read by the parsing, synthesis, building or
    execution code. The presentation layer loads them when a session starts
    and saves them when it ends.
    """

    theme: str = Field(default="system", description="Colour theme: light, dark, system")
    menu_visible: bool = Field(default=True, description="Show the navigation menu")
    editor_visible: bool = Field(default=True, description="Show the spec editor pane")
    onboarding_completed: bool = Field(
        default=False, description="Whether the onboarding walkthrough was dismissed"
    )


class RequestConfig(BaseModel):
    """HTTP settings applied to every request the console executes."""

    timeout: Optional[float] = Field(
        default=None,
        description="Request timeout in seconds; null keeps the HTTP client default",
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/spectry/config.json``.

    Loaded and saved by :func:`~spectry.config.load_global_config` and
    :func:`~spectry.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~spectry.config.resolve_config`
    for the full precedence chain.
    """

    default_server: Optional[str] = Field(
        default=None, description="Server URL preferred over the spec's first server"
    )
    ui: UIConfig = Field(default_factory=UIConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Document Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised on OpenAPI path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


BODY_METHODS = frozenset({HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH})
"""Methods that carry the draft's body text on the wire."""


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class Severity(str, enum.Enum):
    """How serious a :class:`ValidationIssue` is."""

    ERROR = "error"
    WARNING = "warning"


class ValidationIssue(BaseModel):
    """One problem found while parsing or validating spec text."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str
    line: Optional[int] = Field(default=None, description="1-based source line, if known")


class Parameter(BaseModel):
    """A parameter declared on an :class:`Operation` (OpenAPI *Parameter Object*)."""

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    deprecated: bool = False
    schema_: dict[str, Any] = Field(default_factory=dict, alias="schema")
    example: Any = None

    model_config = {"populate_by_name": True}


class MediaTypeInfo(BaseModel):
    """Schema and optional example for one content type of a request body."""

    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    example: Any = None

    model_config = {"populate_by_name": True}


class RequestBodyInfo(BaseModel):
    """Request body declaration, keyed by content type."""

    required: bool = False
    description: Optional[str] = None
    content: dict[str, MediaTypeInfo] = Field(default_factory=dict)

    @property
    def content_types(self) -> list[str]:
        """Declared content types in document order."""
        return list(self.content)


class ResponseInfo(BaseModel):
    """Declared response for a single status code."""

    status_code: str
    description: Optional[str] = None
    content_types: list[str] = Field(default_factory=list)
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")

    model_config = {"populate_by_name": True}


class Operation(BaseModel):
    """One HTTP method on one path template, identified by ``(path, method)``."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBodyInfo] = None
    responses: list[ResponseInfo] = Field(default_factory=list)
    deprecated: bool = False

    @property
    def accepts_body(self) -> bool:
        """Whether a body would be sent for this operation's method."""
        return self.method in BODY_METHODS


class ServerInfo(BaseModel):
    """A server entry a request can be sent to."""

    url: str
    description: Optional[str] = None


# --- Console Models ---


class ParameterBinding(BaseModel):
    """A user-supplied value for one parameter of the draft request."""

    name: str = ""
    value: str = ""
    location: ParameterLocation = ParameterLocation.QUERY

    @property
    def is_bound(self) -> bool:
        """A binding counts only when both its name and value are non-empty."""
        return bool(self.name) and bool(self.value)


class RequestDraft(BaseModel):
    """The in-progress request a user is editing before executing it."""

    server: str
    path: str
    method: HTTPMethod
    parameters: list[ParameterBinding] = Field(default_factory=list)
    body: str = ""

    def bindings(self, location: ParameterLocation) -> list[ParameterBinding]:
        """Return bindings at *location* in the order they were added."""
        return [p for p in self.parameters if p.location == location]


class HttpRequest(BaseModel):
    """A fully assembled request, ready for the executor."""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None


class ResponseRecord(BaseModel):
    """Normalised outcome of one executed request.

    ``status == 0`` means the exchange never completed (DNS, TLS, refused
    connection, timeout); ``body`` then holds the failure description.
    """

    model_config = ConfigDict(frozen=True)

    status: int
    status_text: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: str = ""
    duration_ms: float = Field(ge=0)
    note: Optional[str] = Field(
        default=None, description="Set when a JSON-declared body could not be parsed"
    )

    @property
    def is_network_error(self) -> bool:
        return self.status == 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300
