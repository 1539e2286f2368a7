"""Assemble a concrete :class:`~spectry.models.HttpRequest` from a draft.

:func:`build` is pure: it performs no I/O and may be called as often as a
preview needs. The order of the steps matters:

1. Join the server base URL (one trailing slash stripped) and the path
   template.
2. Substitute every ``{name}`` placeholder from the ``path`` bindings,
   encoded the way ``encodeURIComponent`` does. A placeholder left over is a
   :class:`~spectry.exceptions.MissingPathParameterError`.
3. Append ``query`` bindings with a non-empty name and value as an
   ``application/x-www-form-urlencoded`` query string.
4. Collect ``header`` bindings; ``Content-Type: application/json`` is the
   default unless a binding of the same name (any case) overrides it.
   ``cookie`` bindings are folded into one ``Cookie`` header.
5. Attach the body text verbatim for POST, PUT and PATCH only.

Parameters the operation declares as required must be bound, otherwise
:class:`~spectry.exceptions.MissingRequiredParameterError` is raised and
nothing is sent.
"""

from __future__ import annotations

import re
import shlex
from typing import Optional
from urllib.parse import quote, urlencode

from spectry.exceptions import MissingPathParameterError, MissingRequiredParameterError
from spectry.models import (
    BODY_METHODS,
    HttpRequest,
    Operation,
    ParameterLocation,
    RequestDraft,
)

DEFAULT_CONTENT_TYPE = "application/json"

_PLACEHOLDER = re.compile(r"\{([^{}/]+)\}")

# Characters encodeURIComponent leaves alone besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build(operation: Operation, server: str, draft: RequestDraft) -> HttpRequest:
    """Build the request *draft* describes for *operation* on *server*.

    Args:
        operation: The selected operation; supplies the path template,
            method and required-parameter declarations.
        server: Base URL of the chosen server.
        draft: The user's parameter bindings and body text.

    Returns:
        A frozen :class:`~spectry.models.HttpRequest`.

    Raises:
        MissingPathParameterError: If a path placeholder has no bound value.
        MissingRequiredParameterError: If a declared required query, header
            or cookie parameter has no bound value.

    Example::

        draft = RequestDraft(server=server, path="/pet/{petId}", method="get",
                             parameters=[ParameterBinding(name="petId", value="10",
                                                          location="path")])
        build(operation, "https://petstore3.swagger.io/api/v3", draft).url
        # 'https://petstore3.swagger.io/api/v3/pet/10'
    """
    _check_required(operation, draft)

    # 1. Base URL + path template
    base = server[:-1] if server.endswith("/") else server
    path = operation.path

    # 2. Path parameters
    for binding in draft.bindings(ParameterLocation.PATH):
        if binding.is_bound:
            path = path.replace(
                "{" + binding.name + "}", quote(binding.value, safe=_URI_COMPONENT_SAFE)
            )
    leftover = _PLACEHOLDER.search(path)
    if leftover is not None:
        raise MissingPathParameterError(leftover.group(1))
    url = base + path

    # 3. Query string
    query = [(b.name, b.value) for b in draft.bindings(ParameterLocation.QUERY) if b.is_bound]
    if query:
        url += ("&" if "?" in url else "?") + urlencode(query)

    # 4. Headers
    headers = _build_headers(draft)

    # 5. Body
    method = operation.method
    body: Optional[str] = None
    if method in BODY_METHODS and draft.body.strip():
        body = draft.body

    return HttpRequest(method=method.value.upper(), url=url, headers=headers, body=body)


def _check_required(operation: Operation, draft: RequestDraft) -> None:
    """Raise if a declared required non-path parameter has no value."""
    for param in operation.parameters:
        if not param.required or param.location == ParameterLocation.PATH:
            continue
        if param.location == ParameterLocation.HEADER:
            names = {b.name.lower() for b in draft.bindings(param.location) if b.is_bound}
            bound = param.name.lower() in names
        else:
            names = {b.name for b in draft.bindings(param.location) if b.is_bound}
            bound = param.name in names
        if not bound:
            raise MissingRequiredParameterError(param.name, param.location.value)


def _build_headers(draft: RequestDraft) -> dict[str, str]:
    headers: dict[str, str] = {"Content-Type": DEFAULT_CONTENT_TYPE}

    for binding in draft.bindings(ParameterLocation.HEADER):
        if not binding.is_bound:
            continue
        # Header names are case-insensitive; the user's spelling wins.
        for existing in [k for k in headers if k.lower() == binding.name.lower()]:
            del headers[existing]
        headers[binding.name] = binding.value

    cookies = [b for b in draft.bindings(ParameterLocation.COOKIE) if b.is_bound]
    if cookies:
        cookie_str = "; ".join(f"{b.name}={b.value}" for b in cookies)
        existing_key = next((k for k in headers if k.lower() == "cookie"), None)
        if existing_key is not None:
            cookie_str = f"{headers.pop(existing_key)}; {cookie_str}"
            headers[existing_key] = cookie_str
        else:
            headers["Cookie"] = cookie_str

    return headers


def to_curl(request: HttpRequest) -> str:
    """Render *request* as a copy-pasteable ``curl`` command line."""
    parts = ["curl", "-X", request.method, shlex.quote(request.url)]
    for name, value in request.headers.items():
        parts += ["-H", shlex.quote(f"{name}: {value}")]
    if request.body is not None:
        parts += ["--data-raw", shlex.quote(request.body)]
    return " ".join(parts)
