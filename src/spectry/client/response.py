"""Normalise HTTP exchanges into :class:`~spectry.models.ResponseRecord`.

The executor hands every outcome to one of two functions here:

* :func:`record_from_response` -- a completed exchange with any status.
* :func:`record_from_error` -- a transport failure, reported as status ``0``.

Keeping both paths in one module means the presentation layer has a single
shape to display, whatever happened on the wire.
"""

from __future__ import annotations

import json
import time

import httpx

from spectry.models import ResponseRecord

NETWORK_ERROR_STATUS = 0
NETWORK_ERROR_TEXT = "Network Error"


def is_json_content_type(content_type: str) -> bool:
    """Return ``True`` for ``application/json`` and any ``+json`` media type."""
    media_type = content_type.split(";")[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def decode_body(response: httpx.Response) -> tuple[str, str | None]:
    """Decode the body of *response* for display.

    JSON bodies are re-serialised with 2-space indentation. A body whose
    content type claims JSON but does not parse is returned as raw text
    together with a note saying so.

    Returns:
        A ``(body, note)`` tuple; ``note`` is ``None`` unless parsing failed.
    """
    text = response.text
    content_type = response.headers.get("content-type", "")
    if not is_json_content_type(content_type) or not text.strip():
        return text, None

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        return text, f"Failed to parse response body as JSON: {exc}"
    return json.dumps(parsed, indent=2, ensure_ascii=False), None


def elapsed_ms(started: float) -> float:
    """Milliseconds since *started*, a :func:`time.perf_counter` reading."""
    return max((time.perf_counter() - started) * 1000.0, 0.0)


def record_from_response(response: httpx.Response, started: float) -> ResponseRecord:
    """Build a record for a completed HTTP exchange.

    Response headers are copied in the order they were received; repeated
    headers are joined with ``", "``. The duration is taken after the body
    has been decoded.

    Args:
        response: A response whose body has already been read.
        started: :func:`time.perf_counter` value taken before sending.
    """
    body, note = decode_body(response)
    return ResponseRecord(
        status=response.status_code,
        status_text=response.reason_phrase or "",
        headers=dict(response.headers.items()),
        body=body,
        duration_ms=elapsed_ms(started),
        note=note,
    )


def record_from_error(exc: Exception, started: float) -> ResponseRecord:
    """Build a status-0 record for a request that never completed."""
    return ResponseRecord(
        status=NETWORK_ERROR_STATUS,
        status_text=NETWORK_ERROR_TEXT,
        headers={},
        body=str(exc) or type(exc).__name__,
        duration_ms=elapsed_ms(started),
    )
