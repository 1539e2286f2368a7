"""Send built requests and normalise every outcome into a ResponseRecord.

This module provides :class:`RequestExecutor` (blocking, backed by
:class:`httpx.Client`) and :class:`AsyncRequestExecutor` (backed by
:class:`httpx.AsyncClient`). Both expose ``execute(request)``, and neither
raises for transport trouble: DNS failures, refused connections, TLS errors,
timeouts and malformed URLs all come back as a status-0
:class:`~spectry.models.ResponseRecord`.

No retries are attempted and no timeout is imposed beyond what
:class:`~spectry.models.RequestConfig` asks for; with ``timeout=None`` the
httpx default applies. There is no cancellation: a request runs until it
completes or fails.

Example::

    from spectry.client import RequestExecutor

    with RequestExecutor(config.request) as executor:
        record = executor.execute(request)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from spectry.client.response import record_from_error, record_from_response
from spectry.models import HttpRequest, RequestConfig, ResponseRecord

logger = logging.getLogger(__name__)

# Everything httpx raises when an exchange cannot complete, including
# header values it cannot encode as ASCII.
TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    httpx.InvalidURL,
    UnicodeEncodeError,
)


def _client_kwargs(config: RequestConfig, transport: Any) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "verify": config.verify_ssl,
        "follow_redirects": config.follow_redirects,
    }
    if config.timeout is not None:
        kwargs["timeout"] = config.timeout
    if transport is not None:
        kwargs["transport"] = transport
    return kwargs


def _request_kwargs(request: HttpRequest) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "method": request.method,
        "url": request.url,
        "headers": request.headers,
    }
    if request.body is not None:
        kwargs["content"] = request.body.encode("utf-8")
    return kwargs


class RequestExecutor:
    """Blocking executor for built requests.

    Must be used as a context manager so that the underlying connection pool
    is opened and closed exactly once.

    Args:
        config: Request settings (timeout, SSL verification, redirects).
            Defaults to :class:`~spectry.models.RequestConfig`.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> RequestExecutor:
        self._client = httpx.Client(**_client_kwargs(self._config, self._transport))
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def execute(self, request: HttpRequest) -> ResponseRecord:
        """Send *request* and return its normalised outcome. Never raises for I/O failures."""
        assert self._client is not None, "Executor not initialised -- use as context manager"

        logger.debug("sending %s %s", request.method, request.url)
        started = time.perf_counter()
        try:
            response = self._client.request(**_request_kwargs(request))
        except TRANSPORT_ERRORS as exc:
            logger.debug("transport failure for %s %s: %s", request.method, request.url, exc)
            return record_from_error(exc, started)
        return record_from_response(response, started)


class AsyncRequestExecutor:
    """Non-blocking counterpart of :class:`RequestExecutor`.

    Must be used as an async context manager. Several ``execute`` calls may
    be in flight at once; each resolves independently.

    Args:
        config: Request settings (timeout, SSL verification, redirects).
        transport: Optional async httpx transport for tests.
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> AsyncRequestExecutor:
        self._client = httpx.AsyncClient(**_client_kwargs(self._config, self._transport))
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def execute(self, request: HttpRequest) -> ResponseRecord:
        """Send *request* and return its normalised outcome. Never raises for I/O failures."""
        assert self._client is not None, "Executor not initialised -- use as async context manager"

        logger.debug("sending %s %s", request.method, request.url)
        started = time.perf_counter()
        try:
            response = await self._client.request(**_request_kwargs(request))
        except TRANSPORT_ERRORS as exc:
            logger.debug("transport failure for %s %s: %s", request.method, request.url, exc)
            return record_from_error(exc, started)
        return record_from_response(response, started)
