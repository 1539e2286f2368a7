"""Request construction and execution.

Classes and functions:
    :func:`~spectry.client.builder.build` -- pure draft-to-request assembly.
    :func:`~spectry.client.builder.to_curl` -- curl preview of a built request.
    :class:`RequestExecutor` -- blocking executor backed by :class:`httpx.Client`.
    :class:`AsyncRequestExecutor` -- non-blocking executor backed by
    :class:`httpx.AsyncClient`.

Both executors are context managers and return a
:class:`~spectry.models.ResponseRecord` for every request, including ones
that failed at the transport level.

Example::

    from spectry.client import RequestExecutor, build

    request = build(operation, server, draft)
    with RequestExecutor() as executor:
        record = executor.execute(request)
"""

from spectry.client.builder import build, to_curl
from spectry.client.executor import AsyncRequestExecutor, RequestExecutor

__all__ = ["AsyncRequestExecutor", "RequestExecutor", "build", "to_curl"]
