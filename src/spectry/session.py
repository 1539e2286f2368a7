"""Console session state -- loaded specs, the draft request, the last response.

:class:`ConsoleSession` mediates between the parsing/building/executing code
and whatever presents it (the CLI in :mod:`spectry.app`). It owns:

* the loaded :class:`~spectry.parser.document.SpecDocument` objects, by name,
  and which one is active;
* the selected server, operation and :class:`~spectry.models.RequestDraft`;
* the most recent :class:`~spectry.models.ResponseRecord`.

Every execution is stamped with a generation token. Selecting another
operation, clearing the response, resetting, or starting a newer execution
advances the session's generation, and a completed execution whose token is
no longer current is dropped instead of overwriting the visible response.
All mutation is expected to happen on one thread or one event loop.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from spectry.client.builder import build
from spectry.client.executor import AsyncRequestExecutor, RequestExecutor
from spectry.exceptions import InvalidUsageError
from spectry.generator.synthesizer import example_body
from spectry.models import (
    HTTPMethod,
    HttpRequest,
    Operation,
    Parameter,
    ParameterBinding,
    ParameterLocation,
    RequestDraft,
    ResponseRecord,
)
from spectry.parser.document import SpecDocument
from spectry.parser.loader import export_spec, parse

logger = logging.getLogger(__name__)


def _binding_value(param: Parameter) -> str:
    """Initial text for a declared parameter: its example, else its default."""
    value = param.example
    if value is None:
        value = param.schema_.get("default")
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ConsoleSession:
    """Interactive state for loading specs and trying their operations.

    Args:
        default_server: Server URL to pre-select instead of the active
            document's first server.

    Example::

        session = ConsoleSession()
        session.load_spec("petstore", text)
        session.select_operation("/pet/{petId}", "get")
        session.update_parameter(0, value="10")
        with RequestExecutor() as executor:
            record = session.execute(executor)
    """

    def __init__(self, default_server: Optional[str] = None) -> None:
        self._default_server = default_server
        self._specs: dict[str, SpecDocument] = {}
        self._active: Optional[str] = None
        self._server: Optional[str] = None
        self._operation: Optional[Operation] = None
        self._draft: Optional[RequestDraft] = None
        self._response: Optional[ResponseRecord] = None
        self._generation = 0

    # ------------------------------------------------------------------ #
    # Read-only state
    # ------------------------------------------------------------------ #

    @property
    def spec_names(self) -> list[str]:
        return list(self._specs)

    @property
    def active_name(self) -> Optional[str]:
        return self._active

    @property
    def document(self) -> SpecDocument:
        """The active document.

        Raises:
            InvalidUsageError: If no specification has been loaded.
        """
        if self._active is None:
            raise InvalidUsageError("No specification loaded")
        return self._specs[self._active]

    @property
    def server(self) -> Optional[str]:
        return self._server

    @property
    def operation(self) -> Optional[Operation]:
        return self._operation

    @property
    def draft(self) -> Optional[RequestDraft]:
        return self._draft

    @property
    def response(self) -> Optional[ResponseRecord]:
        return self._response

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------ #
    # Specifications
    # ------------------------------------------------------------------ #

    def load_spec(self, name: str, raw_text: str, activate: bool = True) -> SpecDocument:
        """Parse *raw_text* and store it under *name*.

        A parse failure propagates and leaves every previously loaded
        document, including one already stored under *name*, untouched.

        Raises:
            SpecParseError: If the text cannot be parsed.
        """
        document = parse(raw_text)
        self._specs[name] = document
        logger.debug("loaded spec %r (%s %s)", name, document.version_field, document.version)
        if activate or self._active is None or self._active == name:
            self._activate(name)
        return document

    def switch_spec(self, name: str) -> SpecDocument:
        """Make the spec stored under *name* the active one."""
        if name not in self._specs:
            raise InvalidUsageError(f"No specification named '{name}' is loaded")
        self._activate(name)
        return self._specs[name]

    def unload_spec(self, name: str) -> None:
        """Forget the spec stored under *name*; activates the next one, if any."""
        if name not in self._specs:
            raise InvalidUsageError(f"No specification named '{name}' is loaded")
        del self._specs[name]
        if self._active == name:
            remaining = next(iter(self._specs), None)
            if remaining is None:
                self._active = None
                self._server = None
                self.reset()
            else:
                self._activate(remaining)

    def _activate(self, name: str) -> None:
        self._active = name
        self.reset()
        servers = self._specs[name].servers()
        self._server = self._default_server or servers[0].url

    def export_spec(self, directory: str | Path) -> Path:
        """Write the active spec's text verbatim to ``<directory>/openapi.yaml``."""
        return export_spec(self.document.raw_text, directory)

    # ------------------------------------------------------------------ #
    # Selection and editing
    # ------------------------------------------------------------------ #

    def select_server(self, url: str) -> None:
        if not url:
            raise InvalidUsageError("Server URL must not be empty")
        self._server = url
        if self._draft is not None:
            self._draft.server = url

    def select_operation(self, path: str, method: str | HTTPMethod) -> RequestDraft:
        """Start a new draft for the operation at ``(path, method)``.

        Declared parameters are pre-bound with their example or default, and
        the body is pre-filled with a synthesized example. The previous draft
        and response are discarded.

        Raises:
            InvalidUsageError: If no specification is loaded.
            OperationNotFoundError: If the operation does not exist.
            ResolutionError: If the example body references a missing schema.
        """
        document = self.document
        operation = document.operation(path, method)
        body = example_body(operation, document) if operation.accepts_body else None

        draft = RequestDraft(
            server=self._server or document.servers()[0].url,
            path=operation.path,
            method=operation.method,
            parameters=[
                ParameterBinding(name=p.name, value=_binding_value(p), location=p.location)
                for p in operation.parameters
            ],
            body=body or "",
        )

        self._operation = operation
        self._draft = draft
        self._response = None
        self._generation += 1
        return draft

    def _require_draft(self) -> RequestDraft:
        if self._draft is None:
            raise InvalidUsageError("No operation selected")
        return self._draft

    def add_parameter(
        self,
        location: ParameterLocation | str,
        name: str = "",
        value: str = "",
    ) -> int:
        """Append a binding to the draft and return its index."""
        draft = self._require_draft()
        draft.parameters.append(
            ParameterBinding(name=name, value=value, location=ParameterLocation(location))
        )
        return len(draft.parameters) - 1

    def update_parameter(
        self,
        index: int,
        name: Optional[str] = None,
        value: Optional[str] = None,
    ) -> ParameterBinding:
        """Change the name and/or value of the binding at *index*."""
        draft = self._require_draft()
        try:
            binding = draft.parameters[index]
        except IndexError:
            raise InvalidUsageError(f"No parameter at index {index}") from None
        if name is not None:
            binding.name = name
        if value is not None:
            binding.value = value
        return binding

    def set_parameter(self, location: ParameterLocation | str, name: str, value: str) -> None:
        """Bind *value* to the first binding named *name* at *location*, adding one if needed."""
        draft = self._require_draft()
        location = ParameterLocation(location)
        for binding in draft.parameters:
            if binding.location == location and binding.name == name:
                binding.value = value
                return
        self.add_parameter(location, name, value)

    def remove_parameter(self, index: int) -> None:
        draft = self._require_draft()
        try:
            del draft.parameters[index]
        except IndexError:
            raise InvalidUsageError(f"No parameter at index {index}") from None

    def set_body(self, text: str) -> None:
        self._require_draft().body = text

    # ------------------------------------------------------------------ #
    # Building and executing
    # ------------------------------------------------------------------ #

    def build_request(self) -> HttpRequest:
        """Build the request the current draft describes, without sending it.

        Raises:
            InvalidUsageError: If no operation is selected.
            BuildError: If the draft is missing a required value.
        """
        draft = self._require_draft()
        assert self._operation is not None
        return build(self._operation, draft.server, draft)

    def execute(self, executor: RequestExecutor) -> ResponseRecord:
        """Build and send the draft through *executor*.

        Returns:
            The record for this execution. It becomes :attr:`response` unless
            a newer execution or selection superseded it meanwhile.

        Raises:
            BuildError: If the request cannot be built; nothing is sent.
        """
        request = self.build_request()
        token = self._next_token()
        record = executor.execute(request)
        self._apply(token, record)
        return record

    async def execute_async(self, executor: AsyncRequestExecutor) -> ResponseRecord:
        """Async variant of :meth:`execute`; overlapping calls resolve last-started-wins."""
        request = self.build_request()
        token = self._next_token()
        record = await executor.execute(request)
        self._apply(token, record)
        return record

    def _next_token(self) -> int:
        self._generation += 1
        return self._generation

    def _apply(self, token: int, record: ResponseRecord) -> bool:
        if token != self._generation:
            logger.debug("discarding stale response (token %d, current %d)", token, self._generation)
            return False
        self._response = record
        return True

    def clear_response(self) -> None:
        self._response = None
        self._generation += 1

    def reset(self) -> None:
        """Drop the selected operation, draft and response."""
        self._operation = None
        self._draft = None
        self._response = None
        self._generation += 1
