"""Turn raw specification text into a :class:`~spectry.parser.document.SpecDocument`.

This module is the parser/validator at the bottom of the spectry pipeline.
It also hosts the thin retrieval and export helpers that move spec text in
and out of the process; those never interpret the text themselves.

The public functions are:

* :func:`parse` -- JSON-then-YAML parse plus structural validation. Raises a
  :class:`~spectry.exceptions.SpecParseError` subclass on fatal problems and
  attaches non-fatal warnings to the returned document.
* :func:`validate_text` -- the non-raising variant used by editors: returns
  every issue found, errors and warnings alike.
* :func:`load_text` -- read spec text from a URL, local file, or stdin.
* :func:`format_spec_text` -- re-emit spec text as tidy YAML.
* :func:`export_spec` -- write the current text verbatim to ``openapi.yaml``.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from spectry.exceptions import (
    ConflictingVersionFieldsError,
    MissingVersionFieldError,
    NotAnObjectError,
    SpecLoadError,
    SpecParseError,
    SpecSyntaxError,
)
from spectry.models import Severity, ValidationIssue
from spectry.parser.document import SpecDocument

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "openapi.yaml"


@dataclass
class ValidationResult:
    """Outcome of :func:`validate_text`.

    Attributes:
        is_valid: ``True`` when no issue has ``error`` severity.
        issues: Errors and warnings in the order they were found.
        document: The parsed document when valid and non-empty.
    """

    is_valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)
    document: Optional[SpecDocument] = None

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]


# ------------------------------------------------------------------ #
# Parsing
# ------------------------------------------------------------------ #


def parse(raw_text: str) -> SpecDocument:
    """Parse and validate spec text.

    JSON is attempted first, YAML second. The parsed value must be a
    mapping declaring exactly one of ``openapi`` / ``swagger``. Missing
    ``info.title``, ``info.version``, or both ``paths`` and ``components``
    are recorded as warnings on the returned document and do not fail the
    parse.

    Args:
        raw_text: The complete specification text.

    Returns:
        A new, immutable :class:`SpecDocument`.

    Raises:
        SpecSyntaxError: If the text is neither JSON nor YAML.
        NotAnObjectError: If the root value is not a mapping.
        MissingVersionFieldError: If neither version marker is present.
        ConflictingVersionFieldsError: If both version markers are present.
    """
    data = _decode(raw_text)
    if not isinstance(data, Mapping):
        kind = "empty document" if data is None else type(data).__name__
        raise NotAnObjectError(f"Specification must be a JSON/YAML object (got {kind})")

    has_openapi = "openapi" in data
    has_swagger = "swagger" in data
    if not has_openapi and not has_swagger:
        raise MissingVersionFieldError("Missing required field: openapi or swagger")
    if has_openapi and has_swagger:
        raise ConflictingVersionFieldsError(
            "Specification declares both 'openapi' and 'swagger'; keep exactly one"
        )

    warnings = _structural_warnings(data)
    for warning in warnings:
        logger.debug("spec warning: %s", warning.message)
    return SpecDocument(data, raw_text=raw_text, warnings=tuple(warnings))


def validate_text(raw_text: str) -> ValidationResult:
    """Validate spec text without raising.

    Empty or whitespace-only text is considered valid with no issues and no
    document, so an editor with a blank buffer shows no complaints.

    Args:
        raw_text: The specification text to check.

    Returns:
        A :class:`ValidationResult`.
    """
    if not raw_text.strip():
        return ValidationResult(is_valid=True)

    try:
        document = parse(raw_text)
    except SpecSyntaxError as exc:
        return ValidationResult(
            is_valid=False,
            issues=[ValidationIssue(severity=Severity.ERROR, message=str(exc), line=exc.line or 1)],
        )
    except SpecParseError as exc:
        return ValidationResult(
            is_valid=False,
            issues=[ValidationIssue(severity=Severity.ERROR, message=str(exc), line=1)],
        )

    return ValidationResult(is_valid=True, issues=list(document.warnings), document=document)


def _decode(raw_text: str) -> Any:
    """Decode *raw_text* as JSON, falling back to YAML.

    Raises:
        SpecSyntaxError: If both decoders reject the text.
    """
    try:
        return json.loads(raw_text)
    except json.JSONDecodeError as exc:
        json_error = exc
        logger.debug("JSON decode failed (%s), trying YAML", exc)

    try:
        return yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        line = _yaml_error_line(exc) or json_error.lineno
        raise SpecSyntaxError(
            "Invalid YAML or JSON format"
            f"\n  JSON error: {json_error}"
            f"\n  YAML error: {exc}",
            line=line,
        ) from exc


def _yaml_error_line(exc: yaml.YAMLError) -> Optional[int]:
    """Return the 1-based line a YAML error points at, if it has a mark."""
    mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
    if mark is None:
        return None
    return mark.line + 1


def _structural_warnings(data: Mapping[str, Any]) -> list[ValidationIssue]:
    """Collect the non-fatal structural problems of a spec root."""
    issues: list[ValidationIssue] = []

    def warn(message: str) -> None:
        issues.append(ValidationIssue(severity=Severity.WARNING, message=message, line=1))

    info = data.get("info")
    if not isinstance(info, Mapping):
        warn("Missing required field: info")
        warn("Missing required field: info.title")
        warn("Missing required field: info.version")
    else:
        if not info.get("title"):
            warn("Missing required field: info.title")
        if not info.get("version"):
            warn("Missing required field: info.version")

    if data.get("paths") is None and data.get("components") is None:
        warn("API should have either paths or components")

    return issues


# ------------------------------------------------------------------ #
# Formatting / export
# ------------------------------------------------------------------ #


def format_spec_text(raw_text: str) -> str:
    """Re-emit spec text as YAML with 2-space indentation.

    Key order is preserved, lines wrap at 120 columns, and non-ASCII text is
    written as-is.

    Raises:
        SpecSyntaxError: If the text is neither JSON nor YAML.
    """
    data = _decode(raw_text)
    return yaml.safe_dump(
        data,
        indent=2,
        width=120,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def export_spec(raw_text: str, directory: str | Path) -> Path:
    """Write *raw_text* unchanged to ``<directory>/openapi.yaml``.

    Returns:
        Path of the written file.
    """
    from spectry.config import atomic_write

    target = Path(directory) / EXPORT_FILENAME
    atomic_write(target, raw_text)
    return target


# ------------------------------------------------------------------ #
# Retrieval
# ------------------------------------------------------------------ #


def load_text(source: str, timeout: float = 30.0) -> str:
    """Read spec text from URL, file path, or stdin (``'-'``).

    Args:
        source: A URL (http/https), file path, or ``'-'`` for stdin.
        timeout: Seconds to wait for a URL fetch.

    Returns:
        The decoded text, untouched.

    Raises:
        SpecLoadError: If the source cannot be read or is empty.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source, timeout)
    return _load_from_file(source)


def _load_from_stdin() -> str:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecLoadError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecLoadError("No input received from stdin")
    return content


def _load_from_url(url: str, timeout: float) -> str:
    """Fetch spec text from *url*, following redirects."""
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecLoadError(
            f"HTTP {exc.response.status_code}: {exc.response.reason_phrase} ({url})"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecLoadError(f"Failed to fetch spec from {url}: {exc}") from exc

    if not response.text.strip():
        raise SpecLoadError(f"Empty response body from {url}")
    return response.text


def _load_from_file(path: str) -> str:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecLoadError(f"Spec file not found: {path}")

    try:
        # newline="" keeps CRLF text byte-identical for export.
        with open(file_path, encoding="utf-8", newline="") as fh:
            content = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecLoadError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecLoadError(f"Spec file is empty: {path}")
    return content
