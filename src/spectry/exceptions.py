"""Exception hierarchy for spectry.

All exceptions inherit from :class:`SpectryError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`spectry.exit_codes`.
The top-level error handler in :func:`spectry.app.main` catches
``SpectryError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpectryError (exit 1)
    +-- InvalidUsageError                   (exit 2)
    +-- SpecLoadError                       (exit 6)
    +-- SpecParseError                      (exit 7)
    |   +-- SpecSyntaxError
    |   +-- NotAnObjectError
    |   +-- MissingVersionFieldError
    |   +-- ConflictingVersionFieldsError
    +-- DocumentError                       (exit 8)
    |   +-- OperationNotFoundError
    |   +-- ResolutionError
    |       +-- UnknownReferenceError
    |       +-- UnsupportedReferenceError
    +-- BuildError                          (exit 2)
    |   +-- MissingPathParameterError
    |   +-- MissingRequiredParameterError
    +-- ConfigError                         (exit 1)

Transport failures during request execution are deliberately absent: the
executor folds them into a status-0
:class:`~spectry.models.ResponseRecord` instead of raising.
"""

from __future__ import annotations

from typing import Optional

from spectry.exit_codes import (
    EXIT_DOCUMENT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NETWORK_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SpectryError(Exception):
    """Base exception for all spectry errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`spectry.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpectryError):
    """Raised for invalid CLI arguments or session calls made in the wrong state."""

    exit_code = EXIT_INVALID_USAGE


class SpecLoadError(SpectryError):
    """Raised when spec text cannot be read from a file, URL, or stdin."""

    exit_code = EXIT_NETWORK_ERROR


# --- Parsing ---


class SpecParseError(SpectryError):
    """Raised when raw text cannot be turned into a :class:`~spectry.parser.document.SpecDocument`."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SpecSyntaxError(SpecParseError):
    """The text is neither valid JSON nor valid YAML.

    Args:
        message: Description of the syntax failure.
        line: 1-based line of the failure when the parser reported one.
    """

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.line = line


class NotAnObjectError(SpecParseError):
    """The text parsed, but its root value is not a mapping."""


class MissingVersionFieldError(SpecParseError):
    """The root mapping declares neither ``openapi`` nor ``swagger``."""


class ConflictingVersionFieldsError(SpecParseError):
    """The root mapping declares both ``openapi`` and ``swagger``."""


# --- Document access ---


class DocumentError(SpectryError):
    """Raised when a parsed document lacks a shape the caller asked for."""

    exit_code = EXIT_DOCUMENT_ERROR


class OperationNotFoundError(DocumentError):
    """No operation exists for the requested path template and method."""

    def __init__(self, path: str, method: str):
        super().__init__(f"No operation {method.upper()} {path} in this specification")
        self.path = path
        self.method = method


class ResolutionError(DocumentError):
    """A ``$ref`` pointer could not be turned into a concrete schema."""


class UnknownReferenceError(ResolutionError):
    """``#/components/schemas/<Name>`` points at a schema that is not declared."""

    def __init__(self, name: str):
        super().__init__(f"Unknown schema reference: '{name}' is not in components.schemas")
        self.name = name


class UnsupportedReferenceError(ResolutionError):
    """A ``$ref`` uses a shape other than the supported local component pointer."""

    def __init__(self, ref: str):
        super().__init__(
            f"Unsupported $ref '{ref}'. Only local '#/components/...' references are handled."
        )
        self.ref = ref


# --- Request building ---


class BuildError(SpectryError):
    """Raised when a request cannot be assembled from the current draft."""

    exit_code = EXIT_INVALID_USAGE


class MissingPathParameterError(BuildError):
    """A ``{name}`` placeholder in the path template has no bound value."""

    def __init__(self, name: str):
        super().__init__(f"Missing value for path parameter '{name}'")
        self.name = name


class MissingRequiredParameterError(BuildError):
    """A parameter the operation declares as required has no bound value."""

    def __init__(self, name: str, location: str):
        super().__init__(f"Missing value for required {location} parameter '{name}'")
        self.name = name
        self.location = location


class ConfigError(SpectryError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
