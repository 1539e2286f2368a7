"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~spectry.exceptions.SpectryError` subclass.
Shell wrappers can inspect the exit code to tell a rejected request apart
from a broken specification without parsing stderr.

Example::

    $ spectry validate broken.yaml
    $ echo $?
    7   # EXIT_SPEC_PARSE_ERROR -- the document could not be parsed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or a request that could not be built from the draft."""

EXIT_NETWORK_ERROR = 6
"""A network-level error occurred while fetching a spec or sending a request."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI specification could not be parsed or validated."""

EXIT_DOCUMENT_ERROR = 8
"""The specification parsed, but an operation or schema it references is missing."""
