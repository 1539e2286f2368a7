"""Helpers shared by the sub-command modules."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

import typer

from spectry.exceptions import InvalidUsageError, SpectryError
from spectry.models import GlobalConfig
from spectry.output import debug, error
from spectry.parser import SpecDocument, load_text, parse

# Timeout for fetching a spec by URL when the config leaves it unset.
SPEC_FETCH_TIMEOUT = 30.0


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Report a :class:`~spectry.exceptions.SpectryError` and exit with its code."""
    try:
        yield
    except SpectryError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def get_config(ctx: typer.Context) -> GlobalConfig:
    """The configuration resolved by the root callback, or defaults."""
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and isinstance(obj.get("config"), GlobalConfig):
        return obj["config"]
    return GlobalConfig()


def read_source(ctx: typer.Context, source: str) -> str:
    """Read spec text from *source* honouring the configured timeout."""
    timeout = get_config(ctx).request.timeout or SPEC_FETCH_TIMEOUT
    debug(f"Loading spec from {source}")
    return load_text(source, timeout=timeout)


def load_document(ctx: typer.Context, source: str) -> SpecDocument:
    """Read and parse *source*, raising on any failure."""
    return parse(read_source(ctx, source))


def parse_pairs(values: Optional[list[str]], option: str) -> list[tuple[str, str]]:
    """Split repeated ``key=value`` option values.

    Raises:
        InvalidUsageError: If an entry has no ``=`` or an empty key.
    """
    pairs: list[tuple[str, str]] = []
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"{option} expects key=value, got: {item}")
        pairs.append((key, value))
    return pairs
