"""Failure Builders

Ergonomic constructors for codec results. Every codec builds its outcome
through these so that the context and failure shapes stay uniform.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, TypeVar

from .types import Context, ContextEntry, Err, Ok, ValidationFailure

if TYPE_CHECKING:
    from iocodec.codecs.base import Codec

T = TypeVar("T")


def success(value: T) -> Ok[T]:
    """Construct a successful decode."""
    return Ok(value)


def failure(value: Any, context: Context, message: str | None = None) -> Err[list[ValidationFailure]]:
    """Construct a decode failure with a single leaf."""
    return Err([ValidationFailure(value=value, context=context, message=message)])


def failures(errors: Iterable[ValidationFailure]) -> Err[list[ValidationFailure]]:
    """Construct a decode failure from already collected leaves."""
    return Err(list(errors))


def root_context(codec: Codec) -> Context:
    """Context for a top-level decode: a single keyless entry."""
    return (ContextEntry(key="", type=codec),)


def append_context(context: Context, key: str | int, codec: Codec) -> Context:
    """Return a new context one level deeper. The input context is untouched."""
    return (*context, ContextEntry(key=str(key), type=codec))


def is_index(key: str) -> bool:
    """True for array positions: non-empty keys of ASCII digits only."""
    return key.isascii() and key.isdigit()
