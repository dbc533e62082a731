"""Codec Base

A codec is an immutable value that can validate untyped input, guard a value
at runtime, and encode a decoded value back to its output representation.
Codecs compose: every combinator returns a new codec and never mutates its
inputs.

Operators mirror the validator combinators:
- a | b  -> union (at least one must accept)
- a & b  -> intersection (all must accept, objects are merged)
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from iocodec.errors.builders import root_context
from iocodec.errors.types import UNDEFINED, Context, Validation

if TYPE_CHECKING:
    from .composite import IntersectionCodec, UnionCodec

A = TypeVar("A")


class Kind(str, Enum):
    """Closed set of codec shapes, used for structural dispatch."""
    PRIMITIVE = "primitive"
    RECORD = "record"
    PARTIAL_RECORD = "partial_record"
    ARRAY = "array"
    TUPLE = "tuple"
    UNION = "union"
    INTERSECTION = "intersection"
    LITERAL = "literal"
    KEYOF = "keyof"
    BRANDED = "branded"
    RECURSIVE = "recursive"
    DICTIONARY = "dictionary"
    READONLY = "readonly"
    WITH_MESSAGE = "with_message"
    DEFAULTED = "defaulted"
    CROSS_VALIDATED = "cross_validated"
    TRANSFORMED = "transformed"


class Codec(ABC, Generic[A]):
    """Base class for all codecs."""

    kind: ClassVar[Kind]

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable, human-readable type name used in diagnostics."""

    @abstractmethod
    def validate(self, value: Any, context: Context) -> Validation[A]:
        """Validate ``value`` at ``context``. Returns Ok(decoded) or Err(failures)."""

    @abstractmethod
    def is_(self, value: Any) -> bool:
        """Runtime type guard for already-decoded values."""

    def encode(self, value: A) -> Any:
        return value

    def decode(self, value: Any = UNDEFINED) -> Validation[A]:
        """Validate a top-level value."""
        return self.validate(value, root_context(self))

    def __or__(self, other: Codec) -> UnionCodec:
        from .composite import UnionCodec
        return UnionCodec((self, other))

    def __and__(self, other: Codec) -> IntersectionCodec:
        from .composite import IntersectionCodec
        return IntersectionCodec((self, other))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class DelegatingCodec(Codec[A]):
    """A codec that wraps exactly one inner codec.

    Wrappers are transparent for error formatting: message bindings and
    branded lookups look through them to the codec they wrap.
    """

    inner: Codec

    def is_(self, value: Any) -> bool:
        return self.inner.is_(value)

    def encode(self, value: A) -> Any:
        return self.inner.encode(value)


def is_codec(obj: Any) -> bool:
    return isinstance(obj, Codec)


def runtime_type(value: Any) -> str:
    """Category of a raw input value, named the way diagnostics report it."""
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def unwrap(codec: Codec) -> Codec:
    """Follow delegating wrappers down to the first non-wrapper codec."""
    seen: set[int] = set()
    while isinstance(codec, DelegatingCodec) and id(codec) not in seen:
        seen.add(id(codec))
        codec = codec.inner
    return codec
