"""Monadic Validation Types

Implements the Result/Either type used by every codec for deterministic,
composable failure propagation, together with the raw failure record and the
path context a codec builds while descending into nested input.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, NoReturn, TypeVar, Union, final

if TYPE_CHECKING:
    from iocodec.codecs.base import Codec

T = TypeVar("T")
E = TypeVar("E")


@final
class _Undefined:
    """Marker for an absent value (a missing key, an omitted argument)."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "undefined"

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Any = _Undefined()


class ErrorCode(str, Enum):
    """Machine-readable validation error categories."""
    INVALID_TYPE = "INVALID_TYPE"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_UUID = "INVALID_UUID"
    INVALID_URL = "INVALID_URL"
    INVALID_PHONE = "INVALID_PHONE"
    INVALID_DATE = "INVALID_DATE"
    INVALID_DATETIME = "INVALID_DATETIME"
    INVALID_IP = "INVALID_IP"
    INVALID_IPV4 = "INVALID_IPV4"
    INVALID_IPV6 = "INVALID_IPV6"
    INVALID_INTEGER = "INVALID_INTEGER"
    INVALID_POSITIVE_NUMBER = "INVALID_POSITIVE_NUMBER"
    INVALID_NON_NEGATIVE_NUMBER = "INVALID_NON_NEGATIVE_NUMBER"
    INVALID_POSITIVE_INTEGER = "INVALID_POSITIVE_INTEGER"
    INVALID_PORT = "INVALID_PORT"
    INVALID_PERCENTAGE = "INVALID_PERCENTAGE"
    INVALID_NON_EMPTY_STRING = "INVALID_NON_EMPTY_STRING"
    INVALID_TRIMMED_STRING = "INVALID_TRIMMED_STRING"
    INVALID_LOWERCASE_STRING = "INVALID_LOWERCASE_STRING"
    INVALID_UPPERCASE_STRING = "INVALID_UPPERCASE_STRING"
    INVALID_HEX_COLOR = "INVALID_HEX_COLOR"
    INVALID_SLUG = "INVALID_SLUG"
    INVALID_BASE64 = "INVALID_BASE64"
    INVALID_JWT = "INVALID_JWT"
    REQUIRED = "REQUIRED"
    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value


class SchemaError(TypeError):
    """Raised when a codec is constructed from an invalid shape.

    This is a programmer error: it surfaces at construction time and is never
    produced while decoding data.
    """


@dataclass(frozen=True, slots=True)
class ContextEntry:
    """One segment of the path from the root value to the validating node."""
    key: str
    type: Codec


Context = tuple[ContextEntry, ...]


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    """A single violated leaf: the offending value and where it was found."""
    value: Any
    context: Context
    message: str | None = None

    @property
    def path(self) -> list[str]:
        """Non-empty context keys below the root."""
        return [entry.key for entry in self.context[1:] if entry.key != ""]

    @property
    def expected(self) -> Codec | None:
        return self.context[-1].type if self.context else None


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result.

    Wraps a decoded value. Immutable and hashable when T is hashable.
    """
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Extract the value. Safe because Ok always contains a value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result.

    For codecs the payload is always a list of ValidationFailure.
    """
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raises because Err has no value to unwrap."""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        """Extract the error."""
        return self.error


# Type alias for Result monad
Result = Union[Ok[T], Err[E]]

# What every codec's validate() returns
Validation = Union[Ok[T], Err[list[ValidationFailure]]]
