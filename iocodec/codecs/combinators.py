"""Codec Combinators

Higher-order codecs that add behavior around an existing codec without
changing it: optionality, defaults, cross-field checks, post-decode
transformation and custom error messages.

Usage:
    from iocodec.codecs import record, string, number, optional, cross_validate

    Range = cross_validate(
        record({"min": number, "max": number}),
        lambda r: [] if r["min"] <= r["max"] else [("max", "max must be >= min")],
    )
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from iocodec.errors.builders import append_context, failure, failures, is_index, success
from iocodec.errors.types import (
    UNDEFINED, Context, Err, ErrorCode, SchemaError, Validation, ValidationFailure,
)

from .base import Codec, DelegatingCodec, Kind, is_codec, unwrap
from .composite import UnionCodec
from .primitives import null, undefined


def optional(codec: Codec) -> UnionCodec:
    """Accept the codec's values or an absent value. ``None`` is still rejected."""
    return UnionCodec((codec, undefined))


def nullable(codec: Codec) -> UnionCodec:
    """Accept the codec's values or ``None``. An absent value is still rejected."""
    return UnionCodec((codec, null))


# ============================================================================
# Defaults
# ============================================================================

@dataclass(frozen=True, eq=False, repr=False, slots=True)
class DefaultedCodec(DelegatingCodec[Any]):
    """Substitute ``default`` for an absent value; anything else goes to ``inner``.

    The default is returned as-is and never validated.
    """
    inner: Codec
    default: Any

    kind = Kind.DEFAULTED

    def __post_init__(self) -> None:
        if not is_codec(self.inner):
            raise SchemaError("with_default expects a codec")

    @property
    def name(self) -> str:
        return f"withDefault({self.inner.name}, {json.dumps(self.default, default=str)})"

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        if value is UNDEFINED:
            return success(self.default)
        return self.inner.validate(value, context)


def with_default(codec: Codec, default: Any) -> DefaultedCodec:
    return DefaultedCodec(codec, default)


# ============================================================================
# Cross-field validation
# ============================================================================

@dataclass(frozen=True, slots=True)
class CrossValidationError:
    """A cross-field rule violation reported against ``field`` (dotted path)."""
    field: str
    message: str


_SEGMENT = re.compile(r"[^.\[\]]+")


def _as_cross_error(item: Any) -> CrossValidationError:
    match item:
        case CrossValidationError():
            return item
        case {"field": field, "message": message}:
            return CrossValidationError(str(field), str(message))
        case (field, message):
            return CrossValidationError(str(field), str(message))
    raise SchemaError(f"cross_validate validator returned an invalid entry: {item!r}")


def _child_codec(codec: Codec | None, key: str) -> Codec | None:
    """Codec declared for ``key`` inside an object-like codec, if any."""
    if codec is None:
        return None
    codec = unwrap(codec)
    if codec.kind is Kind.RECURSIVE:
        codec = unwrap(codec.type)
    fields = getattr(codec, "fields", None)
    if fields is not None and key in fields:
        return fields[key]
    if codec.kind is Kind.ARRAY and is_index(key):
        return codec.item
    if codec.kind is Kind.DICTIONARY:
        return codec.codomain
    for member in getattr(codec, "members", ()):
        if (found := _child_codec(member, key)) is not None:
            return found
    return None


def _child_value(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key, UNDEFINED)
    if isinstance(value, (list, tuple)) and is_index(key) and int(key) < len(value):
        return value[int(key)]
    return UNDEFINED


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class CrossValidatedCodec(DelegatingCodec[Any]):
    """Run ``validator`` on the decoded value once ``inner`` accepts it.

    The validator returns the rule violations, each as a CrossValidationError,
    a ``{"field", "message"}`` mapping or a ``(field, message)`` pair. Every
    violation becomes its own failure at the named field path.
    """
    inner: Codec
    validator: Callable[[Any], Iterable[Any]]

    kind = Kind.CROSS_VALIDATED

    def __post_init__(self) -> None:
        if not is_codec(self.inner):
            raise SchemaError("cross_validate expects a codec")

    @property
    def name(self) -> str:
        return self.inner.name

    def _locate(self, decoded: Any, context: Context, field: str) -> tuple[Any, Context]:
        codec: Codec | None = self.inner
        value = decoded
        for key in _SEGMENT.findall(field):
            codec = _child_codec(codec, key)
            value = _child_value(value, key)
            context = append_context(context, key, codec or self)
        return value, context

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        result = self.inner.validate(value, context)
        if isinstance(result, Err):
            return result
        decoded = result.unwrap()
        try:
            violations = [_as_cross_error(item) for item in (self.validator(decoded) or ())]
        except SchemaError:
            raise
        except Exception as e:
            return failure(decoded, context, str(e))
        if not violations:
            return result
        errors: list[ValidationFailure] = []
        for violation in violations:
            actual, at = self._locate(decoded, context, violation.field)
            errors.append(ValidationFailure(value=actual, context=at, message=violation.message))
        return failures(errors)


def cross_validate(codec: Codec, validator: Callable[[Any], Iterable[Any]]) -> CrossValidatedCodec:
    return CrossValidatedCodec(codec, validator)


# ============================================================================
# Transformation
# ============================================================================

@dataclass(frozen=True, eq=False, repr=False, slots=True)
class TransformedCodec(DelegatingCodec[Any]):
    """Map the decoded value through ``fn``.

    The guard checks the transformed shape: it uses ``output`` when given and
    accepts anything otherwise. Encoding is the inner codec's; there is no
    inverse of ``fn``.
    """
    inner: Codec
    fn: Callable[[Any], Any]
    output: Codec | None = None

    kind = Kind.TRANSFORMED

    def __post_init__(self) -> None:
        if not is_codec(self.inner):
            raise SchemaError("transform expects a codec")
        if self.output is not None and not is_codec(self.output):
            raise SchemaError("transform output must be a codec")

    @property
    def name(self) -> str:
        return self.inner.name

    def is_(self, value: Any) -> bool:
        return self.output.is_(value) if self.output is not None else True

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        result = self.inner.validate(value, context)
        if isinstance(result, Err):
            return result
        try:
            return success(self.fn(result.unwrap()))
        except Exception as e:
            return failure(value, context, str(e) or type(e).__name__)


def transform(codec: Codec, fn: Callable[[Any], Any], output: Codec | None = None) -> TransformedCodec:
    return TransformedCodec(codec, fn, output)


# ============================================================================
# Custom messages
# ============================================================================

@dataclass(frozen=True, slots=True)
class CustomMessages:
    """Messages used when formatting failures of a codec.

    ``invalid`` may be a string or a function of the offending value.
    """
    invalid: str | Callable[[Any], str] | None = None
    required: str | None = None
    code: ErrorCode | str | None = None
    suggestion: str | None = None

    def invalid_message(self, value: Any) -> str | None:
        return self.invalid(value) if callable(self.invalid) else self.invalid

    @classmethod
    def coerce(cls, messages: CustomMessages | Mapping[str, Any] | Callable[[Any], str]) -> CustomMessages:
        if isinstance(messages, CustomMessages):
            return messages
        if isinstance(messages, Mapping):
            unknown = set(messages) - {"invalid", "required", "code", "suggestion"}
            if unknown:
                raise SchemaError(f"with_message got unknown keys: {sorted(unknown)}")
            return cls(**messages)
        if callable(messages):
            return cls(invalid=messages)
        raise SchemaError(f"with_message expects a mapping or a callable, got {type(messages).__name__}")


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class WithMessageCodec(DelegatingCodec[Any]):
    """Attach custom messages to ``inner``. Validation is unchanged."""
    inner: Codec
    messages: CustomMessages

    kind = Kind.WITH_MESSAGE

    def __post_init__(self) -> None:
        if not is_codec(self.inner):
            raise SchemaError("with_message expects a codec")

    @property
    def name(self) -> str:
        return self.inner.name

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        return self.inner.validate(value, context)


def with_message(codec: Codec,
                 messages: CustomMessages | Mapping[str, Any] | Callable[[Any], str]) -> WithMessageCodec:
    """Attach custom error messages to a codec.

    Usage:
        Username = with_message(NonEmptyString, {
            "required": "Username is required",
            "invalid": "Username cannot be empty",
        })
        Age = with_message(PositiveInteger, lambda v: f"{v} is not a valid age")
    """
    return WithMessageCodec(codec, CustomMessages.coerce(messages))


def custom_messages(codec: Codec) -> CustomMessages | None:
    """First message binding found on ``codec`` or the wrappers below it."""
    seen: set[int] = set()
    while isinstance(codec, DelegatingCodec) and id(codec) not in seen:
        if isinstance(codec, WithMessageCodec):
            return codec.messages
        seen.add(id(codec))
        codec = codec.inner
    return None
