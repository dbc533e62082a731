"""Composite Codecs

Shapes built from other codecs: objects, arrays, tuples, unions,
intersections, literals, string enums, dictionaries and recursive types.

Every composite validates exhaustively: an object reports a failure for each
bad field rather than stopping at the first one. Context is extended by
building a new tuple per descent, so sibling paths never leak into each other.
"""
from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from iocodec.errors.builders import append_context, failure, failures, success
from iocodec.errors.types import (
    UNDEFINED, Context, Err, Ok, SchemaError, Validation, ValidationFailure,
)

from .base import Codec, DelegatingCodec, Kind, is_codec, runtime_type
from .primitives import null, undefined


def _require_codec(obj: Any, where: str) -> Codec:
    if not is_codec(obj):
        raise SchemaError(f"{where} expects a codec, got {type(obj).__name__}")
    return obj


def _freeze_fields(fields: Mapping[str, Codec], where: str) -> Mapping[str, Codec]:
    if not isinstance(fields, Mapping):
        raise SchemaError(f"{where} expects a mapping of field codecs, got {type(fields).__name__}")
    for key, codec in fields.items():
        _require_codec(codec, f"{where} field '{key}'")
    return MappingProxyType(dict(fields))


def _fields_name(fields: Mapping[str, Codec]) -> str:
    if not fields:
        return "{}"
    return "{ " + ", ".join(f"{key}: {codec.name}" for key, codec in fields.items()) + " }"


def _assign(output: dict, source: dict, key: str, decoded: Any) -> None:
    # Absent keys stay absent unless decoding produced a value (e.g. a default).
    if decoded is UNDEFINED and key not in source:
        return
    output[key] = decoded


# ============================================================================
# Objects
# ============================================================================

@dataclass(frozen=True, eq=False, repr=False, slots=True)
class RecordCodec(Codec[dict]):
    """Object with required fields. Unknown keys are carried through unchanged."""
    fields: Mapping[str, Codec]
    type_name: str | None = None

    kind = Kind.RECORD

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _freeze_fields(self.fields, "record"))

    @property
    def name(self) -> str:
        return self.type_name or _fields_name(self.fields)

    def is_(self, value: Any) -> bool:
        return isinstance(value, dict) and all(
            codec.is_(value.get(key, UNDEFINED)) for key, codec in self.fields.items())

    def validate(self, value: Any, context: Context) -> Validation[dict]:
        if not isinstance(value, dict):
            return failure(value, context)
        errors: list[ValidationFailure] = []
        output = dict(value)
        for key, codec in self.fields.items():
            actual = value.get(key, UNDEFINED)
            match codec.validate(actual, append_context(context, key, codec)):
                case Ok(decoded):
                    _assign(output, value, key, decoded)
                case Err(failed):
                    errors.extend(failed)
        return failures(errors) if errors else success(output)

    def encode(self, value: dict) -> dict:
        encoded = dict(value)
        for key, codec in self.fields.items():
            if key in value:
                encoded[key] = codec.encode(value[key])
        return encoded


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class PartialRecordCodec(Codec[dict]):
    """Object whose fields may be absent; present fields must validate."""
    fields: Mapping[str, Codec]
    type_name: str | None = None

    kind = Kind.PARTIAL_RECORD

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _freeze_fields(self.fields, "partial_record"))

    @property
    def name(self) -> str:
        return self.type_name or f"Partial<{_fields_name(self.fields)}>"

    def is_(self, value: Any) -> bool:
        if not isinstance(value, dict):
            return False
        for key, codec in self.fields.items():
            actual = value.get(key, UNDEFINED)
            if actual is not UNDEFINED and not codec.is_(actual):
                return False
        return True

    def validate(self, value: Any, context: Context) -> Validation[dict]:
        if not isinstance(value, dict):
            return failure(value, context)
        errors: list[ValidationFailure] = []
        output = dict(value)
        for key, codec in self.fields.items():
            actual = value.get(key, UNDEFINED)
            if actual is UNDEFINED:
                continue
            match codec.validate(actual, append_context(context, key, codec)):
                case Ok(decoded):
                    _assign(output, value, key, decoded)
                case Err(failed):
                    errors.extend(failed)
        return failures(errors) if errors else success(output)

    def encode(self, value: dict) -> dict:
        encoded = dict(value)
        for key, codec in self.fields.items():
            if value.get(key, UNDEFINED) is not UNDEFINED:
                encoded[key] = codec.encode(value[key])
        return encoded


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class DictionaryCodec(Codec[dict]):
    """Object with arbitrary keys: every key and every value is validated."""
    domain: Codec
    codomain: Codec
    type_name: str | None = None

    kind = Kind.DICTIONARY

    def __post_init__(self) -> None:
        _require_codec(self.domain, "dictionary domain")
        _require_codec(self.codomain, "dictionary codomain")

    @property
    def name(self) -> str:
        return self.type_name or f"{{ [K in {self.domain.name}]: {self.codomain.name} }}"

    def is_(self, value: Any) -> bool:
        return isinstance(value, dict) and all(
            self.domain.is_(k) and self.codomain.is_(v) for k, v in value.items())

    def validate(self, value: Any, context: Context) -> Validation[dict]:
        if not isinstance(value, dict):
            return failure(value, context)
        errors: list[ValidationFailure] = []
        output: dict = {}
        for key, item in value.items():
            key_result = self.domain.validate(key, append_context(context, key, self.domain))
            item_result = self.codomain.validate(item, append_context(context, key, self.codomain))
            if key_result.is_err():
                errors.extend(key_result.unwrap_err())
            if item_result.is_err():
                errors.extend(item_result.unwrap_err())
            if key_result.is_ok() and item_result.is_ok():
                output[key_result.unwrap()] = item_result.unwrap()
        return failures(errors) if errors else success(output)

    def encode(self, value: dict) -> dict:
        return {self.domain.encode(k): self.codomain.encode(v) for k, v in value.items()}


# ============================================================================
# Sequences
# ============================================================================

@dataclass(frozen=True, eq=False, repr=False, slots=True)
class ArrayCodec(Codec[list]):
    """Homogeneous array; each element is validated under its index."""
    item: Codec
    type_name: str | None = None

    kind = Kind.ARRAY

    def __post_init__(self) -> None:
        _require_codec(self.item, "array")

    @property
    def name(self) -> str:
        return self.type_name or f"Array<{self.item.name}>"

    def is_(self, value: Any) -> bool:
        return isinstance(value, (list, tuple)) and all(self.item.is_(v) for v in value)

    def validate(self, value: Any, context: Context) -> Validation[list]:
        if not isinstance(value, (list, tuple)):
            return failure(value, context)
        errors: list[ValidationFailure] = []
        output: list = []
        for index, actual in enumerate(value):
            match self.item.validate(actual, append_context(context, index, self.item)):
                case Ok(decoded):
                    output.append(decoded)
                case Err(failed):
                    errors.extend(failed)
        return failures(errors) if errors else success(output)

    def encode(self, value: list) -> list:
        return [self.item.encode(v) for v in value]


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class TupleCodec(Codec[list]):
    """Fixed-length array validated position by position."""
    items: tuple[Codec, ...]
    type_name: str | None = None

    kind = Kind.TUPLE

    def __post_init__(self) -> None:
        items = tuple(self.items)
        for codec in items:
            _require_codec(codec, "tuple")
        object.__setattr__(self, "items", items)

    @property
    def name(self) -> str:
        return self.type_name or "[" + ", ".join(c.name for c in self.items) + "]"

    def is_(self, value: Any) -> bool:
        return (isinstance(value, (list, tuple)) and len(value) == len(self.items)
                and all(c.is_(v) for c, v in zip(self.items, value)))

    def validate(self, value: Any, context: Context) -> Validation[list]:
        if not isinstance(value, (list, tuple)):
            return failure(value, context)
        errors: list[ValidationFailure] = []
        output: list = []
        for index, codec in enumerate(self.items):
            actual = value[index] if index < len(value) else UNDEFINED
            match codec.validate(actual, append_context(context, index, codec)):
                case Ok(decoded):
                    output.append(decoded)
                case Err(failed):
                    errors.extend(failed)
        if len(value) > len(self.items):
            extra = len(self.items)
            errors.append(ValidationFailure(
                value=value[extra],
                context=append_context(context, extra, self),
                message=f"Expected at most {len(self.items)} elements but received {len(value)}",
            ))
        return failures(errors) if errors else success(output)

    def encode(self, value: list) -> list:
        return [c.encode(v) for c, v in zip(self.items, value)]


# ============================================================================
# Unions and Intersections
# ============================================================================

def value_category(codec: Codec, _depth: int = 0) -> str | None:
    """Runtime category a codec's accepted values belong to, if there is one."""
    if _depth > 16:
        return None
    match codec.kind:
        case Kind.PRIMITIVE:
            return {"string": "string", "number": "number", "boolean": "boolean",
                    "null": "null", "undefined": "undefined",
                    "UnknownArray": "array", "UnknownRecord": "object"}.get(codec.name)
        case Kind.RECORD | Kind.PARTIAL_RECORD | Kind.DICTIONARY | Kind.INTERSECTION:
            return "object"
        case Kind.ARRAY | Kind.TUPLE:
            return "array"
        case Kind.LITERAL:
            return runtime_type(codec.value)
        case Kind.KEYOF:
            return "string"
        case Kind.BRANDED:
            return value_category(codec.base, _depth + 1)
        case Kind.RECURSIVE:
            return value_category(codec.type, _depth + 1)
        case _:
            inner = getattr(codec, "inner", None)
            return value_category(inner, _depth + 1) if inner is not None else None


def _is_absent_branch(codec: Codec) -> bool:
    return codec is null or codec is undefined


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class UnionCodec(Codec[Any]):
    """Accepts a value if any member accepts it; members are tried in order.

    On total failure the failures of every member are returned, closest member
    first: members of the value's own category, then other members, then the
    bare null/undefined members.
    """
    members: tuple[Codec, ...]
    type_name: str | None = None

    kind = Kind.UNION

    def __post_init__(self) -> None:
        members = tuple(self.members)
        if not members:
            raise SchemaError("union requires at least one member codec")
        for codec in members:
            _require_codec(codec, "union")
        object.__setattr__(self, "members", members)

    @property
    def name(self) -> str:
        return self.type_name or "(" + " | ".join(c.name for c in self.members) + ")"

    def is_(self, value: Any) -> bool:
        return any(c.is_(value) for c in self.members)

    def _rank(self, codec: Codec, category: str) -> int:
        if _is_absent_branch(codec):
            return 2
        return 0 if value_category(codec) == category else 1

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        attempts: list[tuple[Codec, list[ValidationFailure]]] = []
        for codec in self.members:
            result = codec.validate(value, append_context(context, "", codec))
            if result.is_ok():
                return result
            attempts.append((codec, result.unwrap_err()))
        category = runtime_type(value)
        attempts.sort(key=lambda attempt: self._rank(attempt[0], category))
        return failures(f for _, failed in attempts for f in failed)

    def encode(self, value: Any) -> Any:
        for codec in self.members:
            if codec.is_(value):
                return codec.encode(value)
        return value


def _merge(base: Any, decoded: Any) -> Any:
    if isinstance(base, dict) and isinstance(decoded, dict):
        return {**base, **decoded}
    return decoded


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class IntersectionCodec(Codec[Any]):
    """Accepts a value only if every member accepts it.

    Object outputs are merged field by field; later members win on conflicts.
    """
    members: tuple[Codec, ...]
    type_name: str | None = None

    kind = Kind.INTERSECTION

    def __post_init__(self) -> None:
        members = tuple(self.members)
        if not members:
            raise SchemaError("intersection requires at least one member codec")
        for codec in members:
            _require_codec(codec, "intersection")
        object.__setattr__(self, "members", members)

    @property
    def name(self) -> str:
        return self.type_name or "(" + " & ".join(c.name for c in self.members) + ")"

    def is_(self, value: Any) -> bool:
        return all(c.is_(value) for c in self.members)

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        errors: list[ValidationFailure] = []
        merged = value
        for codec in self.members:
            match codec.validate(value, append_context(context, "", codec)):
                case Ok(decoded):
                    merged = _merge(merged, decoded)
                case Err(failed):
                    errors.extend(failed)
        return failures(errors) if errors else success(merged)

    def encode(self, value: Any) -> Any:
        encoded = value
        for codec in self.members:
            encoded = _merge(encoded, codec.encode(value))
        return encoded


# ============================================================================
# Exact Values
# ============================================================================

def _same_literal(value: Any, expected: Any) -> bool:
    if isinstance(expected, bool) or isinstance(value, bool):
        return type(value) is type(expected) and value == expected
    if isinstance(expected, (int, float)):
        return isinstance(value, (int, float)) and value == expected
    return type(value) is type(expected) and value == expected


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class LiteralCodec(Codec[Any]):
    """Accepts exactly one value (string, number, boolean or null)."""
    value: str | int | float | bool | None
    type_name: str | None = None

    kind = Kind.LITERAL

    @property
    def name(self) -> str:
        return self.type_name or json.dumps(self.value)

    def is_(self, value: Any) -> bool:
        return _same_literal(value, self.value)

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        return success(value) if _same_literal(value, self.value) else failure(value, context)


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class KeyofCodec(Codec[str]):
    """String enum: the value must be one of the given keys."""
    keys: tuple[str, ...]
    type_name: str | None = None

    kind = Kind.KEYOF

    def __post_init__(self) -> None:
        keys = tuple(self.keys)
        if not all(isinstance(k, str) for k in keys):
            raise SchemaError("keyof expects string keys")
        object.__setattr__(self, "keys", keys)

    @property
    def name(self) -> str:
        return self.type_name or " | ".join(json.dumps(k) for k in self.keys)

    def is_(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.keys

    def validate(self, value: Any, context: Context) -> Validation[str]:
        return success(value) if self.is_(value) else failure(value, context)


# ============================================================================
# Wrappers
# ============================================================================

@dataclass(frozen=True, eq=False, repr=False, slots=True)
class ReadonlyCodec(DelegatingCodec[Any]):
    """Marks a shape as read-only; validation is the inner codec's."""
    inner: Codec
    type_name: str | None = None

    kind = Kind.READONLY

    def __post_init__(self) -> None:
        _require_codec(self.inner, "readonly")

    @property
    def name(self) -> str:
        return self.type_name or f"Readonly<{self.inner.name}>"

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        return self.inner.validate(value, context)


class RecursiveCodec(Codec[Any]):
    """Self-referential codec resolved lazily on first use.

    ``definition`` receives the recursive codec itself and returns the codec it
    stands for. Resolution happens once; a definition that needs its own
    resolved shape to build itself is rejected with SchemaError.
    """

    kind = Kind.RECURSIVE

    def __init__(self, name: str, definition: Callable[[RecursiveCodec], Codec]):
        if not callable(definition):
            raise SchemaError("recursive expects a callable definition")
        self._name = name
        self._definition = definition
        self._resolved: Codec | None = None
        self._resolving = False
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> Codec:
        if self._resolved is None:
            with self._lock:
                if self._resolved is None:
                    if self._resolving:
                        raise SchemaError(f"recursive codec '{self._name}' was used while being defined")
                    self._resolving = True
                    try:
                        resolved = self._definition(self)
                    finally:
                        self._resolving = False
                    self._resolved = _require_codec(resolved, f"recursive '{self._name}' definition")
        return self._resolved

    def is_(self, value: Any) -> bool:
        return self.type.is_(value)

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        return self.type.validate(value, context)

    def encode(self, value: Any) -> Any:
        return self.type.encode(value)


# ============================================================================
# Constructors
# ============================================================================

def record(fields: Mapping[str, Codec], name: str | None = None) -> RecordCodec:
    return RecordCodec(fields, name)


def partial_record(fields: Mapping[str, Codec], name: str | None = None) -> PartialRecordCodec:
    return PartialRecordCodec(fields, name)


def dictionary(domain: Codec, codomain: Codec, name: str | None = None) -> DictionaryCodec:
    return DictionaryCodec(domain, codomain, name)


def array(item: Codec, name: str | None = None) -> ArrayCodec:
    return ArrayCodec(item, name)


def tuple_of(*items: Codec, name: str | None = None) -> TupleCodec:
    return TupleCodec(items, name)


def union(members: Iterable[Codec], name: str | None = None) -> UnionCodec:
    return UnionCodec(tuple(members), name)


def intersection(members: Iterable[Codec], name: str | None = None) -> IntersectionCodec:
    return IntersectionCodec(tuple(members), name)


def literal(value: str | int | float | bool | None, name: str | None = None) -> LiteralCodec:
    return LiteralCodec(value, name)


def keyof(keys: Mapping[str, Any] | Iterable[str], name: str | None = None) -> KeyofCodec:
    return KeyofCodec(tuple(keys), name)


def readonly(codec: Codec, name: str | None = None) -> ReadonlyCodec:
    return ReadonlyCodec(codec, name)


def recursive(name: str, definition: Callable[[RecursiveCodec], Codec]) -> RecursiveCodec:
    """Define a codec in terms of itself.

    Usage:
        Category = recursive("Category", lambda self: record({
            "name": string,
            "children": array(self),
        }))
    """
    return RecursiveCodec(name, definition)
