"""Explicit Opt-in Query String Coercion

Query strings and path parameters arrive as text. When a pipe enables
``coerce_query_strings`` these rules turn the textual spellings of scalars back
into values before the codec sees them. Body payloads are never coerced.

Rules, tried in order on every string leaf:
- "true" / "false"      -> True / False
- "null"                -> None
- "undefined"           -> absent (the key is dropped from objects)
- "-12", "3.5"          -> int / float

Anything else, including the empty string, is left untouched.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from iocodec.errors.types import UNDEFINED, Err, Ok, Result

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CoercionRule(ABC, Generic[T]):
    """A single string-to-value conversion."""

    @property
    @abstractmethod
    def target_type(self) -> str:
        """Runtime category produced by this rule."""

    @abstractmethod
    def can_coerce(self, value: Any) -> bool:
        """Check if value can be coerced by this rule."""

    @abstractmethod
    def coerce(self, value: Any) -> Result[T, str]:
        """Coerce value. Returns Ok(coerced) or Err(reason)."""

    def __call__(self, value: Any) -> Result[T, str]:
        return self.coerce(value)


@dataclass(frozen=True, slots=True)
class StringToBool(CoercionRule[bool]):
    @property
    def target_type(self) -> str:
        return "boolean"

    def can_coerce(self, value: Any) -> bool:
        return value in ("true", "false")

    def coerce(self, value: Any) -> Result[bool, str]:
        if not self.can_coerce(value):
            return Err(f"Cannot coerce {value!r} to boolean")
        return Ok(value == "true")


@dataclass(frozen=True, slots=True)
class StringToNull(CoercionRule[None]):
    @property
    def target_type(self) -> str:
        return "null"

    def can_coerce(self, value: Any) -> bool:
        return value == "null"

    def coerce(self, value: Any) -> Result[None, str]:
        if not self.can_coerce(value):
            return Err(f"Cannot coerce {value!r} to null")
        return Ok(None)


@dataclass(frozen=True, slots=True)
class StringToUndefined(CoercionRule[Any]):
    @property
    def target_type(self) -> str:
        return "undefined"

    def can_coerce(self, value: Any) -> bool:
        return value == "undefined"

    def coerce(self, value: Any) -> Result[Any, str]:
        if not self.can_coerce(value):
            return Err(f"Cannot coerce {value!r} to undefined")
        return Ok(UNDEFINED)


_NUMERIC = re.compile(r"^-?[0-9]+(?:\.[0-9]+)?$")


@dataclass(frozen=True, slots=True)
class StringToNumber(CoercionRule[int | float]):
    """Integers stay ``int``; anything with a fraction becomes ``float``."""

    @property
    def target_type(self) -> str:
        return "number"

    def can_coerce(self, value: Any) -> bool:
        return isinstance(value, str) and _NUMERIC.match(value) is not None

    def coerce(self, value: Any) -> Result[int | float, str]:
        if not self.can_coerce(value):
            return Err(f"Cannot coerce {value!r} to number")
        return Ok(float(value) if "." in value else int(value))


QUERY_STRING_RULES: tuple[CoercionRule, ...] = (
    StringToBool(),
    StringToNull(),
    StringToUndefined(),
    StringToNumber(),
)


def coerce_scalar(value: Any, rules: tuple[CoercionRule, ...] = QUERY_STRING_RULES) -> Any:
    """Apply the first matching rule to a string; other values pass unchanged."""
    if not isinstance(value, str):
        return value
    for rule in rules:
        if rule.can_coerce(value):
            return rule.coerce(value).unwrap_or(value)
    return value


def coerce_query_strings(value: Any, rules: tuple[CoercionRule, ...] = QUERY_STRING_RULES) -> Any:
    """Coerce every string leaf of ``value``, descending into dicts and lists."""
    if isinstance(value, dict):
        coerced = {}
        for key, item in value.items():
            item = coerce_query_strings(item, rules)
            if item is not UNDEFINED:
                coerced[key] = item
        return coerced
    if isinstance(value, (list, tuple)):
        return [coerce_query_strings(item, rules) for item in value]
    return coerce_scalar(value, rules)
