"""Primitive Codecs

Leaf codecs over the JSON value categories. Booleans are never accepted as
numbers even though ``bool`` subclasses ``int``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from iocodec.errors.builders import failure, success
from iocodec.errors.types import UNDEFINED, Context, Validation

from .base import Codec, Kind


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class PrimitiveCodec(Codec[Any]):
    """Codec accepting exactly the values its guard accepts, unchanged."""
    type_name: str
    guard: Callable[[Any], bool]

    kind = Kind.PRIMITIVE

    @property
    def name(self) -> str:
        return self.type_name

    def is_(self, value: Any) -> bool:
        return self.guard(value)

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        return success(value) if self.guard(value) else failure(value, context)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


string = PrimitiveCodec("string", lambda v: isinstance(v, str))
number = PrimitiveCodec("number", _is_number)
boolean = PrimitiveCodec("boolean", lambda v: isinstance(v, bool))
null = PrimitiveCodec("null", lambda v: v is None)
undefined = PrimitiveCodec("undefined", lambda v: v is UNDEFINED)
unknown = PrimitiveCodec("unknown", lambda v: True)
unknown_array = PrimitiveCodec("UnknownArray", lambda v: isinstance(v, (list, tuple)))
unknown_record = PrimitiveCodec("UnknownRecord", lambda v: isinstance(v, dict))
