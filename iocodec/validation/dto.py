"""DTO Classes and Derivation

A DTO class is a named handle on a codec that the request pipeline recognises
by its type annotation. Derivations (pick, omit, partial, intersect) work on
the declared field map, never on data.

Usage:
    User = record({"id": UUID, "email": Email, "password": string})

    class CreateUserDto(create_dto(omit(User, ["id"]))):
        pass

    UpdateUserDto = create_partial_dto(User)
    user = CreateUserDto.create(payload)
"""
from __future__ import annotations

from typing import Any, ClassVar, Iterable

from iocodec.codecs.base import Codec, Kind, is_codec, unwrap
from iocodec.codecs.composite import IntersectionCodec, PartialRecordCodec, RecordCodec
from iocodec.errors.types import SchemaError


class CodecDto:
    """Base class of every DTO produced by create_dto."""

    codec: ClassVar[Codec]

    @classmethod
    def create(cls, input: Any) -> Any:
        """Decode ``input`` with the DTO's codec or raise CodecValidationException."""
        from .validate import decode_and_throw
        return decode_and_throw(input, cls.codec)


def create_dto(codec: Codec, name: str | None = None) -> type[CodecDto]:
    if not is_codec(codec):
        raise SchemaError(f"Invalid codec: create_dto expects a codec, got {type(codec).__name__}")
    return type(name or "CodecDto", (CodecDto,), {"codec": codec, "__module__": __name__})


def is_dto(obj: Any) -> bool:
    return (isinstance(obj, type) and issubclass(obj, CodecDto) and obj is not CodecDto
            and is_codec(getattr(obj, "codec", None)))


def _as_codec(codec_or_dto: Any) -> Codec:
    if is_dto(codec_or_dto):
        return codec_or_dto.codec
    if not is_codec(codec_or_dto):
        raise SchemaError(f"Invalid codec: expected a codec or DTO class, got {type(codec_or_dto).__name__}")
    return codec_or_dto


def _record(codec_or_dto: Any, operation: str) -> RecordCodec:
    codec = unwrap(_as_codec(codec_or_dto))
    if codec.kind is not Kind.RECORD:
        raise SchemaError(f"{operation} requires a record codec, got {codec.name}")
    return codec


def _record_like(codec_or_dto: Any, operation: str) -> Codec:
    codec = unwrap(_as_codec(codec_or_dto))
    if codec.kind not in (Kind.RECORD, Kind.PARTIAL_RECORD):
        raise SchemaError(f"{operation} requires record or partial record codecs, got {codec.name}")
    return codec


# ============================================================================
# Derivations
# ============================================================================

def pick(codec: Any, keys: Iterable[str]) -> RecordCodec:
    """Record with only ``keys``. Keys the record does not declare are ignored."""
    source = _record(codec, "pick")
    wanted = list(keys)
    return RecordCodec({k: source.fields[k] for k in wanted if k in source.fields})


def omit(codec: Any, keys: Iterable[str]) -> RecordCodec:
    source = _record(codec, "omit")
    dropped = set(keys)
    return RecordCodec({k: c for k, c in source.fields.items() if k not in dropped})


def partial(codec: Any) -> PartialRecordCodec:
    """Same fields, none of them required."""
    return PartialRecordCodec(_record(codec, "partial").fields)


def intersect(a: Any, b: Any) -> IntersectionCodec:
    return IntersectionCodec((_record_like(a, "intersect"), _record_like(b, "intersect")))


# ============================================================================
# DTO shortcuts
# ============================================================================

def create_pick_dto(codec: Any, keys: Iterable[str], name: str | None = None) -> type[CodecDto]:
    return create_dto(pick(codec, keys), name)


def create_omit_dto(codec: Any, keys: Iterable[str], name: str | None = None) -> type[CodecDto]:
    return create_dto(omit(codec, keys), name)


def create_partial_dto(codec: Any, name: str | None = None) -> type[CodecDto]:
    return create_dto(partial(codec), name)


def create_intersection_dto(a: Any, b: Any, name: str | None = None) -> type[CodecDto]:
    return create_dto(intersect(a, b), name)
