"""Decode Facade

The one place where codec failures become an exception. Everything below this
layer returns Ok/Err.
"""
from __future__ import annotations

from typing import Any

from iocodec.codecs.base import Codec, is_codec
from iocodec.errors.types import Err, SchemaError
from iocodec.logging import validation_logger

from .dto import is_dto
from .errors import CodecValidationException, format_errors


def resolve_codec(codec_or_dto: Any) -> Codec:
    """The codec behind a codec or a DTO class."""
    if is_dto(codec_or_dto):
        return codec_or_dto.codec
    if is_codec(codec_or_dto):
        return codec_or_dto
    raise SchemaError(f"Invalid codec: expected a codec or DTO class, got {type(codec_or_dto).__name__}")


def decode_and_throw(value: Any, codec_or_dto: Any) -> Any:
    """Decode ``value`` and return the decoded value.

    Raises:
        CodecValidationException: with the formatted errors when decoding fails
        SchemaError: when ``codec_or_dto`` is neither a codec nor a DTO class
    """
    codec = resolve_codec(codec_or_dto)
    result = codec.decode(value)
    if isinstance(result, Err):
        errors = format_errors(result.unwrap_err())
        validation_logger().debug(
            "decode_failed",
            codec=codec.name,
            error_count=len(errors),
            fields=[e.field for e in errors],
        )
        raise CodecValidationException(errors)
    return result.unwrap()
