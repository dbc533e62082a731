"""iocodec: composable runtime codecs with structured validation errors.

Usage:
    from iocodec import record, string, Email, decode_and_throw

    User = record({"email": Email, "name": string})
    user = decode_and_throw(payload, User)
"""
from iocodec.codecs import *  # noqa: F401,F403
from iocodec.codecs import __all__ as _codecs_all
from iocodec.errors import (
    UNDEFINED,
    Err,
    ErrorCode,
    Ok,
    SchemaError,
    ValidationFailure,
)
from iocodec.validation import (
    CodecValidationException,
    ValidationError,
    ValidationPipe,
    PipeOptions,
    ArgumentMetadata,
    create_dto,
    create_intersection_dto,
    create_omit_dto,
    create_partial_dto,
    create_pick_dto,
    decode_and_throw,
    format_errors,
    intersect,
    is_dto,
    omit,
    partial,
    pick,
    to_openapi,
)

__version__ = "1.0.0"

__all__ = [
    *_codecs_all,
    "UNDEFINED", "Err", "ErrorCode", "Ok", "SchemaError", "ValidationFailure",
    "CodecValidationException", "ValidationError", "ValidationPipe", "PipeOptions",
    "ArgumentMetadata", "create_dto", "create_intersection_dto", "create_omit_dto",
    "create_partial_dto", "create_pick_dto", "decode_and_throw", "format_errors",
    "intersect", "is_dto", "omit", "partial", "pick", "to_openapi",
]
