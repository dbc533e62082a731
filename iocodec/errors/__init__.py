"""Monadic Error Handling for Codecs

Codecs never raise for bad input: they return a Result whose Err side is a
list of ValidationFailure records, each carrying the full path context.
Only the facade (decode_and_throw) turns failures into an exception.

Usage:
    from iocodec.errors import Ok, Err

    match codec.decode(payload):
        case Ok(value):
            handle(value)
        case Err(failures):
            log.info("rejected", count=len(failures))
"""
from .types import (
    # Core types
    Result,
    Validation,
    Ok,
    Err,
    ErrorCode,
    SchemaError,
    ContextEntry,
    Context,
    ValidationFailure,
    UNDEFINED,
)

from .builders import (
    success,
    failure,
    failures,
    root_context,
    is_index,
    append_context,
)

__all__ = [
    # Core types
    "Result",
    "Validation",
    "Ok",
    "Err",
    "ErrorCode",
    "SchemaError",
    "ContextEntry",
    "Context",
    "ValidationFailure",
    "UNDEFINED",
    # Builders
    "success",
    "failure",
    "failures",
    "root_context",
    "append_context",
    "is_index",
]
