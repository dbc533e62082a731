"""Codec Algebra

Composable codecs that validate untyped JSON-like input, guard decoded values
and encode them back.

Usage:
    from iocodec.codecs import record, array, string, number, Email, optional

    User = record({
        "email": Email,
        "name": string,
        "age": optional(number),
        "tags": array(string),
    })

    match User.decode(payload):
        case Ok(user): ...
        case Err(failures): ...
"""
from .base import (
    Codec,
    DelegatingCodec,
    Kind,
    is_codec,
    runtime_type,
    unwrap,
)

from .primitives import (
    PrimitiveCodec,
    string,
    number,
    boolean,
    null,
    undefined,
    unknown,
    unknown_array,
    unknown_record,
)

from .composite import (
    RecordCodec,
    PartialRecordCodec,
    DictionaryCodec,
    ArrayCodec,
    TupleCodec,
    UnionCodec,
    IntersectionCodec,
    LiteralCodec,
    KeyofCodec,
    ReadonlyCodec,
    RecursiveCodec,
    record,
    partial_record,
    dictionary,
    array,
    tuple_of,
    union,
    intersection,
    literal,
    keyof,
    readonly,
    recursive,
    value_category,
)

from .branded import (
    BrandedCodec,
    brand,
    BRANDED_VALIDATORS,
    Email,
    UUID,
    URL,
    Phone,
    DateString,
    DateTimeString,
    IPv4,
    IPv6,
    IP,
    Integer,
    PositiveNumber,
    NonNegativeNumber,
    PositiveInteger,
    Port,
    Percentage,
    NonEmptyString,
    TrimmedString,
    LowercaseString,
    UppercaseString,
    HexColor,
    Slug,
    Base64,
    JWT,
)

from .combinators import (
    DefaultedCodec,
    CrossValidatedCodec,
    CrossValidationError,
    TransformedCodec,
    WithMessageCodec,
    CustomMessages,
    optional,
    nullable,
    with_default,
    cross_validate,
    transform,
    with_message,
    custom_messages,
)

__all__ = [
    # Base
    "Codec", "DelegatingCodec", "Kind", "is_codec", "runtime_type", "unwrap",
    # Primitives
    "PrimitiveCodec", "string", "number", "boolean", "null", "undefined",
    "unknown", "unknown_array", "unknown_record",
    # Composites
    "RecordCodec", "PartialRecordCodec", "DictionaryCodec", "ArrayCodec",
    "TupleCodec", "UnionCodec", "IntersectionCodec", "LiteralCodec",
    "KeyofCodec", "ReadonlyCodec", "RecursiveCodec",
    "record", "partial_record", "dictionary", "array", "tuple_of", "union",
    "intersection", "literal", "keyof", "readonly", "recursive", "value_category",
    # Branded
    "BrandedCodec", "brand", "BRANDED_VALIDATORS",
    "Email", "UUID", "URL", "Phone", "DateString", "DateTimeString",
    "IPv4", "IPv6", "IP", "Integer", "PositiveNumber", "NonNegativeNumber",
    "PositiveInteger", "Port", "Percentage", "NonEmptyString", "TrimmedString",
    "LowercaseString", "UppercaseString", "HexColor", "Slug", "Base64", "JWT",
    # Combinators
    "DefaultedCodec", "CrossValidatedCodec", "CrossValidationError",
    "TransformedCodec", "WithMessageCodec", "CustomMessages",
    "optional", "nullable", "with_default", "cross_validate", "transform",
    "with_message", "custom_messages",
]
