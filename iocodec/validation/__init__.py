"""Validation Facade and Request Pipeline

- decode_and_throw: decode or raise CodecValidationException
- format_errors: raw failures to deduplicated, field-addressable errors
- DTO classes and derivations (pick, omit, partial, intersect)
- ValidationPipe and FastAPI dependencies (body, query, path)
- to_openapi: schema export for documentation
"""
from .errors import (
    BRANDED_ERROR_INFO,
    BrandedErrorInfo,
    CodecValidationException,
    ValidationError,
    field_path,
    format_error,
    format_errors,
)

from .dto import (
    CodecDto,
    create_dto,
    is_dto,
    pick,
    omit,
    partial,
    intersect,
    create_pick_dto,
    create_omit_dto,
    create_partial_dto,
    create_intersection_dto,
)

from .validate import (
    decode_and_throw,
    resolve_codec,
)

from .coercion import (
    CoercionRule,
    StringToBool,
    StringToNull,
    StringToUndefined,
    StringToNumber,
    QUERY_STRING_RULES,
    coerce_scalar,
    coerce_query_strings,
)

from .pipe import (
    ArgumentMetadata,
    PipeOptions,
    ValidationPipe,
    body,
    query,
    path,
)

from .openapi import (
    BRANDED_SCHEMAS,
    to_openapi,
    schema_components,
    request_body,
)

__all__ = [
    # Errors
    "BRANDED_ERROR_INFO", "BrandedErrorInfo", "CodecValidationException",
    "ValidationError", "field_path", "format_error", "format_errors",
    # DTOs
    "CodecDto", "create_dto", "is_dto", "pick", "omit", "partial", "intersect",
    "create_pick_dto", "create_omit_dto", "create_partial_dto", "create_intersection_dto",
    # Facade
    "decode_and_throw", "resolve_codec",
    # Coercion
    "CoercionRule", "StringToBool", "StringToNull", "StringToUndefined",
    "StringToNumber", "QUERY_STRING_RULES", "coerce_scalar", "coerce_query_strings",
    # Pipe
    "ArgumentMetadata", "PipeOptions", "ValidationPipe", "body", "query", "path",
    # OpenAPI
    "BRANDED_SCHEMAS", "to_openapi", "schema_components", "request_body",
]
