"""Request Validation Pipe

Decides, per handler argument, whether and how to validate the incoming value:
- an explicit codec or DTO given to the pipe always wins
- otherwise the argument's declared type is used when it is a DTO class
- primitive or missing declared types pass through untouched
- other classes pass through with a warning unless passthrough is allowed

FastAPI binding:
    from iocodec.validation import body, query

    @app.post("/users", responses=VALIDATION_RESPONSES)
    async def create_user(user: dict = body(CreateUserDto)):
        ...

    @app.get("/users")
    async def list_users(page: dict = query(Pagination)):
        ...
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from fastapi import Depends, Request

from iocodec.codecs.base import Codec, is_codec
from iocodec.errors.types import UNDEFINED
from iocodec.logging import pipe_logger

from .coercion import coerce_query_strings
from .dto import is_dto
from .errors import CodecValidationException
from .validate import decode_and_throw, resolve_codec

ArgumentType = Literal["body", "query", "param", "custom"]

_PRIMITIVE_METATYPES: frozenset[type] = frozenset({str, int, float, bool, list, dict, tuple, object})
_COERCED_ARGUMENTS = frozenset({"query", "param"})


@dataclass(frozen=True, slots=True)
class ArgumentMetadata:
    """Where a value comes from and what the handler declared it as."""
    type: ArgumentType
    metatype: Any = None
    data: str | None = None


@dataclass(frozen=True, slots=True)
class PipeOptions:
    """Pipe configuration, resolved once when the pipe is built.

    - validate_types: argument kinds to validate; None validates all of them
    - allow_passthrough: pass non-DTO classes through without a warning
    - coerce_query_strings: coerce textual scalars of query/param arguments
    """
    validate_types: frozenset[str] | None = None
    allow_passthrough: bool = False
    coerce_query_strings: bool = False

    def __post_init__(self) -> None:
        if self.validate_types is not None and not isinstance(self.validate_types, frozenset):
            object.__setattr__(self, "validate_types", frozenset(self.validate_types))

    @classmethod
    def from_settings(cls, **overrides: Any) -> PipeOptions:
        """Defaults from IOCODEC_* settings, with explicit overrides on top."""
        from iocodec.config import get_settings

        settings = get_settings()
        values: dict[str, Any] = {
            "allow_passthrough": settings.ALLOW_PASSTHROUGH,
            "coerce_query_strings": settings.COERCE_QUERY_STRINGS,
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def coerce(cls, options: PipeOptions | Mapping[str, Any] | None) -> PipeOptions:
        if options is None:
            return cls()
        if isinstance(options, PipeOptions):
            return options
        return cls(**dict(options))

    def validates(self, argument: str) -> bool:
        return self.validate_types is None or argument in self.validate_types


class ValidationPipe:
    """Validate handler arguments with a codec or the argument's DTO class.

    Options may be passed as the only argument:
        ValidationPipe(PipeOptions(allow_passthrough=True))
    """

    def __init__(self, codec_or_dto: Any = None,
                 options: PipeOptions | Mapping[str, Any] | None = None):
        if options is None and isinstance(codec_or_dto, (PipeOptions, Mapping)):
            codec_or_dto, options = None, codec_or_dto
        self.codec: Codec | None = resolve_codec(codec_or_dto) if codec_or_dto is not None else None
        self.options = PipeOptions.coerce(options)

    def transform(self, value: Any, metadata: ArgumentMetadata) -> Any:
        if not self.options.validates(metadata.type):
            return value

        if self.options.coerce_query_strings and metadata.type in _COERCED_ARGUMENTS:
            value = coerce_query_strings(value)

        if self.codec is not None:
            return decode_and_throw(value, self.codec)

        metatype = metadata.metatype
        if metatype is None or (isinstance(metatype, type) and metatype in _PRIMITIVE_METATYPES):
            return value
        if is_dto(metatype) or is_codec(metatype):
            return decode_and_throw(value, metatype)

        if isinstance(metatype, type) and not self.options.allow_passthrough:
            pipe_logger().warning(
                "unvalidated_passthrough",
                metatype=getattr(metatype, "__name__", repr(metatype)),
                argument=metadata.type,
                hint="Use a DTO created with create_dto() or pass allow_passthrough=True",
            )
        return value


# ============================================================================
# FastAPI dependencies
# ============================================================================

def _query_payload(request: Request) -> dict[str, Any]:
    params = request.query_params
    payload: dict[str, Any] = {}
    for key in dict.fromkeys(params.keys()):
        values = params.getlist(key)
        payload[key] = values if len(values) > 1 else values[0]
    return payload


def _metadata(argument: ArgumentType, codec_or_dto: Any) -> ArgumentMetadata:
    return ArgumentMetadata(type=argument, metatype=codec_or_dto if is_dto(codec_or_dto) else None)


def body(codec_or_dto: Any, options: PipeOptions | Mapping[str, Any] | None = None) -> Any:
    """Dependency that decodes the JSON request body."""
    pipe = ValidationPipe(codec_or_dto, options if options is not None else PipeOptions.from_settings())
    metadata = _metadata("body", codec_or_dto)

    async def dependency(request: Request) -> Any:
        raw = await request.body()
        if not raw:
            payload = UNDEFINED
        else:
            try:
                payload = json.loads(raw)
            except ValueError:
                raise CodecValidationException("Request body is not valid JSON") from None
        return pipe.transform(payload, metadata)

    return Depends(dependency)


def query(codec_or_dto: Any, options: PipeOptions | Mapping[str, Any] | None = None) -> Any:
    """Dependency that decodes the query string; repeated keys become lists."""
    pipe = ValidationPipe(codec_or_dto, options if options is not None else PipeOptions.from_settings())
    metadata = _metadata("query", codec_or_dto)

    async def dependency(request: Request) -> Any:
        return pipe.transform(_query_payload(request), metadata)

    return Depends(dependency)


def path(codec_or_dto: Any, options: PipeOptions | Mapping[str, Any] | None = None) -> Any:
    """Dependency that decodes the path parameters."""
    pipe = ValidationPipe(codec_or_dto, options if options is not None else PipeOptions.from_settings())
    metadata = _metadata("param", codec_or_dto)

    async def dependency(request: Request) -> Any:
        return pipe.transform(dict(request.path_params), metadata)

    return Depends(dependency)
