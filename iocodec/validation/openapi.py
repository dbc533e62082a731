"""OpenAPI Schema Export

Converts codecs to OpenAPI 3 schema objects so routes validated through the
pipe can still document their payloads.

Usage:
    @app.post(
        "/users",
        responses=VALIDATION_RESPONSES,
        openapi_extra=request_body(CreateUserDto),
    )
    async def create_user(user: dict = body(CreateUserDto)):
        ...
"""
from __future__ import annotations

from typing import Any, Iterable

from iocodec.codecs.base import Codec, Kind, runtime_type
from iocodec.codecs.primitives import null, undefined

from .validate import resolve_codec

# Schema fragments layered over the base schema of each branded codec
BRANDED_SCHEMAS: dict[str, dict[str, Any]] = {
    "Email": {"format": "email"},
    "UUID": {"format": "uuid"},
    "URL": {"format": "uri"},
    "Phone": {"format": "phone"},
    "DateString": {"format": "date"},
    "DateTimeString": {"format": "date-time"},
    "IPv4": {"format": "ipv4"},
    "IPv6": {"format": "ipv6"},
    "IP": {"format": "ip"},
    "Integer": {"type": "integer"},
    "PositiveNumber": {"minimum": 0, "exclusiveMinimum": True},
    "NonNegativeNumber": {"minimum": 0},
    "PositiveInteger": {"type": "integer", "minimum": 1},
    "Port": {"type": "integer", "minimum": 0, "maximum": 65535},
    "Percentage": {"minimum": 0, "maximum": 100},
    "NonEmptyString": {"minLength": 1},
    "HexColor": {"pattern": "^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"},
    "Slug": {"pattern": "^[a-z0-9]+(?:-[a-z0-9]+)*$"},
    "Base64": {"format": "byte"},
    "JWT": {"format": "jwt"},
}

_PRIMITIVE_SCHEMAS: dict[str, dict[str, Any]] = {
    "string": {"type": "string"},
    "number": {"type": "number"},
    "boolean": {"type": "boolean"},
    "null": {"nullable": True},
    "undefined": {"nullable": True},
    "unknown": {},
    "UnknownArray": {"type": "array"},
    "UnknownRecord": {"type": "object"},
}


def _deep_merge(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    merged = dict(target)
    for key, value in source.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = current + [v for v in value if v not in current]
        else:
            merged[key] = value
    return merged


def _object_schema(fields: dict[str, Codec], required: bool, visiting: set[int]) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {key: to_openapi(codec, visiting) for key, codec in fields.items()},
    }
    if required and fields:
        schema["required"] = list(fields)
    return schema


def _union_schema(members: tuple[Codec, ...], visiting: set[int]) -> dict[str, Any]:
    present = [m for m in members if m is not null and m is not undefined]
    if len(members) == 2 and len(present) == 1:
        return {**to_openapi(present[0], visiting), "nullable": True}
    return {"oneOf": [to_openapi(m, visiting) for m in members]}


def to_openapi(codec: Codec, _visiting: set[int] | None = None) -> dict[str, Any]:
    """OpenAPI schema object for ``codec``.

    A codec met again while it is still being converted is emitted as a
    ``$ref`` to its name; named recursive codecs always are.
    """
    visiting = _visiting if _visiting is not None else set()
    if id(codec) in visiting:
        return {"$ref": f"#{codec.name}"}

    visiting.add(id(codec))
    try:
        match codec.kind:
            case Kind.PRIMITIVE:
                return dict(_PRIMITIVE_SCHEMAS.get(codec.name, {}))
            case Kind.RECORD:
                return _object_schema(dict(codec.fields), True, visiting)
            case Kind.PARTIAL_RECORD:
                return _object_schema(dict(codec.fields), False, visiting)
            case Kind.DICTIONARY:
                return {"type": "object", "additionalProperties": to_openapi(codec.codomain, visiting)}
            case Kind.ARRAY:
                return {"type": "array", "items": to_openapi(codec.item, visiting)}
            case Kind.TUPLE:
                return {
                    "type": "array",
                    "items": [to_openapi(c, visiting) for c in codec.items],
                    "minItems": len(codec.items),
                    "maxItems": len(codec.items),
                }
            case Kind.UNION:
                return _union_schema(codec.members, visiting)
            case Kind.INTERSECTION:
                merged: dict[str, Any] = {}
                for member in codec.members:
                    merged = _deep_merge(merged, to_openapi(member, visiting))
                return merged
            case Kind.LITERAL:
                if codec.value is None:
                    return {"nullable": True, "enum": [None]}
                return {"type": runtime_type(codec.value), "enum": [codec.value]}
            case Kind.KEYOF:
                return {"type": "string", "enum": list(codec.keys)}
            case Kind.READONLY:
                return {**to_openapi(codec.inner, visiting), "readOnly": True}
            case Kind.BRANDED:
                base = to_openapi(codec.base, visiting)
                if codec.name in BRANDED_SCHEMAS:
                    return {**base, **BRANDED_SCHEMAS[codec.name]}
                return {**base, "description": f"Refinement applied: {codec.name}"}
            case Kind.RECURSIVE:
                return {"$ref": f"#/components/schemas/{codec.name}"}
            case Kind.DEFAULTED:
                return {**to_openapi(codec.inner, visiting), "default": codec.inner.encode(codec.default)}
            case _:
                return to_openapi(codec.inner, visiting)
    finally:
        visiting.discard(id(codec))


def schema_components(codecs: Iterable[Codec]) -> dict[str, dict[str, Any]]:
    """``components.schemas`` entries for named recursive codecs."""
    return {codec.name: to_openapi(codec.type) for codec in codecs if codec.kind is Kind.RECURSIVE}


def request_body(codec_or_dto: Any, required: bool = True) -> dict[str, Any]:
    """``openapi_extra`` fragment describing a JSON request body."""
    return {
        "requestBody": {
            "required": required,
            "content": {"application/json": {"schema": to_openapi(resolve_codec(codec_or_dto))}},
        }
    }
