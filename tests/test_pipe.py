"""Tests for ValidationPipe argument handling."""

import pytest
from structlog.testing import capture_logs

from iocodec.codecs import Email, number, record, string
from iocodec.errors import SchemaError
from iocodec.validation import (
    ArgumentMetadata,
    CodecValidationException,
    PipeOptions,
    ValidationPipe,
    create_dto,
)

UserDto = create_dto(record({"email": Email, "name": string}), "UserDto")
VALID = {"email": "a@b.co", "name": "Ada"}
INVALID = {"email": "nope", "name": 1}


class LegacyPayload:
    pass


def test_explicit_codec_validates():
    pipe = ValidationPipe(record({"n": number}))
    assert pipe.transform({"n": 1}, ArgumentMetadata("body")) == {"n": 1}
    with pytest.raises(CodecValidationException):
        pipe.transform({"n": "1"}, ArgumentMetadata("body"))


def test_explicit_dto_validates():
    pipe = ValidationPipe(UserDto)
    assert pipe.codec is UserDto.codec
    assert pipe.transform(VALID, ArgumentMetadata("body")) == VALID


def test_explicit_codec_wins_over_metatype():
    pipe = ValidationPipe(record({"n": number}))
    assert pipe.transform({"n": 1}, ArgumentMetadata("body", UserDto)) == {"n": 1}


def test_dto_metatype_is_used_without_explicit_codec():
    pipe = ValidationPipe()
    assert pipe.transform(VALID, ArgumentMetadata("body", UserDto)) == VALID

    with pytest.raises(CodecValidationException) as exc_info:
        pipe.transform(INVALID, ArgumentMetadata("body", UserDto))
    response = exc_info.value.get_response()
    assert response["statusCode"] == 400
    assert response["error"] == "Bad Request"
    assert [e["field"] for e in response["errors"]] == ["email", "name"]


def test_codec_metatype_is_used():
    pipe = ValidationPipe()
    with pytest.raises(CodecValidationException):
        pipe.transform("x", ArgumentMetadata("query", number))


@pytest.mark.parametrize("metatype", [None, str, int, float, bool, list, dict, object])
def test_primitive_metatypes_pass_through_silently(metatype):
    with capture_logs() as logs:
        assert ValidationPipe().transform(INVALID, ArgumentMetadata("body", metatype)) is INVALID
    assert logs == []


def test_unknown_class_passes_through_with_warning():
    with capture_logs() as logs:
        assert ValidationPipe().transform(INVALID, ArgumentMetadata("body", LegacyPayload)) is INVALID

    [entry] = logs
    assert entry["event"] == "unvalidated_passthrough"
    assert entry["log_level"] == "warning"
    assert entry["metatype"] == "LegacyPayload"
    assert entry["argument"] == "body"


def test_allow_passthrough_silences_warning():
    pipe = ValidationPipe({"allow_passthrough": True})
    with capture_logs() as logs:
        assert pipe.transform(INVALID, ArgumentMetadata("body", LegacyPayload)) is INVALID
    assert logs == []


def test_validate_types_limits_argument_kinds():
    pipe = ValidationPipe(UserDto, PipeOptions(validate_types={"body"}))
    assert pipe.options.validate_types == frozenset({"body"})
    assert pipe.transform(INVALID, ArgumentMetadata("query")) is INVALID
    with pytest.raises(CodecValidationException):
        pipe.transform(INVALID, ArgumentMetadata("body"))


def test_options_can_be_the_only_argument():
    pipe = ValidationPipe(PipeOptions(allow_passthrough=True))
    assert pipe.codec is None
    assert pipe.options.allow_passthrough

    pipe = ValidationPipe({"coerce_query_strings": True})
    assert pipe.codec is None
    assert pipe.options.coerce_query_strings


def test_default_options():
    options = ValidationPipe().options
    assert options == PipeOptions()
    assert options.validates("custom")
    assert not options.allow_passthrough
    assert not options.coerce_query_strings


def test_options_from_settings(monkeypatch):
    monkeypatch.setenv("IOCODEC_COERCE_QUERY_STRINGS", "true")
    monkeypatch.setenv("IOCODEC_ALLOW_PASSTHROUGH", "1")
    options = PipeOptions.from_settings(allow_passthrough=False)
    assert options.coerce_query_strings
    assert not options.allow_passthrough


def test_invalid_codec_is_rejected_at_construction():
    with pytest.raises(SchemaError):
        ValidationPipe("not a codec")
    with pytest.raises(TypeError):
        ValidationPipe({"unknown_option": True})
