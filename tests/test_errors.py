"""Tests for error formatting, decode_and_throw and the validation exception."""

import pytest
from structlog.testing import capture_logs

from iocodec.codecs import (
    DateString,
    Email,
    Port,
    UUID,
    array,
    number,
    record,
    string,
)
from iocodec.errors import UNDEFINED, ErrorCode, SchemaError, ValidationFailure, append_context, root_context
from iocodec.validation import (
    CodecValidationException,
    ValidationError,
    create_dto,
    decode_and_throw,
    field_path,
    format_error,
    format_errors,
    resolve_codec,
)


def failure_at(codec, *keys, value="x", message=None):
    context = root_context(codec)
    for key in keys:
        context = append_context(context, key, codec)
    return ValidationFailure(value=value, context=context, message=message)


# ============================================================================
# Paths
# ============================================================================

@pytest.mark.parametrize("keys, expected", [
    ((), ""),
    (("name",), "name"),
    (("items", "1", "price"), "items[1].price"),
    (("0",), "[0]"),
    (("0", "name"), "[0].name"),
    (("matrix", "0", "1"), "matrix[0][1]"),
    (("a", "", "b"), "a.b"),
    (("items", "²"), "items.²"),
    (("²",), "²"),
])
def test_field_path(keys, expected):
    assert field_path(failure_at(string, *keys)) == expected


def test_root_failures_are_named_root():
    assert format_error(failure_at(string, value=1)).field == "root"


# ============================================================================
# Formatting precedence
# ============================================================================

def test_explicit_message_beats_branded_table():
    error = format_error(failure_at(Email, "email", value="x", message="Domain not allowed"))
    assert error.code == "INVALID_FORMAT"
    assert error.message == "Domain not allowed"
    assert error.suggestion is None


def test_branded_table():
    error = format_error(failure_at(DateString, "birthday", value="2024-13-01"))
    assert error.code == "INVALID_DATE"
    assert error.message == "Invalid date format"
    assert error.suggestion == "Please provide a date in ISO 8601 format (e.g., 2024-01-15)"
    assert error.expected == "DateString"


def test_generic_required_and_invalid_type():
    required = format_error(failure_at(number, "age", value=UNDEFINED))
    assert (required.code, required.message) == ("REQUIRED", "Field is required")

    wrong = format_error(failure_at(number, "age", value="ten"))
    assert wrong.code == "INVALID_TYPE"
    assert wrong.message == "Expected number but received string"
    assert wrong.suggestion == "Please provide a valid number"


def test_unknown_expected_without_context():
    error = format_error(ValidationFailure(value=1, context=()))
    assert error.expected == "unknown"
    assert error.field == "root"


# ============================================================================
# Deduplication
# ============================================================================

def test_first_error_per_field_wins():
    errors = format_errors([
        failure_at(string, "name", value=1, message="first"),
        failure_at(string, "name", value=1, message="second"),
        failure_at(string, "age", value=1),
    ])
    assert [(e.field, e.message) for e in errors] == [
        ("name", "first"),
        ("age", "Expected string but received number"),
    ]


def test_format_errors_empty():
    assert format_errors([]) == []


# ============================================================================
# ValidationError
# ============================================================================

def test_to_dict_omits_missing_parts():
    error = ValidationError(field="age", message="Field is required", code="REQUIRED")
    assert error.to_dict() == {"field": "age", "message": "Field is required", "code": "REQUIRED"}


def test_to_dict_keeps_null_values_and_can_hide_values():
    error = ValidationError(field="age", message="m", value=None, expected="number")
    assert error.to_dict() == {"field": "age", "message": "m", "value": None, "expected": "number"}
    assert "value" not in error.to_dict(include_value=False)


# ============================================================================
# decode_and_throw
# ============================================================================

User = record({"id": UUID, "password": string})


def test_decode_and_throw_returns_decoded_value():
    value = {"id": "550e8400-e29b-41d4-a716-446655440000", "password": "secret"}
    assert decode_and_throw(value, User) == value


def test_decode_and_throw_raises_with_formatted_errors():
    with pytest.raises(CodecValidationException) as exc_info:
        decode_and_throw({"id": "vasya", "password": 42}, User)

    errors = exc_info.value.get_errors()
    assert [e.field for e in errors] == ["id", "password"]
    assert errors[0].code == ErrorCode.INVALID_UUID.value


def test_decode_and_throw_logs_failures():
    with capture_logs() as logs:
        with pytest.raises(CodecValidationException):
            decode_and_throw({"port": 70000}, record({"port": Port}))

    event = next(e for e in logs if e["event"] == "decode_failed")
    assert event["log_level"] == "debug"
    assert event["error_count"] == 1
    assert event["fields"] == ["port"]


def test_decode_and_throw_accepts_dtos():
    Dto = create_dto(record({"email": Email}))
    assert decode_and_throw({"email": "a@b.co"}, Dto) == {"email": "a@b.co"}
    assert resolve_codec(Dto) is Dto.codec


def test_decode_and_throw_rejects_non_codecs():
    with pytest.raises(SchemaError, match="Invalid codec"):
        decode_and_throw({}, {"not": "a codec"})


def test_complex_nested_scenario():
    Company = record({
        "name": string,
        "employees": array(record({"email": Email, "addresses": array(record({"zip": string}))})),
    })
    with pytest.raises(CodecValidationException) as exc_info:
        decode_and_throw({
            "name": "Acme",
            "employees": [
                {"email": "ok@acme.io", "addresses": []},
                {"email": "broken", "addresses": [{"zip": 12345}]},
            ],
        }, Company)

    fields = [e.field for e in exc_info.value.errors]
    assert fields == ["employees[1].email", "employees[1].addresses[0].zip"]


# ============================================================================
# CodecValidationException
# ============================================================================

def test_exception_response_body():
    exc = CodecValidationException([
        ValidationError(field="email", message="Invalid email format", value="x",
                        expected="Email", code="INVALID_EMAIL"),
    ])
    assert exc.status_code == 400
    assert exc.get_response() == {
        "statusCode": 400,
        "message": "Validation failed",
        "error": "Bad Request",
        "errors": [{
            "field": "email",
            "message": "Invalid email format",
            "value": "x",
            "expected": "Email",
            "code": "INVALID_EMAIL",
        }],
    }
    assert "value" not in exc.get_response(include_values=False)["errors"][0]
    assert str(exc) == "email: Invalid email format"


def test_exception_from_plain_message():
    exc = CodecValidationException("Something went wrong")
    [error] = exc.get_errors()
    assert error.field == "unknown"
    assert error.message == "Something went wrong"
    assert error.code == "UNKNOWN"


def test_exception_summary_for_many_errors():
    exc = CodecValidationException([
        ValidationError(field="a", message="m"),
        ValidationError(field="b", message="m"),
    ])
    assert str(exc) == "Validation failed (2 errors)"
    assert exc.get_errors() is not exc.errors
