"""Validation Error Formatting

Turns raw codec failures into field-addressable diagnostics.

Error Format:
{
    "statusCode": 400,
    "message": "Validation failed",
    "error": "Bad Request",
    "errors": [
        {
            "field": "items[1].price",
            "message": "Expected number but received string",
            "value": "wrong",
            "expected": "number",
            "code": "INVALID_TYPE",
            "suggestion": "Please provide a valid number"
        }
    ]
}

Message precedence for a failure, first match wins:
1. custom ``required`` message when the value is missing (None/undefined)
2. custom ``invalid`` message when the value is present
3. explicit message carried by the failure (transform, cross-field rules)
4. the branded type's default message
5. generic REQUIRED for a missing value
6. generic INVALID_TYPE otherwise
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from iocodec.codecs.base import Codec, runtime_type, unwrap
from iocodec.codecs.combinators import custom_messages
from iocodec.errors.builders import is_index
from iocodec.errors.types import UNDEFINED, ErrorCode, ValidationFailure


@dataclass(frozen=True, slots=True)
class BrandedErrorInfo:
    code: ErrorCode
    message: str
    suggestion: str


BRANDED_ERROR_INFO: dict[str, BrandedErrorInfo] = {
    "Email": BrandedErrorInfo(
        ErrorCode.INVALID_EMAIL, "Invalid email format",
        "Please provide a valid email address (e.g., user@example.com)"),
    "UUID": BrandedErrorInfo(
        ErrorCode.INVALID_UUID, "Invalid UUID format",
        "Please provide a valid UUID (e.g., 550e8400-e29b-41d4-a716-446655440000)"),
    "URL": BrandedErrorInfo(
        ErrorCode.INVALID_URL, "Invalid URL format",
        "Please provide a valid URL starting with http:// or https://"),
    "Phone": BrandedErrorInfo(
        ErrorCode.INVALID_PHONE, "Invalid phone number format",
        "Please provide a valid phone number (e.g., +1-234-567-8900)"),
    "DateString": BrandedErrorInfo(
        ErrorCode.INVALID_DATE, "Invalid date format",
        "Please provide a date in ISO 8601 format (e.g., 2024-01-15)"),
    "DateTimeString": BrandedErrorInfo(
        ErrorCode.INVALID_DATETIME, "Invalid datetime format",
        "Please provide a datetime in ISO 8601 format (e.g., 2024-01-15T10:30:00Z)"),
    "IPv4": BrandedErrorInfo(
        ErrorCode.INVALID_IPV4, "Invalid IPv4 address",
        "Please provide a valid IPv4 address (e.g., 192.168.0.1)"),
    "IPv6": BrandedErrorInfo(
        ErrorCode.INVALID_IPV6, "Invalid IPv6 address",
        "Please provide a valid IPv6 address (e.g., 2001:db8::ff00:42:8329)"),
    "IP": BrandedErrorInfo(
        ErrorCode.INVALID_IP, "Invalid IP address",
        "Please provide a valid IPv4 or IPv6 address"),
    "Integer": BrandedErrorInfo(
        ErrorCode.INVALID_INTEGER, "Value must be an integer",
        "Please provide a whole number without decimals"),
    "PositiveNumber": BrandedErrorInfo(
        ErrorCode.INVALID_POSITIVE_NUMBER, "Value must be a positive number",
        "Please provide a number greater than 0"),
    "NonNegativeNumber": BrandedErrorInfo(
        ErrorCode.INVALID_NON_NEGATIVE_NUMBER, "Value must be non-negative",
        "Please provide a number greater than or equal to 0"),
    "PositiveInteger": BrandedErrorInfo(
        ErrorCode.INVALID_POSITIVE_INTEGER, "Value must be a positive integer",
        "Please provide a whole number greater than 0"),
    "Port": BrandedErrorInfo(
        ErrorCode.INVALID_PORT, "Invalid port number",
        "Please provide a port number between 0 and 65535"),
    "Percentage": BrandedErrorInfo(
        ErrorCode.INVALID_PERCENTAGE, "Invalid percentage value",
        "Please provide a number between 0 and 100"),
    "NonEmptyString": BrandedErrorInfo(
        ErrorCode.INVALID_NON_EMPTY_STRING, "Value cannot be empty",
        "Please provide a non-empty string"),
    "TrimmedString": BrandedErrorInfo(
        ErrorCode.INVALID_TRIMMED_STRING, "Value cannot have leading or trailing whitespace",
        "Please remove leading and trailing spaces"),
    "LowercaseString": BrandedErrorInfo(
        ErrorCode.INVALID_LOWERCASE_STRING, "Value must be lowercase",
        "Please provide a lowercase string"),
    "UppercaseString": BrandedErrorInfo(
        ErrorCode.INVALID_UPPERCASE_STRING, "Value must be uppercase",
        "Please provide an uppercase string"),
    "HexColor": BrandedErrorInfo(
        ErrorCode.INVALID_HEX_COLOR, "Invalid hex color code",
        "Please provide a valid hex color (e.g., #ff0000 or #f00)"),
    "Slug": BrandedErrorInfo(
        ErrorCode.INVALID_SLUG, "Invalid slug format",
        "Please provide a URL-safe slug using lowercase letters, numbers, and hyphens"),
    "Base64": BrandedErrorInfo(
        ErrorCode.INVALID_BASE64, "Invalid Base64 encoding",
        "Please provide a valid Base64 encoded string"),
    "JWT": BrandedErrorInfo(
        ErrorCode.INVALID_JWT, "Invalid JWT format",
        "Please provide a valid JSON Web Token"),
}


@dataclass(frozen=True, slots=True)
class ValidationError:
    """User-facing diagnostic for one field.

    - field: dot/bracket path to the offending value (``root`` for the top level)
    - message: human-readable explanation
    - value: the offending input, UNDEFINED when it was absent
    - expected: name of the codec that rejected it
    - code: machine-readable category
    - suggestion: how to fix it
    """
    field: str
    message: str
    value: Any = UNDEFINED
    expected: str | None = None
    code: str | None = None
    suggestion: str | None = None

    def to_dict(self, *, include_value: bool = True) -> dict[str, Any]:
        """Serialize for API responses."""
        result: dict[str, Any] = {"field": self.field, "message": self.message}
        if include_value and self.value is not UNDEFINED: result["value"] = self.value
        if self.expected is not None: result["expected"] = self.expected
        if self.code is not None: result["code"] = self.code
        if self.suggestion is not None: result["suggestion"] = self.suggestion
        return result


def field_path(failure: ValidationFailure) -> str:
    """Render the failure's context as ``a.b[0].c``; empty when at the root."""
    path = ""
    for key in failure.path:
        if is_index(key):
            path += f"[{key}]"
        elif path:
            path += f".{key}"
        else:
            path = key
    return path


def _error_info(expected: Codec | None, value: Any,
                message: str | None) -> tuple[str, str, str | None]:
    expected_name = expected.name if expected is not None else "unknown"
    is_required = value is None or value is UNDEFINED

    if expected is not None and (custom := custom_messages(expected)) is not None:
        code = str(custom.code) if custom.code is not None else None
        if is_required and custom.required:
            return code or ErrorCode.REQUIRED.value, custom.required, custom.suggestion
        if not is_required and custom.invalid is not None:
            return code or ErrorCode.INVALID_FORMAT.value, custom.invalid_message(value), custom.suggestion

    if message is not None:
        return ErrorCode.INVALID_FORMAT.value, message, None

    if expected is not None and (info := BRANDED_ERROR_INFO.get(unwrap(expected).name)) is not None:
        return info.code.value, info.message, info.suggestion

    if is_required:
        return (ErrorCode.REQUIRED.value, "Field is required",
                f"Please provide a value of type {expected_name}")

    return (ErrorCode.INVALID_TYPE.value,
            f"Expected {expected_name} but received {runtime_type(value)}",
            f"Please provide a valid {expected_name}")


def format_error(failure: ValidationFailure) -> ValidationError:
    """Format a single raw failure."""
    expected = failure.expected
    code, message, suggestion = _error_info(expected, failure.value, failure.message)
    return ValidationError(
        field=field_path(failure) or "root",
        message=message,
        value=failure.value,
        expected=expected.name if expected is not None else "unknown",
        code=code,
        suggestion=suggestion,
    )


def format_errors(failures: Iterable[ValidationFailure]) -> list[ValidationError]:
    """Format raw failures, keeping only the first error seen for each field path."""
    errors: dict[str, ValidationError] = {}
    for failure in failures:
        field = field_path(failure) or "root"
        if field not in errors:
            errors[field] = format_error(failure)
    return list(errors.values())


class CodecValidationException(Exception):
    """Raised by decode_and_throw with the formatted error list.

    A plain string is accepted for callers that only have a message; it is
    reported as a single error on the ``unknown`` field.
    """

    status_code = 400

    def __init__(self, errors: Sequence[ValidationError] | str):
        if isinstance(errors, str):
            errors = [ValidationError(field="unknown", message=errors, code=ErrorCode.UNKNOWN.value)]
        self.errors: list[ValidationError] = list(errors)
        super().__init__("Validation failed")

    def __str__(self) -> str:
        if len(self.errors) == 1: return f"{(e := self.errors[0]).field}: {e.message}"
        return f"Validation failed ({len(self.errors)} errors)"

    def get_errors(self) -> list[ValidationError]:
        return list(self.errors)

    def get_response(self, *, include_values: bool = True) -> dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "message": "Validation failed",
            "error": "Bad Request",
            "errors": [e.to_dict(include_value=include_values) for e in self.errors],
        }
