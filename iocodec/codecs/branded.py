"""Branded Validators

A branded codec narrows a primitive codec with a predicate and gives the
narrowed type its own name. The name is what error formatting and schema
export key their lookups on, so it must stay stable.

Usage:
    from iocodec.codecs import brand, number

    Even = brand(number, lambda n: n % 2 == 0, "Even")
    Even.decode(4)   # Ok(4)
    Even.decode(3)   # Err([...])
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable
from urllib.parse import urlparse

from iocodec.errors.builders import failure, success
from iocodec.errors.types import Context, Err, SchemaError, Validation

from .base import Codec, Kind, is_codec
from .primitives import number, string


@dataclass(frozen=True, eq=False, repr=False, slots=True)
class BrandedCodec(Codec[Any]):
    """Primitive codec refined by a predicate. Encoding is the identity."""
    base: Codec
    predicate: Callable[[Any], bool]
    brand_name: str

    kind = Kind.BRANDED

    def __post_init__(self) -> None:
        if not is_codec(self.base):
            raise SchemaError(f"brand '{self.brand_name}' expects a base codec")

    @property
    def name(self) -> str:
        return self.brand_name

    def is_(self, value: Any) -> bool:
        return self.base.is_(value) and self._accepts(value)

    def _accepts(self, value: Any) -> bool:
        return bool(self.predicate(value))

    def validate(self, value: Any, context: Context) -> Validation[Any]:
        result = self.base.validate(value, context)
        if isinstance(result, Err):
            return result
        decoded = result.unwrap()
        try:
            accepted = self._accepts(decoded)
        except Exception as e:
            return failure(value, context, f"Validation error: {e}")
        return success(decoded) if accepted else failure(value, context)

    def encode(self, value: Any) -> Any:
        return self.base.encode(value)


def brand(base: Codec, predicate: Callable[[Any], bool], name: str) -> BrandedCodec:
    return BrandedCodec(base, predicate, name)


# ============================================================================
# Patterns
# ============================================================================

_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?\.)+[A-Za-z]{2,}\Z"
)
_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}\Z", re.IGNORECASE)
_PHONE_RE = re.compile(r"^\+?[0-9\s\-().]{7,20}\Z")
_DATE_RE = re.compile(r"^[0-9]{4}-(?:0[1-9]|1[0-2])-(?:0[1-9]|[12][0-9]|3[01])\Z")
# Extended calendar form only: no week dates, ordinals or basic format
_DATETIME_RE = re.compile(
    r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}(?::[0-9]{2}(?:\.[0-9]+)?)?(?:Z|[+-][0-9]{2}:[0-9]{2})?\Z")
_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})\Z")
_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*\Z")
_BASE64_RE = re.compile(r"^(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?\Z")
_JWT_RE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*\Z")

_V4_SEG = r"(?:[0-9]|[1-9][0-9]|1[0-9][0-9]|2[0-4][0-9]|25[0-5])"
_V4_ADDR = rf"(?:{_V4_SEG}\.){{3}}{_V4_SEG}"
_V6_SEG = r"(?:[0-9a-fA-F]{1,4})"

_IPV4_RE = re.compile(rf"^{_V4_ADDR}\Z")
_IPV6_RE = re.compile(
    "^(?:"
    rf"(?:{_V6_SEG}:){{7}}(?:{_V6_SEG}|:)|"
    rf"(?:{_V6_SEG}:){{6}}(?:{_V4_ADDR}|:{_V6_SEG}|:)|"
    rf"(?:{_V6_SEG}:){{5}}(?::{_V4_ADDR}|(?::{_V6_SEG}){{1,2}}|:)|"
    rf"(?:{_V6_SEG}:){{4}}(?:(?::{_V6_SEG}){{0,1}}:{_V4_ADDR}|(?::{_V6_SEG}){{1,3}}|:)|"
    rf"(?:{_V6_SEG}:){{3}}(?:(?::{_V6_SEG}){{0,2}}:{_V4_ADDR}|(?::{_V6_SEG}){{1,4}}|:)|"
    rf"(?:{_V6_SEG}:){{2}}(?:(?::{_V6_SEG}){{0,3}}:{_V4_ADDR}|(?::{_V6_SEG}){{1,5}}|:)|"
    rf"(?:{_V6_SEG}:){{1}}(?:(?::{_V6_SEG}){{0,4}}:{_V4_ADDR}|(?::{_V6_SEG}){{1,6}}|:)|"
    rf"(?::(?:(?::{_V6_SEG}){{0,5}}:{_V4_ADDR}|(?::{_V6_SEG}){{1,7}}|:))"
    r")(?:%[0-9a-zA-Z\-.:]+)?\Z"
)


# ============================================================================
# Predicates
# ============================================================================

def is_email(s: str) -> bool:
    if len(s) > 254:
        return False
    local, at, domain = s.partition("@")
    if not at or len(local) > 64 or len(domain) > 255:
        return False
    return _EMAIL_RE.match(s) is not None


def is_url(s: str) -> bool:
    scheme, sep, rest = s.partition(":")
    if not sep or scheme.lower() not in ("http", "https"):
        return False
    # http(s) URLs tolerate any run of slashes between the scheme and the host
    rest = rest.replace("\\", "/").lstrip("/")
    try:
        parsed = urlparse(f"{scheme}://{rest}")
        host, _ = parsed.hostname, parsed.port
    except ValueError:
        return False
    return bool(host) and not any(ch.isspace() for ch in host)


def is_phone(s: str) -> bool:
    if not _PHONE_RE.match(s):
        return False
    digits = sum(ch in "0123456789" for ch in s)
    return 7 <= digits <= 15


def is_date_string(s: str) -> bool:
    if not _DATE_RE.match(s):
        return False
    year, month, day = (int(part) for part in s.split("-"))
    try:
        parsed = date(year, month, day)
    except ValueError:
        return False
    return (parsed.year, parsed.month, parsed.day) == (year, month, day)


def is_datetime_string(s: str) -> bool:
    if not _DATETIME_RE.match(s):
        return False
    try:
        datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def _is_int(n: float) -> bool:
    return isinstance(n, int) or n.is_integer()


# ============================================================================
# Strings
# ============================================================================

Email = brand(string, is_email, "Email")
UUID = brand(string, lambda s: _UUID_RE.match(s) is not None, "UUID")
URL = brand(string, is_url, "URL")
Phone = brand(string, is_phone, "Phone")
DateString = brand(string, is_date_string, "DateString")
DateTimeString = brand(string, is_datetime_string, "DateTimeString")
IPv4 = brand(string, lambda s: _IPV4_RE.match(s) is not None, "IPv4")
IPv6 = brand(string, lambda s: _IPV6_RE.match(s) is not None, "IPv6")
IP = brand(string, lambda s: _IPV4_RE.match(s) is not None or _IPV6_RE.match(s) is not None, "IP")

NonEmptyString = brand(string, lambda s: len(s) > 0, "NonEmptyString")
TrimmedString = brand(string, lambda s: s == s.strip(), "TrimmedString")
LowercaseString = brand(string, lambda s: s == s.lower(), "LowercaseString")
UppercaseString = brand(string, lambda s: s == s.upper(), "UppercaseString")
HexColor = brand(string, lambda s: _HEX_COLOR_RE.match(s) is not None, "HexColor")
Slug = brand(string, lambda s: _SLUG_RE.match(s) is not None, "Slug")
Base64 = brand(string, lambda s: _BASE64_RE.match(s) is not None, "Base64")
JWT = brand(string, lambda s: _JWT_RE.match(s) is not None, "JWT")

# ============================================================================
# Numbers
# ============================================================================

Integer = brand(number, _is_int, "Integer")
PositiveNumber = brand(number, lambda n: n > 0, "PositiveNumber")
NonNegativeNumber = brand(number, lambda n: n >= 0, "NonNegativeNumber")
PositiveInteger = brand(number, lambda n: _is_int(n) and n > 0, "PositiveInteger")
Port = brand(number, lambda n: _is_int(n) and 0 <= n <= 65535, "Port")
Percentage = brand(number, lambda n: 0 <= n <= 100, "Percentage")

BRANDED_VALIDATORS: dict[str, BrandedCodec] = {
    codec.name: codec for codec in (
        Email, UUID, URL, Phone, DateString, DateTimeString, IPv4, IPv6, IP,
        Integer, PositiveNumber, NonNegativeNumber, PositiveInteger, Port, Percentage,
        NonEmptyString, TrimmedString, LowercaseString, UppercaseString,
        HexColor, Slug, Base64, JWT,
    )
}
