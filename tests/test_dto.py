"""Tests for DTO classes and field-map derivations."""

import pytest

from iocodec.codecs import (
    Email,
    Kind,
    PositiveInteger,
    UUID,
    number,
    partial_record,
    readonly,
    record,
    string,
)
from iocodec.errors import Ok, SchemaError
from iocodec.validation import (
    CodecDto,
    CodecValidationException,
    create_dto,
    create_intersection_dto,
    create_omit_dto,
    create_partial_dto,
    create_pick_dto,
    intersect,
    is_dto,
    omit,
    partial,
    pick,
)

User = record({"id": UUID, "email": Email, "password": string, "age": PositiveInteger})


def test_create_dto_binds_the_codec():
    UserDto = create_dto(User)
    assert UserDto.codec is User
    assert issubclass(UserDto, CodecDto)
    assert is_dto(UserDto)


def test_create_dto_name():
    assert create_dto(User, "UserDto").__name__ == "UserDto"


def test_dto_can_be_subclassed():
    class CreateUserDto(create_dto(omit(User, ["id"]))):
        pass

    assert is_dto(CreateUserDto)
    assert set(CreateUserDto.codec.fields) == {"email", "password", "age"}


def test_dto_create_decodes_or_raises():
    LoginDto = create_dto(pick(User, ["email", "password"]))
    payload = {"email": "a@b.co", "password": "pw"}
    assert LoginDto.create(payload) == payload

    with pytest.raises(CodecValidationException) as exc_info:
        LoginDto.create({"email": "nope"})
    assert [e.field for e in exc_info.value.errors] == ["email", "password"]


def test_create_dto_rejects_non_codecs():
    with pytest.raises(SchemaError, match="Invalid codec"):
        create_dto({"email": Email})


@pytest.mark.parametrize("candidate", [
    CodecDto,
    object,
    type("Plain", (), {"codec": User}),
    type("NoCodec", (CodecDto,), {"codec": {}}),
    User,
    {},
    None,
])
def test_is_dto_rejects(candidate):
    assert not is_dto(candidate)


# ============================================================================
# Derivations
# ============================================================================

def test_pick_keeps_only_named_fields():
    Login = pick(User, ["email", "password"])
    assert Login.kind is Kind.RECORD
    assert list(Login.fields) == ["email", "password"]
    assert Login.fields["email"] is Email


def test_pick_ignores_unknown_keys():
    assert list(pick(User, ["email", "nickname"]).fields) == ["email"]


def test_omit_drops_named_fields():
    Public = omit(User, ["password"])
    assert list(Public.fields) == ["id", "email", "age"]
    assert Public.decode({"id": "550e8400-e29b-41d4-a716-446655440000", "email": "a@b.co", "age": 3}).is_ok()


def test_partial_makes_every_field_optional():
    Patch = partial(User)
    assert Patch.kind is Kind.PARTIAL_RECORD
    assert Patch.decode({}) == Ok({})
    assert Patch.decode({"age": 0}).is_err()


def test_derivations_accept_dtos_and_wrapped_records():
    UserDto = create_dto(User)
    assert list(pick(UserDto, ["email"]).fields) == ["email"]
    assert list(omit(readonly(User), ["id", "password", "age"]).fields) == ["email"]


@pytest.mark.parametrize("derive", [
    lambda c: pick(c, ["a"]),
    lambda c: omit(c, ["a"]),
    lambda c: partial(c),
])
def test_derivations_require_records(derive):
    with pytest.raises(SchemaError):
        derive(string)
    with pytest.raises(SchemaError):
        derive(partial_record({"a": string}))
    with pytest.raises(SchemaError):
        derive({"a": string})


def test_intersect_combines_record_shapes():
    Timestamps = partial_record({"created": number})
    Combined = intersect(pick(User, ["email"]), Timestamps)
    assert Combined.kind is Kind.INTERSECTION
    assert Combined.decode({"email": "a@b.co", "created": 1}) == Ok({"email": "a@b.co", "created": 1})
    assert Combined.decode({"email": "a@b.co", "created": "x"}).is_err()


def test_intersect_requires_record_shapes():
    with pytest.raises(SchemaError):
        intersect(string, User)
    with pytest.raises(SchemaError):
        intersect(User, number)


# ============================================================================
# DTO shortcuts
# ============================================================================

def test_dto_shortcuts():
    assert list(create_pick_dto(User, ["email"]).codec.fields) == ["email"]
    assert "password" not in create_omit_dto(User, ["password"]).codec.fields
    assert create_partial_dto(User).codec.kind is Kind.PARTIAL_RECORD
    assert create_intersection_dto(User, partial_record({"note": string}), "Annotated").__name__ == "Annotated"


def test_shortcuts_propagate_schema_errors():
    with pytest.raises(SchemaError):
        create_pick_dto(string, ["a"])
