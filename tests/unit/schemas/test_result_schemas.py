"""Tests for boundary result types."""

import pytest

from realm_cms_core.enums import WriteState
from realm_cms_core.exceptions import (
    AuthorizationDenied,
    ErrorKind,
    ReferentialBlock,
    ValidationError,
)
from realm_cms_core.schemas.mixins import parse_payload
from realm_cms_core.schemas.realm_schemas import RealmCreate
from realm_cms_core.schemas.result_schemas import BoundaryError, ReadResult, WriteResult


def test_denied_carries_nothing_but_denied():
    error = BoundaryError.from_exception(
        AuthorizationDenied(realm_id="r1", action="delete", resource="language")
    )

    assert error.kind == ErrorKind.AUTHORIZATION_DENIED
    assert error.message == "denied"
    assert error.field is None


def test_validation_error_keeps_field():
    error = BoundaryError.from_exception(ValidationError("bad color", field="color"))

    assert error.kind == ErrorKind.VALIDATION_FAILED
    assert error.field == "color"


def test_referential_block_message_crosses_boundary():
    error = BoundaryError.from_exception(ReferentialBlock("language", 1))

    assert error.message == "cannot delete language: referenced by 1 dependents"


def test_read_result_helpers():
    assert ReadResult.success([1, 2]).data == [1, 2]

    failed = ReadResult.failure(AuthorizationDenied())
    assert not failed.ok
    assert failed.error.message == "denied"


def test_write_result_history():
    result = WriteResult(
        ok=True,
        id="e1",
        state=WriteState.COMMITTED,
        state_history=[WriteState.RECEIVED, WriteState.COMMITTED],
    )

    assert result.state_history[-1] == result.state


def test_realm_slug_derived_from_name():
    realm = parse_payload(RealmCreate, {"name": "Rotterdam Zuid"})

    assert realm.slug == "rotterdam-zuid"


def test_realm_slug_pattern_enforced():
    with pytest.raises(ValidationError) as exc_info:
        parse_payload(RealmCreate, {"name": "Utrecht", "slug": "Utrecht!"})

    assert exc_info.value.field == "slug"
