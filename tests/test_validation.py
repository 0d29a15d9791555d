from types import SimpleNamespace

import pytest

from supplier_api.schemas.supplier import SupplierPayload
from supplier_api.services.validation import (
    LOGIN_RULES,
    REGISTER_RULES,
    SUPPLIER_RULES,
    validate,
)


def test_valid_supplier_passes():
    result = validate(SupplierPayload(name="Acme Ltd", document="12345678901234"))
    assert result.ok
    assert result.errors == {}


def test_missing_fields_are_required():
    result = validate(SupplierPayload())
    assert not result.ok
    assert result.errors == {
        "name": ["The name field is required."],
        "document": ["The document field is required."],
    }


def test_blank_name_is_rejected():
    result = validate({"name": "   ", "document": "123"}, SUPPLIER_RULES)
    assert not result.ok
    assert list(result.errors) == ["name"]


def test_length_bounds():
    result = validate({"name": "x" * 201, "document": "1" * 15})
    assert result.errors["name"] == ["The name field must have at most 200 characters."]
    assert result.errors["document"] == ["The document field must have at most 14 characters."]

    at_limit = validate({"name": "x" * 200, "document": "1" * 14})
    assert at_limit.ok


def test_document_must_be_digits():
    result = validate(SimpleNamespace(name="Acme", document="12.345/0001"))
    assert result.errors == {"document": ["The document field must contain only digits."]}


@pytest.mark.parametrize("document", ["²²²", "１２３", "١٢"])
def test_document_rejects_non_ascii_digits(document):
    result = validate({"name": "Acme", "document": document})
    assert result.errors == {"document": ["The document field must contain only digits."]}


def test_register_rules():
    bad = validate(
        {"email": "not-an-email", "password": "abc", "confirm_password": "abd"},
        REGISTER_RULES,
    )
    assert set(bad.errors) == {"email", "password", "confirm_password"}

    good = validate(
        {"email": "someone@example.com", "password": "Secret@1", "confirm_password": "Secret@1"},
        REGISTER_RULES,
    )
    assert good.ok


def test_login_rules_require_both_fields():
    result = validate({}, LOGIN_RULES)
    assert result.errors == {
        "email": ["The email field is required."],
        "password": ["The password field is required."],
    }


def test_validate_does_not_mutate_record():
    record = {"name": "", "document": ""}
    validate(record)
    assert record == {"name": "", "document": ""}
