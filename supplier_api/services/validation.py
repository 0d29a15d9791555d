"""Declarative field rules and the pure function that evaluates them.

A rule table maps a field name to an ordered list of ``(predicate, message)``
pairs. ``validate`` runs every predicate against the record and collects the
messages of the ones that fail, grouped by field. Nothing here touches the
database.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, NamedTuple

from email_validator import EmailNotValidError, validate_email

Predicate = Callable[[Any, Any], bool]
Rule = tuple[Predicate, str]
RuleTable = Mapping[str, list[Rule]]


class ValidationResult(NamedTuple):
    ok: bool
    errors: dict[str, list[str]]


# ---------- Predicates ----------
# Each predicate receives (value, record). Only ``required`` rejects a missing
# value; the others let it through so a blank field reports a single message.

def required(value: Any, _record: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def max_length(limit: int) -> Predicate:
    def check(value: Any, _record: Any) -> bool:
        return value is None or len(value) <= limit
    return check


def length_between(minimum: int, maximum: int) -> Predicate:
    def check(value: Any, _record: Any) -> bool:
        return value is None or minimum <= len(value) <= maximum
    return check


def digits_only(value: Any, _record: Any) -> bool:
    return not value or (str(value).isascii() and str(value).isdecimal())


def email_address(value: Any, _record: Any) -> bool:
    if not value:
        return True
    try:
        validate_email(str(value), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def equals_field(other: str) -> Predicate:
    def check(value: Any, record: Any) -> bool:
        return value == _field(record, other)
    return check


# ---------- Rule tables ----------

SUPPLIER_RULES: RuleTable = {
    "name": [
        (required, "The name field is required."),
        (max_length(200), "The name field must have at most 200 characters."),
    ],
    "document": [
        (required, "The document field is required."),
        (max_length(14), "The document field must have at most 14 characters."),
        (digits_only, "The document field must contain only digits."),
    ],
}

REGISTER_RULES: RuleTable = {
    "email": [
        (required, "The email field is required."),
        (email_address, "The email field is not a valid e-mail address."),
    ],
    "password": [
        (required, "The password field is required."),
        (length_between(6, 100), "The password field must have between 6 and 100 characters."),
    ],
    "confirm_password": [
        (equals_field("password"), "The passwords do not match."),
    ],
}

LOGIN_RULES: RuleTable = {
    "email": [
        (required, "The email field is required."),
        (email_address, "The email field is not a valid e-mail address."),
    ],
    "password": [
        (required, "The password field is required."),
        (length_between(6, 100), "The password field must have between 6 and 100 characters."),
    ],
}


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def validate(record: Any, rules: RuleTable = SUPPLIER_RULES) -> ValidationResult:
    """Evaluate ``rules`` against ``record`` (a mapping or an attribute object)."""
    errors: dict[str, list[str]] = {}
    for field, field_rules in rules.items():
        value = _field(record, field)
        for predicate, message in field_rules:
            if not predicate(value, record):
                errors.setdefault(field, []).append(message)
    return ValidationResult(ok=not errors, errors=errors)
