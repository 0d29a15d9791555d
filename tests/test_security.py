import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import JWTError, jwt

from supplier_api.core.config import settings
from supplier_api.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    has_claim,
    verify_password,
)
from supplier_api.models.user import User, UserClaim
from supplier_api.services.identity_service import group_claims, is_locked_out, password_policy_errors


def test_password_hash_roundtrip():
    hashed = get_password_hash("Secret@1")
    assert hashed != "Secret@1"
    assert verify_password("Secret@1", hashed)
    assert not verify_password("secret@1", hashed)


def test_access_token_carries_identity_and_claims():
    user_id = uuid.uuid4()
    token = create_access_token(
        subject=user_id,
        email="someone@example.com",
        roles=["Admin"],
        extra={"DeleteSupplier": "true", "sub": "spoofed"},
    )
    payload = decode_access_token(token)
    assert payload["sub"] == str(user_id)
    assert payload["email"] == "someone@example.com"
    assert payload["roles"] == ["Admin"]
    assert payload["iss"] == settings.JWT_ISSUER
    assert payload["aud"] == settings.JWT_AUDIENCE
    assert has_claim(payload, "DeleteSupplier")
    assert has_claim(payload, "DeleteSupplier", "true")
    assert not has_claim(payload, "DeleteSupplier", "false")
    assert not has_claim(payload, "Other")


def test_expired_token_is_rejected():
    token = create_access_token(subject="abc", email="a@example.com", expires_minutes=1)
    payload = jwt.get_unverified_claims(token)
    payload["exp"] = int((datetime.now(timezone.utc) - timedelta(minutes=5)).timestamp())
    expired = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(JWTError):
        decode_access_token(expired)


def test_token_signed_with_other_secret_is_rejected():
    token = create_access_token(subject="abc", email="a@example.com")
    payload = jwt.get_unverified_claims(token)
    forged = jwt.encode(payload, "another-secret-entirely", algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(JWTError):
        decode_access_token(forged)


def test_token_signed_with_fallback_secret_is_accepted(monkeypatch):
    old_secret = "retired-secret-key-0123456789"
    payload = jwt.get_unverified_claims(create_access_token(subject="abc", email="a@example.com"))
    signed_with_old = jwt.encode(payload, old_secret, algorithm=settings.JWT_ALGORITHM)

    with pytest.raises(JWTError):
        decode_access_token(signed_with_old)

    monkeypatch.setattr(settings, "SECRET_KEY_FALLBACKS", [old_secret])
    assert decode_access_token(signed_with_old)["sub"] == "abc"


def test_repeated_claim_types_are_grouped():
    claims = [
        UserClaim(claim_type="Permission", claim_value="read"),
        UserClaim(claim_type="Permission", claim_value="write"),
        UserClaim(claim_type="DeleteSupplier", claim_value="true"),
    ]
    grouped = group_claims(claims)
    assert grouped == {"Permission": ["read", "write"], "DeleteSupplier": "true"}

    payload = decode_access_token(create_access_token(subject="abc", email="a@example.com", extra=grouped))
    assert payload["Permission"] == ["read", "write"]
    assert has_claim(payload, "Permission", "read")
    assert has_claim(payload, "Permission", "write")
    assert not has_claim(payload, "Permission", "admin")


def test_password_policy_codes():
    codes = {error["code"] for error in password_policy_errors("abc")}
    assert codes == {
        "PasswordTooShort",
        "PasswordRequiresNonAlphanumeric",
        "PasswordRequiresDigit",
        "PasswordRequiresUpper",
    }
    assert password_policy_errors("Secret@1") == []


def test_is_locked_out_handles_naive_timestamps():
    user = User(lockout_enabled=True, lockout_end=datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(minutes=5))
    assert is_locked_out(user)
    user.lockout_end = datetime.now(timezone.utc) - timedelta(seconds=1)
    assert not is_locked_out(user)
    user.lockout_end = None
    assert not is_locked_out(user)
