from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Union
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from supplier_api.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
ALGORITHM = settings.JWT_ALGORITHM
_RESERVED_CLAIMS = {"sub", "exp", "type", "jti", "iat", "nbf", "iss", "aud", "email", "roles"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _apply_extra_claims(payload: dict[str, Any], extra: dict[str, Any] | None) -> None:
    if not extra:
        return
    for key, value in extra.items():
        if key in _RESERVED_CLAIMS:
            continue
        payload[key] = value


def _ensure_header_algorithm(token: str) -> None:
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as exc:
        raise JWTError("Invalid token header") from exc
    if header.get("alg") != ALGORITHM:
        raise JWTError("Token signed with unexpected algorithm")


def _candidate_secrets(primary: str | None, fallbacks: list[str]) -> list[str]:
    seen: list[str] = []
    for item in [primary, *fallbacks]:
        if item and item not in seen:
            seen.append(item)
    return seen


def _decode_with_rotation(token: str, primary: str | None, fallbacks: list[str]) -> dict[str, Any]:
    _ensure_header_algorithm(token)
    last_error: JWTError | None = None
    for secret in _candidate_secrets(primary, fallbacks):
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                audience=settings.JWT_AUDIENCE,
                issuer=settings.JWT_ISSUER,
            )
        except JWTError as exc:
            last_error = exc
    raise last_error or JWTError("Unable to decode token with provided secrets")


def create_access_token(
    subject: Union[str, int],
    email: str,
    roles: Iterable[str] = (),
    extra: dict[str, Any] | None = None,
    expires_minutes: int | None = None,
) -> str:
    """Sign an access token for ``subject``.

    ``extra`` carries the user's own claims; they land as top-level entries,
    except for names that collide with the registered ones above.
    """
    exp_min = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    now = _now()
    payload: dict[str, Any] = {
        "sub": str(subject),
        "email": email,
        "type": "access",
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "exp": now + timedelta(minutes=exp_min),
        "nbf": int(now.timestamp()),
        "iat": int(now.timestamp()),
        "jti": uuid4().hex,
        "roles": list(roles),
    }
    _apply_extra_claims(payload, extra)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    data = _decode_with_rotation(token, settings.SECRET_KEY, settings.SECRET_KEY_FALLBACKS)
    if data.get("type") != "access":
        raise JWTError("Invalid token type")
    return data


def has_claim(payload: dict[str, Any], claim_type: str, value: Any | None = None) -> bool:
    if claim_type not in payload or claim_type in _RESERVED_CLAIMS:
        return False
    if value is None:
        return True
    present = payload[claim_type]
    if isinstance(present, list):
        return value in present
    return present == value
