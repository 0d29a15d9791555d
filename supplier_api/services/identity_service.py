from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from supplier_api.core.config import settings
from supplier_api.core.security import create_access_token, get_password_hash, verify_password
from supplier_api.db.operations import commit_async
from supplier_api.models.user import User, UserClaim
from supplier_api.schemas.auth import UserClaimRead, UserResponse, UserToken
from supplier_api.services.exceptions import IdentityError, InvalidCredentialsError, LockedOutError

# Policy name -> claim types that must all be present in the token.
POLICIES: dict[str, list[str]] = {
    "DeleteSupplier": [settings.SUPPLIER_DELETE_CLAIM],
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime | None) -> datetime | None:
    # SQLite hands timestamps back without tzinfo.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _duplicate_email(email: str) -> dict[str, str]:
    return {"code": "DuplicateEmail", "description": f"Email '{email}' is already taken."}


def normalize_email(email: str) -> str:
    return email.strip().upper()


def password_policy_errors(password: str) -> list[dict[str, str]]:
    errors: list[dict[str, str]] = []
    if len(password) < settings.PASSWORD_REQUIRED_LENGTH:
        errors.append({
            "code": "PasswordTooShort",
            "description": f"Passwords must be at least {settings.PASSWORD_REQUIRED_LENGTH} characters.",
        })
    if settings.PASSWORD_REQUIRE_NON_ALPHANUMERIC and password.isalnum():
        errors.append({
            "code": "PasswordRequiresNonAlphanumeric",
            "description": "Passwords must have at least one non alphanumeric character.",
        })
    if settings.PASSWORD_REQUIRE_DIGIT and not any(ch.isdigit() for ch in password):
        errors.append({
            "code": "PasswordRequiresDigit",
            "description": "Passwords must have at least one digit ('0'-'9').",
        })
    if settings.PASSWORD_REQUIRE_LOWERCASE and not any(ch.islower() for ch in password):
        errors.append({
            "code": "PasswordRequiresLower",
            "description": "Passwords must have at least one lowercase ('a'-'z').",
        })
    if settings.PASSWORD_REQUIRE_UPPERCASE and not any(ch.isupper() for ch in password):
        errors.append({
            "code": "PasswordRequiresUpper",
            "description": "Passwords must have at least one uppercase ('A'-'Z').",
        })
    return errors


def is_locked_out(user: User, now: datetime | None = None) -> bool:
    lockout_end = _as_aware(user.lockout_end)
    if not settings.LOCKOUT_ENABLED or not user.lockout_enabled or lockout_end is None:
        return False
    return lockout_end > (now or _now())


def group_claims(claims: list[UserClaim]) -> dict[str, str | list[str]]:
    """Claim type -> value, or a list of values when the type repeats."""
    grouped: dict[str, list[str]] = {}
    for claim in claims:
        grouped.setdefault(claim.claim_type, []).append(claim.claim_value)
    return {key: values[0] if len(values) == 1 else values for key, values in grouped.items()}


async def get_by_email(db: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(User.normalized_email == normalize_email(email)).limit(1)
    result = await db.execute(stmt)
    return result.scalars().first()


async def register(db: AsyncSession, email: str, password: str) -> User:
    errors: list[dict[str, str]] = []
    if await get_by_email(db, email) is not None:
        errors.append(_duplicate_email(email))
    errors.extend(password_policy_errors(password))
    if errors:
        raise IdentityError(errors)

    user = User(
        email=email.strip(),
        normalized_email=normalize_email(email),
        hashed_password=get_password_hash(password),
        email_confirmed=True,
        access_failed_count=0,
        lockout_enabled=True,
        claims=[],
        roles=[],
    )
    db.add(user)
    try:
        await commit_async(db)
    except IntegrityError as exc:
        # Lost a race with a concurrent registration of the same email.
        raise IdentityError([_duplicate_email(email)]) from exc
    return user


async def add_claim(db: AsyncSession, user: User, claim_type: str, claim_value: str = "") -> UserClaim:
    claim = UserClaim(claim_type=claim_type, claim_value=claim_value)
    user.claims.append(claim)
    await commit_async(db)
    return claim


async def login(db: AsyncSession, email: str, password: str) -> User:
    """Check credentials, maintaining the failed-attempt counter.

    Raises ``LockedOutError`` while a lockout is running (the password is
    not checked) and when this failure is the one that trips it.
    """
    user = await get_by_email(db, email)
    if user is None:
        raise InvalidCredentialsError()

    now = _now()
    if is_locked_out(user, now):
        raise LockedOutError()

    if verify_password(password, user.hashed_password):
        if user.access_failed_count or user.lockout_end is not None:
            user.access_failed_count = 0
            user.lockout_end = None
            await commit_async(db)
        return user

    if settings.LOCKOUT_ENABLED and user.lockout_enabled:
        user.access_failed_count += 1
        if user.access_failed_count >= settings.LOCKOUT_MAX_FAILED_ATTEMPTS:
            user.access_failed_count = 0
            user.lockout_end = now + timedelta(minutes=settings.LOCKOUT_MINUTES)
            await commit_async(db)
            raise LockedOutError()
        await commit_async(db)
    raise InvalidCredentialsError()


def build_user_response(user: User) -> UserResponse:
    roles = [role.name for role in user.roles]
    token = create_access_token(
        subject=user.id,
        email=user.email,
        roles=roles,
        extra=group_claims(user.claims),
    )
    claim_list = [UserClaimRead(type=claim.claim_type, value=claim.claim_value) for claim in user.claims]
    claim_list.extend(UserClaimRead(type="role", value=name) for name in roles)
    return UserResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user_token=UserToken(id=user.id, email=user.email, claims=claim_list),
    )
