from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from supplier_api.core.logging import get_logger, security_alert
from supplier_api.core.metrics import record_login_attempt
from supplier_api.db.session_async import get_async_db
from supplier_api.schemas.auth import LoginUser, RegisterUser, UserResponse
from supplier_api.schemas.problem import ValidationProblem
from supplier_api.services.exceptions import (
    DomainValidationError,
    InvalidCredentialsError,
    LockedOutError,
)
from supplier_api.services import identity_service
from supplier_api.services.validation import LOGIN_RULES, REGISTER_RULES, validate

router = APIRouter(tags=["users"])

auth_logger = get_logger("supplier_api.auth")

_BAD_REQUEST = {400: {"model": ValidationProblem}}


def _client_ip(request: Request | None) -> str | None:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    client = request.client
    return client.host if client else None


@router.post("/register", response_model=UserResponse, name="register_user", responses=_BAD_REQUEST)
async def register(
    payload: RegisterUser,
    request: Request,
    db: AsyncSession = Depends(get_async_db),
):
    result = validate(payload, REGISTER_RULES)
    if not result.ok:
        raise DomainValidationError(result.errors)

    user = await identity_service.register(db, payload.email, payload.password)
    auth_logger.info(
        "User registered",
        extra={"user_id": str(user.id), "email": user.email, "client_ip": _client_ip(request)},
    )
    return identity_service.build_user_response(user)


@router.post("/login", response_model=UserResponse, name="login_user", responses=_BAD_REQUEST)
async def login(
    payload: LoginUser,
    request: Request,
    db: AsyncSession = Depends(get_async_db),
):
    result = validate(payload, LOGIN_RULES)
    if not result.ok:
        raise DomainValidationError(result.errors)

    try:
        user = await identity_service.login(db, payload.email, payload.password)
    except LockedOutError:
        record_login_attempt("locked_out")
        security_alert("Login attempt on locked account", email=payload.email, client_ip=_client_ip(request))
        raise
    except InvalidCredentialsError:
        record_login_attempt("failure")
        security_alert("Failed login attempt", email=payload.email, client_ip=_client_ip(request))
        raise

    record_login_attempt("success")
    auth_logger.info(
        "User authenticated",
        extra={"user_id": str(user.id), "email": user.email, "client_ip": _client_ip(request)},
    )
    return identity_service.build_user_response(user)
