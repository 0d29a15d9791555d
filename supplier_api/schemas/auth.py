# supplier_api/schemas/auth.py
from uuid import UUID

from pydantic import BaseModel, Field


class RegisterUser(BaseModel):
    email: str | None = None
    password: str | None = None
    confirm_password: str | None = None


class LoginUser(BaseModel):
    email: str | None = None
    password: str | None = None


class UserClaimRead(BaseModel):
    type: str
    value: str


class UserToken(BaseModel):
    id: UUID
    email: str
    claims: list[UserClaimRead] = Field(default_factory=list)


class UserResponse(BaseModel):
    access_token: str
    token_type: str = Field(default="bearer")
    expires_in: int
    user_token: UserToken


class TokenPayload(BaseModel):
    sub: str | None = None
    email: str | None = None
    exp: int | None = None
    iat: int | None = None
    jti: str | None = None
    type: str | None = None
    roles: list[str] | None = None

    model_config = {"extra": "allow"}
