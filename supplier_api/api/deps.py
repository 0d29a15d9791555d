# supplier_api/api/deps.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from supplier_api.core.logging import security_alert
from supplier_api.core.security import decode_access_token, has_claim
from supplier_api.schemas.auth import TokenPayload
from supplier_api.services.identity_service import POLICIES

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    """Decoded claims of a valid bearer token, or 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized()
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as exc:
        security_alert("Rejected bearer token", reason=str(exc))
        raise _unauthorized() from exc
    if not payload.get("sub"):
        raise _unauthorized()
    return payload


def get_current_principal(claims: dict = Depends(get_token_claims)) -> TokenPayload:
    return TokenPayload(**claims)


def require_policy(policy: str):
    """Dependency factory: the token must carry every claim the policy names."""
    required_claims = POLICIES[policy]

    def checker(claims: dict = Depends(get_token_claims)) -> TokenPayload:
        for claim_type in required_claims:
            if not has_claim(claims, claim_type):
                security_alert("Policy check failed", policy=policy, subject=claims.get("sub"))
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Not enough permissions",
                )
        return TokenPayload(**claims)

    return checker
