from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.auth.security import decode_access_token

# auto_error=False so a missing header is reported as 401, not 403.
security = HTTPBearer(auto_error=False)


def _credentials_exception(detail: str = "Could not validate credentials"):
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode(token: str) -> AuthUser:
    try:
        return AuthUser(**decode_access_token(token))
    except (JWTError, ValidationError):
        raise _credentials_exception("Token is not valid")


async def get_token_claims(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Validate the bearer token and return its claims.
    """
    if token is None or not token.credentials:
        raise _credentials_exception("No token, authorization denied")
    return _decode(token.credentials)


async def get_optional_token_claims(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[AuthUser]:
    """
    Best-effort variant for anonymous endpoints: an absent or invalid
    token yields ``None`` instead of an error.
    """
    if token is None or not token.credentials:
        return None
    try:
        return _decode(token.credentials)
    except HTTPException:
        return None
