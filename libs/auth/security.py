"""Token issuing and password hashing."""

from datetime import timedelta

import bcrypt
from jose import jwt

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now


def create_access_token(user_id: str, expires_in: timedelta | None = None) -> str:
    """Sign an HS256 token whose ``sub`` is the user id."""
    settings = get_settings()
    expire = utc_now() + (expires_in or timedelta(days=settings.JWT_EXPIRE_DAYS))
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry. Raises ``jose.JWTError`` on failure."""
    settings = get_settings()
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def hash_password(password: str) -> str:
    rounds = get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode(
        "utf-8"
    )


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
