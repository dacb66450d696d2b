# File: tazasu/core/security.py

"""
Security helpers for the TAZA SU API.

Session tokens are stateless HS256 JWTs carrying ``userId``, ``email`` and
``role``. The claims are a snapshot taken at issuance: callers must re-read
the user from the database before making any authorization decision
(see ``tazasu.api.deps.get_current_user``).
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from tazasu.core.config import Settings, get_settings
from tazasu.core.errors import TokenExpired, TokenInvalid


@lru_cache
def _password_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(password: str, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return _password_context(settings.bcrypt_rounds).hash(password)


def verify_password(
    password: str, password_hash: str, settings: Optional[Settings] = None
) -> bool:
    settings = settings or get_settings()
    try:
        return _password_context(settings.bcrypt_rounds).verify(password, password_hash)
    except ValueError:
        # Unrecognised or corrupt stored hash.
        return False


def create_access_token(
    user_id: int,
    email: str,
    role: str,
    settings: Optional[Settings] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Issue a signed session token.

    The validity window is fixed by ``settings.access_token_expire_days``
    (7 days) unless ``expires_delta`` is given.
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.access_token_expire_days))
    to_encode: dict[str, Any] = {
        "userId": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises ``TokenExpired`` for a token past its window and ``TokenInvalid``
    for anything malformed, badly signed or missing the user id.
    """
    settings = settings or get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError:
        raise TokenInvalid()

    if not isinstance(claims.get("userId"), int):
        raise TokenInvalid()
    return claims
