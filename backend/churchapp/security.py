"""
ChurchApp Backend — Password Hashing and Token Signing
========================================================

What:  bcrypt password hashes and HS256 bearer tokens (PyJWT).
Who:   AuthService / AdminAuthService issue tokens; dependencies.py decodes them.

Token lifetime:
    Tokens carry a snapshot of role, branch and permissions taken at login and
    expire after settings.jwt_expires_days (7 by default). Permission-gated
    routes re-read the member's permissions from the database, so a revoked
    permission takes effect before the token expires.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from churchapp.config import settings
from churchapp.exceptions import UnauthorizedError


def _to_bcrypt_secret(password: str) -> bytes:
    """bcrypt only uses the first 72 bytes of the password."""
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    """Returns a salted bcrypt hash as a UTF-8 string."""
    return bcrypt.hashpw(_to_bcrypt_secret(password), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison of a plaintext password with a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_to_bcrypt_secret(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(
    claims: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign `claims` into a bearer token.

    `claims` must contain `sub`; `iat` and `exp` are added here.
    """
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(days=settings.jwt_expires_days))
    payload = dict(claims)
    payload["iat"] = int(now.timestamp())
    payload["exp"] = int(expires.timestamp())
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        UnauthorizedError: expired, tampered, or malformed token
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError(message="Token expirado")
    except jwt.InvalidTokenError:
        raise UnauthorizedError(message="Token inválido")
