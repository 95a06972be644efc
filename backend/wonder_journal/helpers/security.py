"""
Wonder Journal Backend — Passwords and Bearer Tokens
======================================================

What:  Password hashing (passlib pbkdf2_sha256) and JWT signing/verification
       (python-jose, HS256 with the shared SECRET_KEY).
Who:   UserService hashes and checks passwords; auth routes issue tokens;
       AuthenticateJWTMiddleware decodes them.

Token claims:
    username: the user the token was issued for
    isAdmin: admin flag at issue time
    iat: issued-at (seconds since epoch)
    exp: expiry, only when ACCESS_TOKEN_EXPIRE_MINUTES > 0
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping

from jose import JWTError, jwt
from passlib.hash import pbkdf2_sha256

from wonder_journal.config import settings
from wonder_journal.exceptions import UnauthorizedError


def hash_password(password: str) -> str:
    """Hash a plain-text password; the salt is generated by passlib."""
    return pbkdf2_sha256.using(rounds=settings.password_hash_rounds).hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Check a plain-text password against a stored hash."""
    try:
        return pbkdf2_sha256.verify(password, hashed)
    except (ValueError, TypeError):
        # Stored value is not a pbkdf2_sha256 hash
        return False


def create_token(user: Mapping[str, Any]) -> str:
    """
    Sign a token for `user` (a mapping with `username` and `is_admin`).

    Returns:
        Compact JWT string for the `Authorization: Bearer` header.
    """
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "username": user["username"],
        "isAdmin": bool(user.get("is_admin", False)),
        "iat": int(now.timestamp()),
    }
    if settings.access_token_expire_minutes:
        expires = now + timedelta(minutes=settings.access_token_expire_minutes)
        claims["exp"] = int(expires.timestamp())
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify a token's signature and expiry and return its claims.

    Raises:
        UnauthorizedError: malformed, tampered with, or expired token.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise UnauthorizedError("Invalid token", context={"reason": str(e)})
