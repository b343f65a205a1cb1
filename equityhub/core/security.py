"""
Password hashing and access tokens.

Passwords are hashed with passlib's ``pbkdf2_sha256`` (salted, iterated);
the scheme name is stored next to each hash so it can be migrated later via
``CryptContext``'s deprecation support.  Access tokens are HS256 JWTs whose
``sub`` claim is the caller's user-profile id.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from equityhub.core.config import settings
from equityhub.core.exceptions import UnauthorizedException

PASSWORD_SCHEME = "pbkdf2_sha256"

pwd_context = CryptContext(schemes=[PASSWORD_SCHEME], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user_profile_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed token identifying ``user_profile_id``."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {"sub": str(user_profile_id), "exp": expire}
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> UUID:
    """
    Return the user-profile id carried by ``token``.

    Raises :class:`UnauthorizedException` for bad signatures, expired tokens
    and tokens without a UUID ``sub`` claim.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise UnauthorizedException("Could not validate credentials") from exc

    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedException("Could not validate credentials")
    try:
        return UUID(subject)
    except ValueError as exc:
        raise UnauthorizedException("Could not validate credentials") from exc
