"""Password hashing, access tokens and the authenticated principal.

SECURITY:
- Passwords are stored as bcrypt hashes, never compared in plaintext
- Access tokens are short-lived HS256 JWTs carrying only the user id
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import bcrypt
import jwt

from kanha.core.config import settings


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """The shop account a request acts on behalf of."""

    user_id: int
    email: str
    shop_name: str


class CredentialVerifier(Protocol):
    """Resolves an email/password pair to a principal, or None."""

    def verify(self, email: str, password: str) -> Optional[AuthenticatedPrincipal]:
        ...


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(subject: str, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    payload = {"sub": subject, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Return the token subject, or None if the token is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        return None
    return payload.get("sub")
