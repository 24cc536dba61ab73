"""Credential verification against the users table."""
from typing import Optional

from sqlalchemy.orm import Session

from kanha.core.security import AuthenticatedPrincipal, verify_password
from kanha.models.user import User


def principal_for(user: User) -> AuthenticatedPrincipal:
    return AuthenticatedPrincipal(user_id=user.id, email=user.email, shop_name=user.shop_name)


class DatabaseCredentialVerifier:
    """Checks an email/password pair against the stored bcrypt hash."""

    def __init__(self, db: Session):
        self.db = db

    def find_user(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def verify(self, email: str, password: str) -> Optional[AuthenticatedPrincipal]:
        user = self.find_user(email)
        if not user or not verify_password(password, user.password_hash):
            return None
        return principal_for(user)
