"""FastAPI dependencies: DB session and the authenticated principal from the bearer token."""
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from kanha.core.audit import AuditLog
from kanha.core.exceptions import BusinessError
from kanha.core.security import AuthenticatedPrincipal, decode_access_token
from kanha.db.session import SessionLocal
from kanha.models.user import User
from kanha.services.auth_service import principal_for

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> AuthenticatedPrincipal:
    """Resolve the bearer token to the shop account it was issued for."""
    if not credentials:
        raise BusinessError.unauthorized("missing bearer token", message="Not authenticated")

    sub = decode_access_token(credentials.credentials)
    if not sub:
        raise BusinessError.unauthorized("invalid or expired token", message="Invalid or expired token")

    try:
        user_id = int(sub)
    except ValueError:
        raise BusinessError.unauthorized(f"non-numeric subject {sub!r}", message="Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise BusinessError.unauthorized(f"token for unknown user {user_id}", message="User not found")
    return principal_for(user)


def ensure_same_user(principal: AuthenticatedPrincipal, user_id: int, resource_type: str) -> None:
    """Path and body user ids must name the caller's own account."""
    if user_id != principal.user_id:
        AuditLog.log_access_denied("read", resource_type, user_id, principal.user_id, "Different user")
        raise BusinessError.forbidden(f"user {principal.user_id} asked for user {user_id}")
