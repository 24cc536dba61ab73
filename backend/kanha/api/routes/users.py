"""Users: login and account lookup.

SECURITY:
- Passwords verified against bcrypt hashes
- Generic error message for unknown email and wrong password alike
- Access token returned in the body; clients send it as a Bearer header
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from kanha.api.deps import get_db, get_current_principal, ensure_same_user
from kanha.core.audit import AuditLog
from kanha.core.exceptions import BusinessError
from kanha.core.security import AuthenticatedPrincipal, create_access_token
from kanha.models.user import User
from kanha.schemas.user import LoginResponse, UserLogin, UserResponse
from kanha.services.auth_service import DatabaseCredentialVerifier

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(data: UserLogin, request: Request, db: Session = Depends(get_db)):
    """Authenticate by email and password, return an access token and the user record."""
    ip_address = request.client.host if request.client else ""
    verifier = DatabaseCredentialVerifier(db)
    principal = verifier.verify(data.email, data.password)
    if principal is None:
        AuditLog.log_authentication("failed_login", data.email, ip_address, False, reason="Invalid credentials")
        raise BusinessError.unauthorized(f"failed login for {data.email}", message="Invalid credentials")

    AuditLog.log_authentication("login", data.email, ip_address, True)
    user = db.query(User).filter(User.id == principal.user_id).first()
    return LoginResponse(
        access_token=create_access_token(subject=str(principal.user_id)),
        user=UserResponse.model_validate(user),
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    """User information without the password hash."""
    ensure_same_user(principal, user_id, "user")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise BusinessError.not_found("User")
    return user
