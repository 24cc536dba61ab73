"""Create all tables. Run on app startup.

The first start creates the shop account with a random password
(logged once). Change it after the first login.
"""
import logging
import secrets

from sqlalchemy.orm import Session

from kanha.core.config import settings
from kanha.core.security import get_password_hash
from kanha.db.base import Base
from kanha.db.session import engine, SessionLocal
from kanha.models import user, item, invoice, cart  # noqa: F401 - register models
from kanha.models.user import User

logger = logging.getLogger(__name__)


def ensure_default_user(db: Session) -> None:
    if db.query(User).count() > 0:
        return

    default_password = secrets.token_urlsafe(16)
    db.add(
        User(
            shop_name=settings.DEFAULT_SHOP_NAME,
            email=settings.DEFAULT_USER_EMAIL.lower(),
            password_hash=get_password_hash(default_password),
        )
    )
    db.commit()
    logger.warning(
        "Default shop user created: email=%s password=%s - change this password after first login",
        settings.DEFAULT_USER_EMAIL,
        default_password,
    )


def init_db():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        ensure_default_user(db)
    finally:
        db.close()
