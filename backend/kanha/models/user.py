from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from kanha.db.base import Base


class User(Base):
    """A shop account. Owns its items and invoices."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    shop_name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)  # bcrypt
    created_at = Column(DateTime(timezone=True), server_default=func.now())
