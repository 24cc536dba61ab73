"""Application configuration.

Environment variables override all defaults.
SECRET_KEY must be set in production - startup fails fast if it is missing.
"""

import os
from pathlib import Path
from typing import List


# Load .env for local development (safe no-op if not installed)
try:
    from dotenv import load_dotenv  # type: ignore

    _BACKEND_DIR = Path(__file__).resolve().parents[2]
    load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)
except ImportError:
    pass


def _csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings:
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./kanha.db")
    # Low-traffic deployment: small pool, long acquisition timeout
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "3"))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "70"))

    # JWT
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    if not SECRET_KEY:
        if ENVIRONMENT == "production":
            raise ValueError(
                "SECRET_KEY must be set in production environment. "
                "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        import warnings
        warnings.warn(
            "SECRET_KEY not set in environment. Using development default. "
            "Set SECRET_KEY in .env before deploying.",
            RuntimeWarning,
        )
        SECRET_KEY = "development-only-weak-default-change-in-production"

    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))

    # HTTP
    API_PREFIX: str = os.getenv("API_PREFIX", "/api/v1")
    CORS_ORIGINS: List[str] = _csv(
        os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    )

    # Invoicing
    INVOICE_PREFIX: str = os.getenv("INVOICE_PREFIX", "MPK")
    INVOICE_FISCAL_YEAR: str = os.getenv("INVOICE_FISCAL_YEAR", "25-26")
    # "strict": reject a line that exceeds stock; "clamp": floor stock at zero
    STOCK_DECREMENT_MODE: str = os.getenv("STOCK_DECREMENT_MODE", "strict")

    # Inventory listing
    ITEMS_PAGE_SIZE: int = int(os.getenv("ITEMS_PAGE_SIZE", "50"))
    MAX_PAGE_SIZE: int = 200

    # First-run shop account
    DEFAULT_USER_EMAIL: str = os.getenv("DEFAULT_USER_EMAIL", "owner@kanhamedical.in")
    DEFAULT_SHOP_NAME: str = os.getenv("DEFAULT_SHOP_NAME", "Kanha Medical Agencies")

    # Offline-capable client
    API_URL: str = os.getenv("KANHA_API_URL", "http://localhost:8000/api/v1")
    CACHE_PATH: str = os.getenv("KANHA_CACHE_PATH", str(Path.home() / ".kanha" / "cache.json"))
    CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "300"))


settings = Settings()
