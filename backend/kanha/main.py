"""
Kanha Billing Backend: stock and GST invoicing for a medical distributor.

ARCHITECTURE:
- FastAPI: REST API under /api/v1 (users, items, invoices)
- SQLAlchemy: relational store, one transaction per request
- Next.js dashboard / kanha.client: data entry and printing

INVARIANTS:
- Invoice + cart + lines + stock decrements commit together or not at all
- Item quantity never drops below zero
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from kanha.api.routes import invoices, items, users
from kanha.core.audit import AuditLog
from kanha.core.config import settings
from kanha.core.exceptions import register_exception_handlers
from kanha.db.init_db import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the first shop account on startup."""
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(
    title="Kanha Billing API",
    description="Stock items and GST invoices. Invoice creation decrements stock atomically.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    AuditLog.log_api_call(
        endpoint=request.url.path,
        method=request.method,
        ip_address=request.client.host if request.client else "",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


app.include_router(users.router, prefix=f"{settings.API_PREFIX}/users", tags=["users"])
app.include_router(items.router, prefix=f"{settings.API_PREFIX}/items", tags=["items"])
app.include_router(invoices.router, prefix=f"{settings.API_PREFIX}/invoices", tags=["invoices"])


@app.get("/health")
def health():
    return {"status": "ok"}
