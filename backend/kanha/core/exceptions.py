"""
Error taxonomy and its HTTP mapping.

Every error leaves the API as ``{"error": str, "validationErrors"?: [str]}``.
Generic messages go out, details stay in the server log.
"""
import logging
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error that maps directly onto an HTTP response."""

    def __init__(
        self,
        status_code: int,
        message: str,
        validation_errors: Optional[List[str]] = None,
        headers: Optional[dict] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.validation_errors = validation_errors
        self.headers = headers

    def to_payload(self) -> dict:
        payload = {"error": self.message}
        if self.validation_errors:
            payload["validationErrors"] = list(self.validation_errors)
        return payload


class BusinessError:
    """Factories for domain errors with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> ApiError:
        """
        404 for a missing resource.

        Lookups are always scoped to the caller, so another shop's record
        produces the same response as a record that does not exist.
        """
        if reason:
            logger.info(f"Not found: {resource} - {reason}")
        return ApiError(status.HTTP_404_NOT_FOUND, f"{resource} not found")

    @staticmethod
    def unauthorized(reason: str = "", message: str = "Authentication failed") -> ApiError:
        """
        Generic 401 for all authentication failures.

        Same response for wrong password and unknown email.
        """
        logger.warning(f"Unauthorized access attempt: {reason}")
        return ApiError(
            status.HTTP_401_UNAUTHORIZED,
            message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def forbidden(reason: str = "") -> ApiError:
        logger.warning(f"Forbidden access: {reason}")
        return ApiError(status.HTTP_403_FORBIDDEN, "Access denied")

    @staticmethod
    def validation(problems: List[str], message: str = "Validation failed") -> ApiError:
        """
        400 carrying every problem found, not just the first.

        Example:
            raise BusinessError.validation(["party_name: required", "cart: no items"])
        """
        logger.info(f"Validation failed: {problems}")
        return ApiError(status.HTTP_400_BAD_REQUEST, message, validation_errors=problems)

    @staticmethod
    def missing_reference(detail: Optional[List[str]] = None) -> ApiError:
        """400 for foreign-key style violations."""
        logger.info(f"Missing reference: {detail}")
        return ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Referenced record does not exist",
            validation_errors=detail,
        )

    @staticmethod
    def conflict(detail: str) -> ApiError:
        """
        409 for resource conflicts.
        Example: "A product with this catalog number already exists."
        """
        logger.info(f"Conflict: {detail}")
        return ApiError(status.HTTP_409_CONFLICT, detail)

    @staticmethod
    def server_error(original_error: Exception = None) -> ApiError:
        """
        Generic 500 - logs the actual error internally, hides it from the caller.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=original_error,
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)
        return ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An error occurred while executing the query.",
        )

    @staticmethod
    def from_integrity_error(exc: IntegrityError) -> ApiError:
        """
        Map a database constraint violation onto the taxonomy.

        Matches both SQLite ("UNIQUE constraint failed: items.cat_no") and
        PostgreSQL ('duplicate key value violates unique constraint
        "items_cat_no_key"') phrasing.
        """
        text = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
        if "foreign key" in text:
            return BusinessError.missing_reference()
        if "unique" in text or "duplicate key" in text:
            if "cat_no" in text:
                return BusinessError.conflict("A product with this catalog number already exists.")
            if "invoice_no" in text:
                return BusinessError.conflict("An invoice with this invoice number already exists.")
            if "order_no" in text:
                return BusinessError.conflict("An invoice with this order number already exists.")
            if "email" in text:
                return BusinessError.conflict("Email already registered")
            return BusinessError.conflict("Duplicate value violates a uniqueness constraint.")
        if "not null" in text or "check constraint" in text:
            return BusinessError.validation([str(exc.orig)])
        return BusinessError.server_error(exc)


def format_validation_error(error: dict) -> str:
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location)
    message = error.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers that render every failure in the common error shape."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_payload(),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        problems = [format_validation_error(err) for err in exc.errors()]
        logger.info(f"Request validation failed for {request.url.path}: {problems}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "validationErrors": problems},
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        error = BusinessError.from_integrity_error(exc)
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        error = BusinessError.server_error(exc)
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        error = BusinessError.server_error(exc)
        return JSONResponse(status_code=error.status_code, content=error.to_payload())
