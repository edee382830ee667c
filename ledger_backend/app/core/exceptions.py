"""
Custom exceptions and error handlers for consistent error responses.

Every failure leaves the API as the same envelope:
``{"success": false, "error": <message>, "code": <ERROR_CODE>, "details": {...}}``.
"""

import logging
from typing import Any, Dict

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorCode:
    """Stable error codes exposed to callers."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    FOREIGN_KEY_VIOLATION = "FOREIGN_KEY_VIOLATION"
    NULL_CONSTRAINT = "NULL_CONSTRAINT"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppException):
    """Raised when input is malformed or breaks a business precondition."""

    def __init__(self, message: str = "Validation failed", details: Dict[str, Any] = None,
                 error_code: str = ErrorCode.VALIDATION_ERROR):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details
        )


class InvalidAmountError(ValidationError):
    """Raised when an amount is not a finite number greater than zero."""

    def __init__(self, amount: Any):
        super().__init__(
            message=f"Amount must be a finite number greater than zero, got {amount!r}",
            details={"amount": str(amount)},
            error_code=ErrorCode.INVALID_INPUT
        )


class NotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code=ErrorCode.NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class AccountNotFoundError(NotFoundError):
    """Raised when an account id does not resolve."""

    def __init__(self, account_id: Any):
        super().__init__("Account", account_id)


class ConstraintViolationError(AppException):
    """Raised when the storage layer rejects a write (unique, foreign key, not null, check)."""

    def __init__(self, message: str, error_code: str = ErrorCode.CONSTRAINT_VIOLATION, reason: str = None):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_409_CONFLICT,
            details={"reason": reason} if reason else None
        )


class StorageFailureError(AppException):
    """Raised for any other storage-level failure inside a unit of work."""

    def __init__(self, reason: str):
        super().__init__(
            message="Database operation failed",
            error_code=ErrorCode.DATABASE_ERROR,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"reason": reason}
        )


def _reason(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


def classify_storage_error(exc: SQLAlchemyError) -> AppException:
    """
    Map a raw SQLAlchemy error to the application taxonomy.

    SQLite reports the violated constraint in the message text
    ("UNIQUE constraint failed: accounts.kind, accounts.code").
    """
    reason = _reason(exc)

    if isinstance(exc, IntegrityError):
        lowered = reason.lower()
        if "unique constraint" in lowered:
            return ConstraintViolationError(
                "Duplicate entry. This record already exists.",
                ErrorCode.DUPLICATE_ENTRY,
                reason
            )
        if "foreign key constraint" in lowered:
            return ConstraintViolationError(
                "Foreign key constraint violation. Related record does not exist.",
                ErrorCode.FOREIGN_KEY_VIOLATION,
                reason
            )
        if "not null constraint" in lowered:
            return ConstraintViolationError(
                "Required field is missing.",
                ErrorCode.NULL_CONSTRAINT,
                reason
            )
        return ConstraintViolationError("Constraint violation.", ErrorCode.CONSTRAINT_VIOLATION, reason)

    return StorageFailureError(reason)


def error_body(message: str, code: str, details: Dict[str, Any] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "error": message,
        "code": code,
        "details": details or {}
    }


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.error_code, exc.details)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: ErrorCode.INVALID_INPUT,
        404: ErrorCode.NOT_FOUND,
        405: ErrorCode.INVALID_INPUT,
        409: ErrorCode.CONSTRAINT_VIOLATION,
        500: ErrorCode.INTERNAL_ERROR
    }

    error_code = error_code_map.get(exc.status_code, ErrorCode.INTERNAL_ERROR)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), error_code)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            "Validation failed",
            ErrorCode.VALIDATION_ERROR,
            {"errors": jsonable_errors(exc)}
        )
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception instances (e.g. a ValueError from a validator)
    errors = []
    for error in exc.errors():
        errors.append({
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg"),
            "type": error.get("type"),
        })
    return errors


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s", type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An internal server error occurred", ErrorCode.INTERNAL_ERROR)
    )
