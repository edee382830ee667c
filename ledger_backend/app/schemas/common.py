"""
Response envelope shared by every endpoint.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """``{"success": true, "data": ..., "message": ...}``"""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class ErrorEnvelope(BaseModel):
    """Shape produced by the exception handlers."""
    success: bool = False
    error: str
    code: str
    details: dict = {}


# OpenAPI documentation of the error statuses every ledger route can return
ERROR_RESPONSES = {
    404: {"model": ErrorEnvelope, "description": "Account not found"},
    409: {"model": ErrorEnvelope, "description": "Constraint violation"},
    422: {"model": ErrorEnvelope, "description": "Validation failed"},
    500: {"model": ErrorEnvelope, "description": "Storage failure"},
}
