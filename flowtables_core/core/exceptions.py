"""
Exception Classes

Structured errors raised by the services and rendered by the API layer.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Standardized error codes."""

    # Validation errors (2xxx)
    VALIDATION_ERROR = "VAL_2001"
    INVALID_FILTER = "VAL_2006"

    # Resource errors (3xxx)
    RESOURCE_NOT_FOUND = "RES_3001"
    RESOURCE_CONFLICT = "RES_3003"

    # Server errors (5xxx)
    INTERNAL_ERROR = "SRV_5001"


class APIException(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.field = field
        super().__init__(message)

    def to_dict(self, request_id: Optional[str] = None) -> Dict[str, Any]:
        """Convert to the error section of a response body."""
        error = {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "field": self.field,
        }
        if request_id:
            error["request_id"] = request_id
        return error


class EntityNotFoundError(APIException):
    """An entity does not exist, or not within the caller's project."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            code=ErrorCode.RESOURCE_NOT_FOUND,
            message=f"{entity_type} with ID '{entity_id}' not found",
            status_code=404,
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


class ValidationError(APIException):
    """Validation failure."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details,
            field=field,
        )


class ConflictError(APIException):
    """Resource conflict."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.RESOURCE_CONFLICT,
            message=message,
            status_code=409,
            details=details,
        )


__all__ = [
    "ErrorCode",
    "APIException",
    "EntityNotFoundError",
    "ValidationError",
    "ConflictError",
]
