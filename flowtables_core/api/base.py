"""
API Base Types Module

Response envelope models and helpers shared by every route.
"""

import secrets
import time
import uuid
from datetime import datetime
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from ..core.exceptions import APIException


T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    success: bool = Field(default=True, description="Whether request succeeded")
    data: Optional[T] = Field(default=None, description="Response data")
    error: Optional[Dict[str, Any]] = Field(default=None, description="Error information")
    meta: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")
    request_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique request identifier",
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="Response timestamp",
    )


def generate_request_id() -> str:
    """Generate a unique request ID."""
    timestamp = int(time.time() * 1000)
    random_part = secrets.token_hex(8)
    return f"req_{timestamp}_{random_part}"


def success_response(
    data: Any,
    meta: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a success response."""
    return {
        "success": True,
        "data": data,
        "error": None,
        "meta": meta,
        "request_id": request_id or generate_request_id(),
        "timestamp": datetime.utcnow().isoformat(),
    }


def error_response(
    error: APIException,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Create an error response."""
    request_id = request_id or generate_request_id()
    return {
        "success": False,
        "data": None,
        "error": error.to_dict(request_id),
        "meta": None,
        "request_id": request_id,
        "timestamp": datetime.utcnow().isoformat(),
    }


__all__ = [
    "APIResponse",
    "generate_request_id",
    "success_response",
    "error_response",
]
