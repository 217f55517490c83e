"""
Core Module

Cross-cutting building blocks shared by every service: structured errors
and logging setup.
"""

from .exceptions import (
    APIException,
    ConflictError,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)
from .logging import setup_logging

__all__ = [
    "APIException",
    "ConflictError",
    "EntityNotFoundError",
    "ErrorCode",
    "ValidationError",
    "setup_logging",
]
