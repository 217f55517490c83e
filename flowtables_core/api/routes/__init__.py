"""
API Routes Module

All REST API endpoints of the service.
"""

from .fields import router as fields_router
from .records import router as records_router
from .tables import router as tables_router


__all__ = [
    "fields_router",
    "records_router",
    "tables_router",
]
