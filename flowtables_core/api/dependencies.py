"""
API Dependencies

FastAPI dependencies resolving services and request context.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from ..container import ServiceContainer
from ..tables.field_service import FieldService
from ..tables.record_service import RecordService
from ..tables.table_service import TableService


logger = logging.getLogger(__name__)


def get_services(request: Request) -> ServiceContainer:
    """Get the service container of the running application."""
    return request.app.state.services


def get_table_service(services: ServiceContainer = Depends(get_services)) -> TableService:
    return services.tables


def get_field_service(services: ServiceContainer = Depends(get_services)) -> FieldService:
    return services.fields


def get_record_service(services: ServiceContainer = Depends(get_services)) -> RecordService:
    return services.records


async def get_project_id(
    x_project_id: str = Header(..., alias="X-Project-ID", min_length=1),
) -> str:
    """Project the request operates in."""
    return x_project_id


async def get_authorization(
    authorization: Optional[str] = Header(default=None),
) -> str:
    """Authorization header, forwarded to flows on record events."""
    return authorization or ""


__all__ = [
    "get_services",
    "get_table_service",
    "get_field_service",
    "get_record_service",
    "get_project_id",
    "get_authorization",
]
