"""
Table API Routes

REST endpoints for tables and their webhook subscriptions.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path

from ..base import APIResponse, success_response
from ..dependencies import get_project_id, get_table_service
from ...tables.schemas import (
    TableCreateRequest,
    TableResponse,
    TableWebhookCreateRequest,
    TableWebhookResponse,
)
from ...tables.table_service import TableService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tables", tags=["Tables"])


@router.post(
    "",
    response_model=APIResponse[TableResponse],
    status_code=201,
    summary="Create Table",
)
async def create_table(
    request: TableCreateRequest,
    project_id: str = Depends(get_project_id),
    tables: TableService = Depends(get_table_service),
):
    """Create a table in the project."""
    table = await tables.create(project_id=project_id, name=request.name)
    return success_response(TableResponse.model_validate(table))


@router.get(
    "",
    response_model=APIResponse[List[TableResponse]],
    summary="List Tables",
)
async def list_tables(
    project_id: str = Depends(get_project_id),
    tables: TableService = Depends(get_table_service),
):
    """List the tables of the project."""
    items = await tables.list(project_id)
    return success_response([TableResponse.model_validate(t) for t in items])


@router.get(
    "/{table_id}",
    response_model=APIResponse[TableResponse],
    summary="Get Table",
)
async def get_table(
    table_id: str = Path(...),
    project_id: str = Depends(get_project_id),
    tables: TableService = Depends(get_table_service),
):
    """Get a table."""
    table = await tables.get_by_id(table_id, project_id)
    return success_response(TableResponse.model_validate(table))


@router.delete(
    "/{table_id}",
    response_model=APIResponse[dict],
    summary="Delete Table",
)
async def delete_table(
    table_id: str = Path(...),
    project_id: str = Depends(get_project_id),
    tables: TableService = Depends(get_table_service),
):
    """Delete a table with all of its fields, records and webhooks."""
    await tables.delete(table_id, project_id)
    return success_response({"id": table_id, "deleted": True})


# =============================================================================
# Webhooks
# =============================================================================


@router.post(
    "/{table_id}/webhooks",
    response_model=APIResponse[TableWebhookResponse],
    status_code=201,
    summary="Create Table Webhook",
)
async def create_table_webhook(
    request: TableWebhookCreateRequest,
    table_id: str = Path(...),
    project_id: str = Depends(get_project_id),
    tables: TableService = Depends(get_table_service),
):
    """Subscribe a flow to record events of the table."""
    webhook = await tables.create_webhook(
        project_id=project_id,
        table_id=table_id,
        flow_id=request.flow_id,
        events=request.events,
    )
    return success_response(TableWebhookResponse.model_validate(webhook))


@router.delete(
    "/{table_id}/webhooks/{webhook_id}",
    response_model=APIResponse[dict],
    summary="Delete Table Webhook",
)
async def delete_table_webhook(
    table_id: str = Path(...),
    webhook_id: str = Path(...),
    project_id: str = Depends(get_project_id),
    tables: TableService = Depends(get_table_service),
):
    """Remove a webhook subscription."""
    await tables.delete_webhook(project_id, table_id, webhook_id)
    return success_response({"id": webhook_id, "deleted": True})
