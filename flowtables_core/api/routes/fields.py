"""
Field API Routes

REST endpoints for the fields of a table.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Query

from ..base import APIResponse, success_response
from ..dependencies import get_field_service, get_project_id
from ...tables.field_service import FieldService
from ...tables.schemas import FieldCreateRequest, FieldResponse


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/fields", tags=["Fields"])


@router.post(
    "",
    response_model=APIResponse[FieldResponse],
    status_code=201,
    summary="Create Field",
)
async def create_field(
    request: FieldCreateRequest,
    project_id: str = Depends(get_project_id),
    fields: FieldService = Depends(get_field_service),
):
    """Add a field to a table."""
    field = await fields.create(
        project_id=project_id,
        table_id=request.table_id,
        name=request.name,
    )
    return success_response(FieldResponse.model_validate(field))


@router.get(
    "",
    response_model=APIResponse[List[FieldResponse]],
    summary="List Fields",
)
async def list_fields(
    table_id: str = Query(...),
    project_id: str = Depends(get_project_id),
    fields: FieldService = Depends(get_field_service),
):
    """List the fields of a table."""
    items = await fields.find(table_id, project_id)
    return success_response([FieldResponse.model_validate(f) for f in items])


@router.get(
    "/{field_id}",
    response_model=APIResponse[FieldResponse],
    summary="Get Field",
)
async def get_field(
    field_id: str = Path(...),
    project_id: str = Depends(get_project_id),
    fields: FieldService = Depends(get_field_service),
):
    """Get a field."""
    field = await fields.get_by_id(field_id, project_id)
    return success_response(FieldResponse.model_validate(field))


@router.delete(
    "/{field_id}",
    response_model=APIResponse[dict],
    summary="Delete Field",
)
async def delete_field(
    field_id: str = Path(...),
    project_id: str = Depends(get_project_id),
    fields: FieldService = Depends(get_field_service),
):
    """Delete a field and every cell stored for it."""
    await fields.delete(field_id, project_id)
    return success_response({"id": field_id, "deleted": True})
