"""
Record API Routes

REST endpoints for table records. Mutations notify subscribed flows after
the response has been sent.
"""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Path

from ..base import APIResponse, success_response
from ..dependencies import get_authorization, get_project_id, get_record_service
from ...tables.record_service import RecordService
from ...tables.schemas import (
    CreateRecordsRequest,
    DeleteRecordsRequest,
    ListRecordsRequest,
    PopulatedRecordResponse,
    RecordPageResponse,
    TableWebhookEventType,
    UpdateRecordRequest,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/records", tags=["Records"])


async def notify_flows(
    records: RecordService,
    project_id: str,
    table_id: str,
    event_type: TableWebhookEventType,
    data: dict,
    authorization: str,
) -> None:
    """Background task: fan a record event out to subscribed flows."""
    try:
        await records.trigger_webhooks(
            project_id=project_id,
            table_id=table_id,
            event_type=event_type,
            data=data,
            authorization=authorization,
            logger=logger,
        )
    except Exception:
        # Runs after the response; nobody upstream can handle it
        logger.exception(
            f"Failed to dispatch {event_type.value}",
            extra={"project_id": project_id, "table_id": table_id},
        )


def schedule_notifications(
    background_tasks: BackgroundTasks,
    records: RecordService,
    project_id: str,
    event_type: TableWebhookEventType,
    items: List[PopulatedRecordResponse],
    authorization: str,
) -> None:
    for item in items:
        background_tasks.add_task(
            notify_flows,
            records,
            project_id,
            item.table_id,
            event_type,
            item.model_dump(mode="json"),
            authorization,
        )


@router.post(
    "",
    response_model=APIResponse[List[PopulatedRecordResponse]],
    status_code=201,
    summary="Create Records",
)
async def create_records(
    request: CreateRecordsRequest,
    background_tasks: BackgroundTasks,
    project_id: str = Depends(get_project_id),
    authorization: str = Depends(get_authorization),
    records: RecordService = Depends(get_record_service),
):
    """Create a batch of records. Cells naming unknown fields are dropped."""
    created = await records.create(
        table_id=request.table_id,
        project_id=project_id,
        records=request.records,
    )
    items = [PopulatedRecordResponse.from_record(r) for r in created]

    schedule_notifications(
        background_tasks, records, project_id,
        TableWebhookEventType.RECORD_CREATED, items, authorization,
    )
    return success_response(items)


@router.post(
    "/list",
    response_model=APIResponse[RecordPageResponse],
    summary="List Records",
)
async def list_records(
    request: ListRecordsRequest,
    project_id: str = Depends(get_project_id),
    records: RecordService = Depends(get_record_service),
):
    """List the records of a table matching every filter."""
    page = await records.list(
        table_id=request.table_id,
        project_id=project_id,
        filters=request.filters,
        limit=request.limit,
        cursor=request.cursor,
    )
    return success_response(
        RecordPageResponse(
            data=[PopulatedRecordResponse.from_record(r) for r in page.data],
            next=page.next,
            previous=page.previous,
        )
    )


@router.get(
    "/{record_id}",
    response_model=APIResponse[PopulatedRecordResponse],
    summary="Get Record",
)
async def get_record(
    record_id: str = Path(...),
    project_id: str = Depends(get_project_id),
    records: RecordService = Depends(get_record_service),
):
    """Get a record with all of its cells."""
    record = await records.get_by_id(record_id, project_id)
    return success_response(PopulatedRecordResponse.from_record(record))


@router.patch(
    "/{record_id}",
    response_model=APIResponse[PopulatedRecordResponse],
    summary="Update Record",
)
async def update_record(
    request: UpdateRecordRequest,
    background_tasks: BackgroundTasks,
    record_id: str = Path(...),
    project_id: str = Depends(get_project_id),
    authorization: str = Depends(get_authorization),
    records: RecordService = Depends(get_record_service),
):
    """Upsert cells of a record."""
    record = await records.update(
        id=record_id,
        project_id=project_id,
        table_id=request.table_id,
        cells=request.cells,
    )
    item = PopulatedRecordResponse.from_record(record)

    schedule_notifications(
        background_tasks, records, project_id,
        TableWebhookEventType.RECORD_UPDATED, [item], authorization,
    )
    return success_response(item)


@router.delete(
    "",
    response_model=APIResponse[List[PopulatedRecordResponse]],
    summary="Delete Records",
)
async def delete_records(
    background_tasks: BackgroundTasks,
    request: DeleteRecordsRequest = Body(...),
    project_id: str = Depends(get_project_id),
    authorization: str = Depends(get_authorization),
    records: RecordService = Depends(get_record_service),
):
    """Delete records and return them as they were."""
    deleted = await records.delete(ids=request.ids, project_id=project_id)
    items = [PopulatedRecordResponse.from_record(r) for r in deleted]

    schedule_notifications(
        background_tasks, records, project_id,
        TableWebhookEventType.RECORD_DELETED, items, authorization,
    )
    return success_response(items)
