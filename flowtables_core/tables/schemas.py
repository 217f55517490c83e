"""
Table Schemas

Request and response models for tables, fields, records and table
webhooks.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .filters import Filter

T = TypeVar("T")


class TableWebhookEventType(str, Enum):
    """Record events a flow can subscribe to."""

    RECORD_CREATED = "RECORD_CREATED"
    RECORD_UPDATED = "RECORD_UPDATED"
    RECORD_DELETED = "RECORD_DELETED"


@dataclass
class SeekPage(Generic[T]):
    """A page of results with opaque cursors."""

    data: List[T] = field(default_factory=list)
    next: Optional[str] = None
    previous: Optional[str] = None


# =============================================================================
# Record Requests
# =============================================================================


class CellData(BaseModel):
    """A submitted value, addressed by field name."""

    key: str = Field(..., description="Field name")
    value: Any = Field(default=None, description="Cell value")


class CreateRecordsRequest(BaseModel):
    """Request to create a batch of records."""

    table_id: str
    records: List[List[CellData]] = Field(..., description="One cell list per record")


class UpdateRecordRequest(BaseModel):
    """Request to update the cells of a record."""

    table_id: str
    cells: Optional[List[CellData]] = None


class ListRecordsRequest(BaseModel):
    """Request to list the records of a table."""

    table_id: str
    filters: Optional[List[Filter]] = None
    limit: Optional[int] = Field(default=None, ge=1)
    cursor: Optional[str] = None


class DeleteRecordsRequest(BaseModel):
    """Request to delete records by ID."""

    ids: List[str] = Field(..., min_length=1)


# =============================================================================
# Record Responses
# =============================================================================


class PopulatedCell(BaseModel):
    """A cell as returned to callers."""

    field_name: Optional[str] = None
    value: Optional[str] = None
    created: datetime
    updated: datetime


class PopulatedRecordResponse(BaseModel):
    """A record with every cell it owns, keyed by field ID."""

    id: str
    table_id: str
    project_id: str
    created: datetime
    updated: datetime
    cells: Dict[str, PopulatedCell] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record) -> "PopulatedRecordResponse":
        """Build the response from a populated ORM record."""
        return cls(
            id=record.id,
            table_id=record.table_id,
            project_id=record.project_id,
            created=record.created_at,
            updated=record.updated_at,
            cells={
                cell.field_id: PopulatedCell(
                    field_name=cell.field.name if cell.field is not None else None,
                    value=cell.value,
                    created=cell.created_at,
                    updated=cell.updated_at,
                )
                for cell in record.cells
            },
        )


class RecordPageResponse(BaseModel):
    """A page of populated records."""

    data: List[PopulatedRecordResponse]
    next: Optional[str] = None
    previous: Optional[str] = None


# =============================================================================
# Table & Field Models
# =============================================================================


class TableCreateRequest(BaseModel):
    """Request to create a table."""

    name: str = Field(..., min_length=1, max_length=255)


class TableResponse(BaseModel):
    """Table response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    name: str
    created_at: datetime
    updated_at: datetime


class FieldCreateRequest(BaseModel):
    """Request to create a field."""

    table_id: str
    name: str = Field(..., min_length=1, max_length=255)


class FieldResponse(BaseModel):
    """Field response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    table_id: str
    name: str
    created_at: datetime
    updated_at: datetime


class TableWebhookCreateRequest(BaseModel):
    """Request to subscribe a flow to record events."""

    flow_id: str = Field(..., min_length=1, max_length=64)
    events: List[TableWebhookEventType] = Field(..., min_length=1)


class TableWebhookResponse(BaseModel):
    """Table webhook response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    table_id: str
    flow_id: str
    events: List[str]
    created_at: datetime


__all__ = [
    "TableWebhookEventType",
    "SeekPage",
    "CellData",
    "CreateRecordsRequest",
    "UpdateRecordRequest",
    "ListRecordsRequest",
    "DeleteRecordsRequest",
    "PopulatedCell",
    "PopulatedRecordResponse",
    "RecordPageResponse",
    "TableCreateRequest",
    "TableResponse",
    "FieldCreateRequest",
    "FieldResponse",
    "TableWebhookCreateRequest",
    "TableWebhookResponse",
]
