"""
Tables Module

Tables, fields and records: the services and their request models.
"""

from .field_service import FieldService
from .filters import Filter, FilterOperator, build_filter_clause, build_filter_clauses
from .record_service import FieldSet, RecordService
from .schemas import (
    CellData,
    CreateRecordsRequest,
    PopulatedRecordResponse,
    SeekPage,
    TableWebhookEventType,
    UpdateRecordRequest,
)
from .table_service import TableService

__all__ = [
    "FieldService",
    "Filter",
    "FilterOperator",
    "build_filter_clause",
    "build_filter_clauses",
    "FieldSet",
    "RecordService",
    "CellData",
    "CreateRecordsRequest",
    "PopulatedRecordResponse",
    "SeekPage",
    "TableWebhookEventType",
    "UpdateRecordRequest",
    "TableService",
]
