"""
Record Service

Creates, queries, updates and deletes table records. Cell values are
validated against the table's fields at the boundary: cells naming a field
that does not exist are dropped, never rejected.
"""

import logging
from datetime import datetime
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Union,
)

from ..core.exceptions import EntityNotFoundError
from ..database.base import DatabaseManager, generate_id
from ..database.models import Field, Record, to_cell_value
from ..database.repositories import (
    CellRepository,
    FieldRepository,
    RecordRepository,
    TableRepository,
)
from .filters import Filter, build_filter_clauses
from .schemas import CellData, SeekPage, TableWebhookEventType

if TYPE_CHECKING:
    from ..webhooks.dispatcher import TableWebhookDispatcher

logger = logging.getLogger(__name__)


class FieldSet:
    """The fields of one table, addressable by name."""

    def __init__(self, fields: Iterable[Field]):
        self._by_name: Dict[str, Field] = {f.name: f for f in fields}

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)

    def resolve(self, cells: Iterable[CellData]) -> Dict[str, Optional[str]]:
        """
        Map submitted cells to field IDs.

        Cells whose key is not a field name are dropped. A field named twice
        keeps the last value.
        """
        resolved: Dict[str, Optional[str]] = {}
        for cell in cells:
            field = self._by_name.get(cell.key)
            if field is not None:
                resolved[field.id] = to_cell_value(cell.value)
        return resolved


def _cell_rows(
    record_id: str,
    project_id: str,
    values: Dict[str, Optional[str]],
    now: datetime,
) -> List[Dict[str, Any]]:
    return [
        {
            "id": generate_id(),
            "project_id": project_id,
            "record_id": record_id,
            "field_id": field_id,
            "value": value,
            "created_at": now,
            "updated_at": now,
        }
        for field_id, value in values.items()
    ]


class RecordService:
    """Service for record operations."""

    def __init__(
        self,
        database: DatabaseManager,
        dispatcher: Optional["TableWebhookDispatcher"] = None,
    ):
        """
        Initialize record service.

        Args:
            database: Database manager providing transaction scopes
            dispatcher: Webhook dispatcher for record events
        """
        self._database = database
        self._dispatcher = dispatcher

    async def create(
        self,
        table_id: str,
        project_id: str,
        records: Sequence[Sequence[CellData]],
    ) -> List[Record]:
        """
        Create a batch of records.

        One record is created per payload, including payloads whose cells
        were all dropped. Records and cells are written in one transaction.

        Returns:
            The populated records in input order

        Raises:
            EntityNotFoundError: If the table does not exist in the project.
        """
        async with self._database.transaction() as session:
            table = await TableRepository(session).get_for_project(table_id, project_id)
            if table is None:
                raise EntityNotFoundError("Table", table_id)

            fields = FieldSet(
                await FieldRepository(session).find_by_table(table_id, project_id)
            )
            resolved = [fields.resolve(cells) for cells in records]

            now = datetime.utcnow()
            record_ids = [generate_id() for _ in resolved]
            await RecordRepository(session).insert_many([
                {
                    "id": record_id,
                    "table_id": table_id,
                    "project_id": project_id,
                    "created_at": now,
                    "updated_at": now,
                }
                for record_id in record_ids
            ])

            cell_rows: List[Dict[str, Any]] = []
            for record_id, values in zip(record_ids, resolved):
                cell_rows.extend(_cell_rows(record_id, project_id, values, now))
            await CellRepository(session).insert_many(cell_rows)

            populated = await RecordRepository(session).find_populated_by_ids(
                record_ids, project_id, table_id
            )

        dropped = sum(len(cells) for cells in records) - len(cell_rows)
        if dropped:
            logger.debug(
                f"Dropped {dropped} cells with unknown fields",
                extra={"project_id": project_id, "table_id": table_id},
            )
        logger.info(
            f"Created {len(populated)} records",
            extra={"project_id": project_id, "table_id": table_id},
        )

        # A batch shares one creation instant; keep the submitted order
        position = {record_id: i for i, record_id in enumerate(record_ids)}
        return sorted(populated, key=lambda r: position[r.id])

    async def list(
        self,
        table_id: str,
        project_id: str,
        filters: Optional[Sequence[Filter]] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> SeekPage[Record]:
        """
        List the records of a table that satisfy every filter.

        Pagination is not implemented: `limit` and `cursor` are accepted and
        ignored, and the returned page never carries cursors.
        """
        conditions = build_filter_clauses(filters, project_id)

        async with self._database.session() as session:
            records = await RecordRepository(session).list_populated(
                table_id=table_id,
                project_id=project_id,
                conditions=conditions,
            )

        return SeekPage(data=records, next=None, previous=None)

    async def get_by_id(self, id: str, project_id: str) -> Record:
        """
        Get a populated record of the project.

        Raises:
            EntityNotFoundError: If no such record exists in the project.
        """
        async with self._database.session() as session:
            record = await RecordRepository(session).get_populated(id, project_id)

        if record is None:
            raise EntityNotFoundError("Record", id)
        return record

    async def update(
        self,
        id: str,
        project_id: str,
        table_id: str,
        cells: Optional[Sequence[CellData]] = None,
    ) -> Record:
        """
        Upsert cells of a record.

        Existing cells for the same field are overwritten, new ones are
        inserted. Unknown field names are dropped.

        Raises:
            EntityNotFoundError: If the record does not exist in the
                project's table.
        """
        async with self._database.transaction() as session:
            records = RecordRepository(session)

            record = await records.find_one(id, project_id, table_id)
            if record is None:
                raise EntityNotFoundError("Record", id)

            if cells:
                fields = FieldSet(
                    await FieldRepository(session).find_by_table(table_id, project_id)
                )
                values = fields.resolve(cells)
                await CellRepository(session).upsert_many(
                    _cell_rows(id, project_id, values, datetime.utcnow())
                )

            updated = await records.get_populated(id, project_id, table_id)
            if updated is None:
                raise EntityNotFoundError("Record", id)

        logger.info(
            f"Record updated: {id}",
            extra={"project_id": project_id, "table_id": table_id},
        )
        return updated

    async def delete(self, ids: Sequence[str], project_id: str) -> List[Record]:
        """
        Delete records of a project.

        Returns:
            The populated records as they were before deletion
        """
        async with self._database.transaction() as session:
            records = RecordRepository(session)
            snapshot = await records.find_populated_by_ids(ids, project_id)
            await records.delete_many(ids, project_id)

        logger.info(
            f"Deleted {len(snapshot)} records",
            extra={"project_id": project_id},
        )
        return snapshot

    async def trigger_webhooks(
        self,
        project_id: str,
        table_id: str,
        event_type: Union[TableWebhookEventType, str],
        data: Dict[str, Any],
        authorization: str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Notify the flows subscribed to a record event on a table."""
        if self._dispatcher is None:
            raise RuntimeError("RecordService has no webhook dispatcher configured")

        await self._dispatcher.trigger(
            project_id=project_id,
            table_id=table_id,
            event_type=event_type,
            data=data,
            authorization=authorization,
            logger=logger,
        )


__all__ = ["FieldSet", "RecordService"]
