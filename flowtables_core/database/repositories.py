"""
Database Repositories

Repository pattern implementation for data access. Repositories never open
their own transactions: the caller passes in the session of the
transaction scope it is working in.
"""

from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import and_, delete, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import ColumnElement

from .base import Base
from .models import Cell, Field, Flag, Record, Table, TableWebhook


# =============================================================================
# Generic Type Variable
# =============================================================================


ModelType = TypeVar("ModelType", bound=Base)


# =============================================================================
# Base Repository
# =============================================================================


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations."""

    model: Type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """Get entity by ID."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs) -> ModelType:
        """Create a new entity."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance


class ProjectScopedRepository(BaseRepository[ModelType]):
    """Repository for entities that belong to a project."""

    async def get_for_project(
        self,
        id: str,
        project_id: str,
    ) -> Optional[ModelType]:
        """Get entity by ID, only if it belongs to the project."""
        result = await self.session.execute(
            select(self.model).where(
                and_(
                    self.model.id == id,
                    self.model.project_id == project_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def delete_for_project(self, id: str, project_id: str) -> bool:
        """Delete an entity of the project. Returns False when missing."""
        result = await self.session.execute(
            delete(self.model).where(
                and_(
                    self.model.id == id,
                    self.model.project_id == project_id,
                )
            )
        )
        return result.rowcount > 0


# =============================================================================
# Table Repository
# =============================================================================


class TableRepository(ProjectScopedRepository[Table]):
    """Repository for Table entities."""

    model = Table

    async def list_by_project(self, project_id: str) -> List[Table]:
        """List tables of a project, oldest first."""
        result = await self.session.execute(
            select(Table)
            .where(Table.project_id == project_id)
            .order_by(Table.created_at.asc())
        )
        return list(result.scalars().all())


# =============================================================================
# Field Repository
# =============================================================================


class FieldRepository(ProjectScopedRepository[Field]):
    """Repository for Field entities."""

    model = Field

    async def find_by_table(self, table_id: str, project_id: str) -> List[Field]:
        """Get every field currently defined for a table."""
        result = await self.session.execute(
            select(Field)
            .where(
                and_(
                    Field.table_id == table_id,
                    Field.project_id == project_id,
                )
            )
            .order_by(Field.created_at.asc())
        )
        return list(result.scalars().all())


# =============================================================================
# Record Repository
# =============================================================================


class RecordRepository(ProjectScopedRepository[Record]):
    """Repository for Record entities and their populated views."""

    model = Record

    def _populated(self):
        return select(Record).options(
            selectinload(Record.cells).selectinload(Cell.field)
        )

    async def insert_many(self, rows: Sequence[Dict[str, Any]]) -> None:
        """Bulk insert records from fully specified column dicts."""
        if not rows:
            return
        await self.session.execute(insert(Record), list(rows))

    async def find_one(
        self,
        id: str,
        project_id: str,
        table_id: str,
    ) -> Optional[Record]:
        """Get a bare record scoped to project and table."""
        result = await self.session.execute(
            select(Record).where(
                and_(
                    Record.id == id,
                    Record.project_id == project_id,
                    Record.table_id == table_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_populated(
        self,
        id: str,
        project_id: str,
        table_id: Optional[str] = None,
    ) -> Optional[Record]:
        """Get a record with all of its cells."""
        conditions = [Record.id == id, Record.project_id == project_id]
        if table_id is not None:
            conditions.append(Record.table_id == table_id)

        # Cells may have changed since the record entered the identity map
        result = await self.session.execute(
            self._populated()
            .where(and_(*conditions))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_populated_by_ids(
        self,
        ids: Sequence[str],
        project_id: str,
        table_id: Optional[str] = None,
    ) -> List[Record]:
        """Get populated records by ID, oldest first."""
        if not ids:
            return []

        conditions = [Record.id.in_(list(ids)), Record.project_id == project_id]
        if table_id is not None:
            conditions.append(Record.table_id == table_id)

        result = await self.session.execute(
            self._populated()
            .where(and_(*conditions))
            .order_by(Record.created_at.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_populated(
        self,
        table_id: str,
        project_id: str,
        conditions: Sequence[ColumnElement] = (),
    ) -> List[Record]:
        """List populated records of a table matching extra conditions."""
        result = await self.session.execute(
            self._populated()
            .where(
                and_(
                    Record.table_id == table_id,
                    Record.project_id == project_id,
                    *conditions,
                )
            )
            .order_by(Record.created_at.asc())
        )
        return list(result.scalars().all())

    async def delete_many(self, ids: Sequence[str], project_id: str) -> int:
        """Hard delete records of a project. Cells cascade in storage."""
        if not ids:
            return 0
        result = await self.session.execute(
            delete(Record)
            .where(
                and_(
                    Record.id.in_(list(ids)),
                    Record.project_id == project_id,
                )
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


# =============================================================================
# Cell Repository
# =============================================================================


class CellRepository(BaseRepository[Cell]):
    """Repository for Cell entities."""

    model = Cell

    CONFLICT_KEY = ("project_id", "field_id", "record_id")

    async def insert_many(self, rows: Sequence[Dict[str, Any]]) -> None:
        """Bulk insert cells from fully specified column dicts."""
        if not rows:
            return
        await self.session.execute(insert(Cell), list(rows))

    async def upsert_many(self, rows: Sequence[Dict[str, Any]]) -> None:
        """
        Insert cells, overwriting the value of any cell that already exists
        for the same (project_id, field_id, record_id).
        """
        if not rows:
            return

        dialect = self.session.bind.dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(Cell).values(list(rows))
        elif dialect == "sqlite":
            stmt = sqlite.insert(Cell).values(list(rows))
        else:
            raise NotImplementedError(f"Cell upsert is not supported on {dialect}")

        stmt = stmt.on_conflict_do_update(
            index_elements=list(self.CONFLICT_KEY),
            set_={
                "value": stmt.excluded.value,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.session.execute(stmt)

    async def list_by_record(self, record_id: str) -> List[Cell]:
        """List the cells stored for a record."""
        result = await self.session.execute(
            select(Cell).where(Cell.record_id == record_id)
        )
        return list(result.scalars().all())


# =============================================================================
# Table Webhook Repository
# =============================================================================


class TableWebhookRepository(ProjectScopedRepository[TableWebhook]):
    """Repository for TableWebhook entities."""

    model = TableWebhook

    async def list_by_table(
        self,
        project_id: str,
        table_id: str,
    ) -> List[TableWebhook]:
        """List webhook subscriptions of a table."""
        result = await self.session.execute(
            select(TableWebhook)
            .where(
                and_(
                    TableWebhook.project_id == project_id,
                    TableWebhook.table_id == table_id,
                )
            )
            .order_by(TableWebhook.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_for_event(
        self,
        project_id: str,
        table_id: str,
        event_type: str,
    ) -> List[TableWebhook]:
        """Get subscriptions of a table that listen to an event type."""
        webhooks = await self.list_by_table(project_id, table_id)

        # Event lists are JSON; match in Python to stay dialect neutral
        return [webhook for webhook in webhooks if webhook.matches(event_type)]


# =============================================================================
# Flag Repository
# =============================================================================


class FlagRepository(BaseRepository[Flag]):
    """Repository for Flag entities."""

    model = Flag

    async def save(self, id: str, value: Any) -> Flag:
        """Create or replace a flag value."""
        flag = await self.get_by_id(id)
        if flag is None:
            return await self.create(id=id, value=value)

        flag.value = value
        await self.session.flush()
        return flag


__all__ = [
    "BaseRepository",
    "ProjectScopedRepository",
    "TableRepository",
    "FieldRepository",
    "RecordRepository",
    "CellRepository",
    "TableWebhookRepository",
    "FlagRepository",
]
