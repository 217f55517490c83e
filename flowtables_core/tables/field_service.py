"""
Field Service

Manages the named fields of a table.
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError

from ..core.exceptions import ConflictError, EntityNotFoundError
from ..database.base import DatabaseManager
from ..database.models import Field
from ..database.repositories import FieldRepository, TableRepository

logger = logging.getLogger(__name__)


class FieldService:
    """Service for field operations."""

    def __init__(self, database: DatabaseManager):
        self._database = database

    async def create(self, project_id: str, table_id: str, name: str) -> Field:
        """
        Add a field to a table.

        Raises:
            EntityNotFoundError: If the table does not exist in the project.
            ConflictError: If the table already has a field with this name.
        """
        try:
            async with self._database.transaction() as session:
                table = await TableRepository(session).get_for_project(table_id, project_id)
                if table is None:
                    raise EntityNotFoundError("Table", table_id)

                field = await FieldRepository(session).create(
                    project_id=project_id,
                    table_id=table_id,
                    name=name,
                )
        except IntegrityError as e:
            raise ConflictError(
                f"Field '{name}' already exists on table '{table_id}'",
                details={"table_id": table_id, "name": name},
            ) from e

        logger.info(
            f"Field created: {field.id} ({name})",
            extra={"project_id": project_id, "table_id": table_id},
        )
        return field

    async def find(self, table_id: str, project_id: str) -> List[Field]:
        """Get every field of a table."""
        async with self._database.session() as session:
            return await FieldRepository(session).find_by_table(table_id, project_id)

    async def get_by_id(self, id: str, project_id: str) -> Field:
        """Get a field of the project."""
        async with self._database.session() as session:
            field = await FieldRepository(session).get_for_project(id, project_id)
        if field is None:
            raise EntityNotFoundError("Field", id)
        return field

    async def delete(self, id: str, project_id: str) -> None:
        """Delete a field. Its cells go with it."""
        async with self._database.transaction() as session:
            deleted = await FieldRepository(session).delete_for_project(id, project_id)
        if not deleted:
            raise EntityNotFoundError("Field", id)
        logger.info(f"Field deleted: {id}", extra={"project_id": project_id})
