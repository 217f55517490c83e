"""
Table Service

Manages tables and the flow webhooks subscribed to their record events.
"""

import logging
from typing import List, Sequence, Union

from ..core.exceptions import EntityNotFoundError
from ..database.base import DatabaseManager
from ..database.models import Table, TableWebhook
from ..database.repositories import TableRepository, TableWebhookRepository
from .schemas import TableWebhookEventType

logger = logging.getLogger(__name__)


class TableService:
    """Service for table and table webhook operations."""

    def __init__(self, database: DatabaseManager):
        self._database = database

    async def create(self, project_id: str, name: str) -> Table:
        """Create a table in a project."""
        async with self._database.transaction() as session:
            table = await TableRepository(session).create(
                project_id=project_id,
                name=name,
            )
        logger.info(f"Table created: {table.id}", extra={"project_id": project_id})
        return table

    async def get_by_id(self, id: str, project_id: str) -> Table:
        """
        Get a table of the project.

        Raises:
            EntityNotFoundError: If the table does not exist in the project.
        """
        async with self._database.session() as session:
            table = await TableRepository(session).get_for_project(id, project_id)
        if table is None:
            raise EntityNotFoundError("Table", id)
        return table

    async def list(self, project_id: str) -> List[Table]:
        """List the tables of a project."""
        async with self._database.session() as session:
            return await TableRepository(session).list_by_project(project_id)

    async def delete(self, id: str, project_id: str) -> None:
        """Delete a table with its fields, records and webhooks."""
        async with self._database.transaction() as session:
            deleted = await TableRepository(session).delete_for_project(id, project_id)
        if not deleted:
            raise EntityNotFoundError("Table", id)
        logger.info(f"Table deleted: {id}", extra={"project_id": project_id})

    # =========================================================================
    # Webhooks
    # =========================================================================

    async def create_webhook(
        self,
        project_id: str,
        table_id: str,
        flow_id: str,
        events: Sequence[Union[TableWebhookEventType, str]],
    ) -> TableWebhook:
        """Subscribe a flow to record events of a table."""
        async with self._database.transaction() as session:
            table = await TableRepository(session).get_for_project(table_id, project_id)
            if table is None:
                raise EntityNotFoundError("Table", table_id)

            webhook = await TableWebhookRepository(session).create(
                project_id=project_id,
                table_id=table_id,
                flow_id=flow_id,
                events=[TableWebhookEventType(e).value for e in events],
            )

        logger.info(
            f"Table webhook created: {webhook.id} for flow {flow_id}",
            extra={"project_id": project_id, "table_id": table_id},
        )
        return webhook

    async def delete_webhook(
        self,
        project_id: str,
        table_id: str,
        webhook_id: str,
    ) -> None:
        """Remove a webhook subscription from a table."""
        async with self._database.transaction() as session:
            repo = TableWebhookRepository(session)
            webhook = await repo.get_for_project(webhook_id, project_id)
            if webhook is None or webhook.table_id != table_id:
                raise EntityNotFoundError("TableWebhook", webhook_id)
            await session.delete(webhook)

    async def get_webhooks(
        self,
        project_id: str,
        table_id: str,
        event_type: Union[TableWebhookEventType, str],
    ) -> List[TableWebhook]:
        """Get the subscriptions of a table that listen to an event type."""
        async with self._database.session() as session:
            return await TableWebhookRepository(session).get_for_event(
                project_id=project_id,
                table_id=table_id,
                event_type=TableWebhookEventType(event_type).value,
            )
