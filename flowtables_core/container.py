"""
Service Container

Wires the database manager and the services together for one application
instance.
"""

from dataclasses import dataclass

import structlog

from .config import AppConfig
from .database.base import DatabaseManager
from .flags.service import FlagId, FlagService
from .tables.field_service import FieldService
from .tables.record_service import RecordService
from .tables.table_service import TableService
from .webhooks.dispatcher import TableWebhookDispatcher
from .webhooks.handler import FlowWebhookHandler

logger = structlog.get_logger(__name__)


@dataclass
class ServiceContainer:
    """Every long-lived service of the application."""

    config: AppConfig
    database: DatabaseManager
    tables: TableService
    fields: FieldService
    flags: FlagService
    records: RecordService
    webhook_handler: FlowWebhookHandler
    dispatcher: TableWebhookDispatcher

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Create the services for a configuration. Nothing connects yet."""
        database = DatabaseManager(
            database_url=config.database_url,
            pool_size=config.database_pool_size,
            max_overflow=config.database_max_overflow,
            echo=config.debug,
        )
        tables = TableService(database)
        flags = FlagService(database)
        handler = FlowWebhookHandler(timeout=config.webhook_timeout_seconds)
        dispatcher = TableWebhookDispatcher(
            table_service=tables,
            flag_service=flags,
            handler=handler,
            join_policy=config.webhook_join_policy,
        )
        return cls(
            config=config,
            database=database,
            tables=tables,
            fields=FieldService(database),
            flags=flags,
            records=RecordService(database, dispatcher=dispatcher),
            webhook_handler=handler,
            dispatcher=dispatcher,
        )

    async def start(self) -> None:
        """Prepare storage, seed flags and open the HTTP client."""
        if self.config.create_tables or self.database.is_sqlite:
            logger.info("database_tables_creating", sqlite=self.database.is_sqlite)
            await self.database.create_all()

        if await self.database.health_check():
            logger.info("database_connected")
        else:
            logger.error("database_unreachable")

        if self.config.public_url:
            await self.flags.save(FlagId.PUBLIC_URL, self.config.public_url)

        await self.webhook_handler.start()
        logger.info("services_started", public_url=self.config.public_url)

    async def stop(self) -> None:
        """Release the HTTP client and database connections."""
        await self.webhook_handler.stop()
        await self.database.close()
        logger.info("services_stopped")


__all__ = ["ServiceContainer"]
