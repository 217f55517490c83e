"""
Table Webhook Dispatcher

Fans a record event out to every flow subscribed to it on the table.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..core.exceptions import EntityNotFoundError
from ..flags.service import FlagId, FlagService
from ..tables.schemas import TableWebhookEventType
from ..tables.table_service import TableService
from .handler import FlowWebhookHandler, WebhookPayload

logger = logging.getLogger(__name__)


class JoinPolicy(str, Enum):
    """
    How a fan-out treats failing deliveries.

    Deliveries always run concurrently and are always all awaited.
    WAIT_ALL re-raises the first delivery exception; BEST_EFFORT logs
    exceptions and returns normally.
    """

    WAIT_ALL = "wait_all"
    BEST_EFFORT = "best_effort"


class TableWebhookDispatcher:
    """Dispatches record events to subscribed flows."""

    def __init__(
        self,
        table_service: TableService,
        flag_service: FlagService,
        handler: FlowWebhookHandler,
        join_policy: JoinPolicy = JoinPolicy.WAIT_ALL,
    ):
        self._table_service = table_service
        self._flag_service = flag_service
        self._handler = handler
        self.join_policy = join_policy

    async def trigger(
        self,
        project_id: str,
        table_id: str,
        event_type: Union[TableWebhookEventType, str],
        data: Dict[str, Any],
        authorization: str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Notify every flow subscribed to an event on a table.

        Args:
            project_id: Project of the table
            table_id: Table the event happened on
            event_type: Record event type
            data: Payload delivered as the request body
            authorization: Authorization header forwarded to the flows
            logger: Logger of the calling request

        Raises:
            EntityNotFoundError: If there are subscribers but the public
                URL flag is not configured.
        """
        log = logger or logging.getLogger(__name__)

        webhooks = await self._table_service.get_webhooks(
            project_id=project_id,
            table_id=table_id,
            event_type=event_type,
        )
        if not webhooks:
            log.debug(
                f"No webhooks for {TableWebhookEventType(event_type).value}",
                extra={"project_id": project_id, "table_id": table_id},
            )
            return

        public_url = await self._flag_service.get_one(FlagId.PUBLIC_URL)
        if public_url is None:
            raise EntityNotFoundError("Flag", FlagId.PUBLIC_URL.value)

        payload = WebhookPayload(
            method="POST",
            headers={"authorization": authorization},
            body=data,
            query_params={},
        )

        deliveries = [
            self._handler.handle_webhook(
                async_=True,
                flow_id=webhook.flow_id,
                payload=payload,
                public_url=public_url,
                logger=log,
            )
            for webhook in webhooks
        ]

        results = await asyncio.gather(*deliveries, return_exceptions=True)
        failures = [
            (webhook, result)
            for webhook, result in zip(webhooks, results)
            if isinstance(result, BaseException)
        ]
        if failures and self.join_policy == JoinPolicy.WAIT_ALL:
            raise failures[0][1]
        for webhook, error in failures:
            log.error(
                f"Webhook delivery raised: {error!r}",
                extra={"flow_id": webhook.flow_id},
            )

        log.info(
            f"Dispatched {TableWebhookEventType(event_type).value} to {len(webhooks)} flows",
            extra={"project_id": project_id, "table_id": table_id},
        )


__all__ = ["JoinPolicy", "TableWebhookDispatcher"]
