"""Unit tests for the table webhook dispatcher."""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from flowtables_core.core.exceptions import EntityNotFoundError
from flowtables_core.flags.service import FlagId
from flowtables_core.tables.schemas import TableWebhookEventType
from flowtables_core.webhooks.dispatcher import JoinPolicy, TableWebhookDispatcher
from flowtables_core.webhooks.handler import WebhookPayload


PUBLIC_URL = "https://flows.example.com"


def make_webhook(flow_id: str):
    return SimpleNamespace(id=f"wh_{flow_id}", flow_id=flow_id)


@pytest.fixture
def table_service():
    service = MagicMock()
    service.get_webhooks = AsyncMock(return_value=[])
    return service


@pytest.fixture
def flag_service():
    service = MagicMock()
    service.get_one = AsyncMock(return_value=PUBLIC_URL)
    return service


@pytest.fixture
def handler():
    handler = MagicMock()
    handler.handle_webhook = AsyncMock(return_value=True)
    return handler


def make_dispatcher(table_service, flag_service, handler, join_policy=JoinPolicy.WAIT_ALL):
    return TableWebhookDispatcher(
        table_service=table_service,
        flag_service=flag_service,
        handler=handler,
        join_policy=join_policy,
    )


async def trigger(dispatcher, **overrides):
    kwargs = dict(
        project_id="prj_1",
        table_id="tbl_1",
        event_type=TableWebhookEventType.RECORD_CREATED,
        data={"id": "rec_1"},
        authorization="Bearer abc",
    )
    kwargs.update(overrides)
    await dispatcher.trigger(**kwargs)


class TestTableWebhookDispatcher:
    """Tests for TableWebhookDispatcher.trigger."""

    @pytest.mark.asyncio
    async def test_looks_up_subscribers_for_the_event(self, table_service, flag_service, handler):
        dispatcher = make_dispatcher(table_service, flag_service, handler)

        await trigger(dispatcher, event_type=TableWebhookEventType.RECORD_DELETED)

        table_service.get_webhooks.assert_awaited_once_with(
            project_id="prj_1",
            table_id="tbl_1",
            event_type=TableWebhookEventType.RECORD_DELETED,
        )

    @pytest.mark.asyncio
    async def test_no_subscribers_skips_flag_lookup(self, table_service, flag_service, handler):
        flag_service.get_one = AsyncMock(return_value=None)
        dispatcher = make_dispatcher(table_service, flag_service, handler)

        await trigger(dispatcher)

        flag_service.get_one.assert_not_awaited()
        handler.handle_webhook.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_public_url_raises(self, table_service, flag_service, handler):
        table_service.get_webhooks.return_value = [make_webhook("flow_a")]
        flag_service.get_one = AsyncMock(return_value=None)
        dispatcher = make_dispatcher(table_service, flag_service, handler)

        with pytest.raises(EntityNotFoundError) as exc_info:
            await trigger(dispatcher)

        assert exc_info.value.status_code == 404
        flag_service.get_one.assert_awaited_once_with(FlagId.PUBLIC_URL)
        handler.handle_webhook.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delivers_to_every_subscriber(self, table_service, flag_service, handler):
        table_service.get_webhooks.return_value = [
            make_webhook("flow_a"),
            make_webhook("flow_b"),
        ]
        dispatcher = make_dispatcher(table_service, flag_service, handler)

        await trigger(dispatcher, data={"id": "rec_9"}, authorization="Bearer xyz")

        assert handler.handle_webhook.await_count == 2
        flow_ids = sorted(
            call.kwargs["flow_id"] for call in handler.handle_webhook.await_args_list
        )
        assert flow_ids == ["flow_a", "flow_b"]

        for call in handler.handle_webhook.await_args_list:
            assert call.kwargs["async_"] is True
            assert call.kwargs["public_url"] == PUBLIC_URL
            payload = call.kwargs["payload"]
            assert isinstance(payload, WebhookPayload)
            assert payload.method == "POST"
            assert payload.headers == {"authorization": "Bearer xyz"}
            assert payload.body == {"id": "rec_9"}
            assert payload.query_params == {}

    @pytest.mark.asyncio
    async def test_passes_caller_logger(self, table_service, flag_service, handler):
        table_service.get_webhooks.return_value = [make_webhook("flow_a")]
        dispatcher = make_dispatcher(table_service, flag_service, handler)
        request_logger = logging.getLogger("tests.request")

        await trigger(dispatcher, logger=request_logger)

        assert handler.handle_webhook.await_args.kwargs["logger"] is request_logger

    @pytest.mark.asyncio
    async def test_wait_all_propagates_delivery_error(self, table_service, flag_service, handler):
        table_service.get_webhooks.return_value = [
            make_webhook("flow_a"),
            make_webhook("flow_b"),
        ]
        handler.handle_webhook = AsyncMock(side_effect=[True, RuntimeError("boom")])
        dispatcher = make_dispatcher(table_service, flag_service, handler)

        with pytest.raises(RuntimeError, match="boom"):
            await trigger(dispatcher)

    @pytest.mark.asyncio
    async def test_wait_all_awaits_every_delivery_before_raising(
        self, table_service, flag_service, handler
    ):
        table_service.get_webhooks.return_value = [
            make_webhook("bad"),
            make_webhook("slow"),
        ]
        finished = []

        async def deliver(*, flow_id, **kwargs):
            if flow_id == "bad":
                raise RuntimeError("boom")
            await asyncio.sleep(0.05)
            finished.append(flow_id)
            return True

        handler.handle_webhook = AsyncMock(side_effect=deliver)
        dispatcher = make_dispatcher(table_service, flag_service, handler)

        with pytest.raises(RuntimeError, match="boom"):
            await trigger(dispatcher)

        assert finished == ["slow"]

    @pytest.mark.asyncio
    async def test_best_effort_logs_delivery_error(
        self, table_service, flag_service, handler, caplog
    ):
        table_service.get_webhooks.return_value = [
            make_webhook("flow_a"),
            make_webhook("flow_b"),
        ]
        handler.handle_webhook = AsyncMock(side_effect=[RuntimeError("boom"), True])
        dispatcher = make_dispatcher(
            table_service, flag_service, handler, join_policy=JoinPolicy.BEST_EFFORT
        )

        with caplog.at_level(logging.ERROR):
            await trigger(dispatcher)

        assert handler.handle_webhook.await_count == 2
        assert any("boom" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_accepts_event_type_strings(self, table_service, flag_service, handler):
        table_service.get_webhooks.return_value = [make_webhook("flow_a")]
        dispatcher = make_dispatcher(table_service, flag_service, handler)

        await trigger(dispatcher, event_type="RECORD_UPDATED")

        handler.handle_webhook.assert_awaited_once()
