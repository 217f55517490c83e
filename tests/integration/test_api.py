"""Integration tests for the HTTP API."""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from flowtables_core.webhooks.handler import WebhookPayload


@pytest_asyncio.fixture
async def table(client: AsyncClient):
    """A table with `name` and `age` fields, created over the API."""
    response = await client.post("/v1/tables", json={"name": "People"})
    assert response.status_code == 201
    table = response.json()["data"]

    fields = {}
    for name in ("name", "age"):
        response = await client.post(
            "/v1/fields", json={"table_id": table["id"], "name": name}
        )
        assert response.status_code == 201
        fields[name] = response.json()["data"]

    return {"table": table, **fields}


async def create_records(client, table_id, *records):
    response = await client.post(
        "/v1/records",
        json={
            "table_id": table_id,
            "records": [
                [{"key": key, "value": value} for key, value in record.items()]
                for record in records
            ],
        },
    )
    assert response.status_code == 201
    return response.json()["data"]


def cell_values(record):
    return {cell["field_name"]: cell["value"] for cell in record["cells"].values()}


class TestHealth:
    """Tests for the health endpoint."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"] == "ok"


class TestTablesApi:
    """Tests for table and field endpoints."""

    @pytest.mark.asyncio
    async def test_list_tables(self, client, table):
        response = await client.get("/v1/tables")

        assert response.status_code == 200
        assert [t["id"] for t in response.json()["data"]] == [table["table"]["id"]]

    @pytest.mark.asyncio
    async def test_list_fields(self, client, table):
        response = await client.get(
            "/v1/fields", params={"table_id": table["table"]["id"]}
        )

        assert response.status_code == 200
        assert sorted(f["name"] for f in response.json()["data"]) == ["age", "name"]

    @pytest.mark.asyncio
    async def test_duplicate_field(self, client, table):
        response = await client.post(
            "/v1/fields", json={"table_id": table["table"]["id"], "name": "name"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "RES_3003"

    @pytest.mark.asyncio
    async def test_missing_project_header(self, client):
        del client.headers["X-Project-ID"]

        response = await client.get("/v1/tables")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_tables_are_project_scoped(self, client, table):
        response = await client.get(
            f"/v1/tables/{table['table']['id']}",
            headers={"X-Project-ID": "prj_someone_else"},
        )
        assert response.status_code == 404


class TestRecordsApi:
    """Tests for record endpoints."""

    @pytest.mark.asyncio
    async def test_create_returns_populated_records(self, client, table, project_id):
        created = await create_records(
            client, table["table"]["id"], {"name": "Ada", "age": 36, "email": "x"}
        )

        assert len(created) == 1
        record = created[0]
        assert record["table_id"] == table["table"]["id"]
        assert record["project_id"] == project_id
        assert set(record["cells"]) == {table["name"]["id"], table["age"]["id"]}
        assert cell_values(record) == {"name": "Ada", "age": "36"}

    @pytest.mark.asyncio
    async def test_list_with_filters(self, client, table):
        await create_records(
            client,
            table["table"]["id"],
            {"name": "Ada", "age": 36},
            {"name": "Grace", "age": 28},
        )

        response = await client.post(
            "/v1/records/list",
            json={
                "table_id": table["table"]["id"],
                "filters": [
                    {"field_id": table["age"]["id"], "operator": "lt", "value": "30"}
                ],
            },
        )

        assert response.status_code == 200
        page = response.json()["data"]
        assert [cell_values(r)["name"] for r in page["data"]] == ["Grace"]
        assert page["next"] is None
        assert page["previous"] is None

    @pytest.mark.asyncio
    async def test_unknown_operator_is_rejected(self, client, table):
        response = await client.post(
            "/v1/records/list",
            json={
                "table_id": table["table"]["id"],
                "filters": [{"field_id": table["age"]["id"], "operator": "like", "value": "3%"}],
            },
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_update_delete(self, client, table):
        record = (await create_records(client, table["table"]["id"], {"name": "Ada"}))[0]

        response = await client.get(f"/v1/records/{record['id']}")
        assert response.status_code == 200
        assert cell_values(response.json()["data"]) == {"name": "Ada"}

        response = await client.patch(
            f"/v1/records/{record['id']}",
            json={
                "table_id": table["table"]["id"],
                "cells": [{"key": "name", "value": "Augusta"}, {"key": "age", "value": 36}],
            },
        )
        assert response.status_code == 200
        assert cell_values(response.json()["data"]) == {"name": "Augusta", "age": "36"}

        response = await client.request(
            "DELETE", "/v1/records", json={"ids": [record["id"]]}
        )
        assert response.status_code == 200
        deleted = response.json()["data"]
        assert [r["id"] for r in deleted] == [record["id"]]
        assert cell_values(deleted[0]) == {"name": "Augusta", "age": "36"}

        response = await client.get(f"/v1/records/{record['id']}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_not_found_envelope(self, client):
        response = await client.get("/v1/records/missing")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["data"] is None
        assert body["error"]["code"] == "RES_3001"
        assert body["error"]["details"] == {"entity_type": "Record", "entity_id": "missing"}

    @pytest.mark.asyncio
    async def test_update_missing_record(self, client, table):
        response = await client.patch(
            "/v1/records/missing",
            json={"table_id": table["table"]["id"], "cells": []},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_requires_ids(self, client):
        response = await client.request("DELETE", "/v1/records", json={"ids": []})
        assert response.status_code == 422


class TestRecordWebhooks:
    """Tests for flow notification on record events."""

    @pytest.mark.asyncio
    async def test_created_record_notifies_subscribed_flow(self, client, services, table):
        response = await client.post(
            f"/v1/tables/{table['table']['id']}/webhooks",
            json={"flow_id": "flow_1", "events": ["RECORD_CREATED"]},
        )
        assert response.status_code == 201

        record = (await create_records(client, table["table"]["id"], {"name": "Ada"}))[0]

        handle_webhook = services.webhook_handler.handle_webhook
        handle_webhook.assert_awaited_once()
        kwargs = handle_webhook.await_args.kwargs
        assert kwargs["flow_id"] == "flow_1"
        assert kwargs["async_"] is True
        assert kwargs["public_url"] == "https://flows.example.com"

        payload = kwargs["payload"]
        assert isinstance(payload, WebhookPayload)
        assert payload.headers == {"authorization": "Bearer test_token"}
        assert payload.body["id"] == record["id"]
        assert cell_values(payload.body) == {"name": "Ada"}

    @pytest.mark.asyncio
    async def test_unsubscribed_events_are_not_sent(self, client, services, table):
        await client.post(
            f"/v1/tables/{table['table']['id']}/webhooks",
            json={"flow_id": "flow_1", "events": ["RECORD_DELETED"]},
        )

        await create_records(client, table["table"]["id"], {"name": "Ada"})

        services.webhook_handler.handle_webhook.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_one_notification_per_deleted_record(self, client, services, table):
        await client.post(
            f"/v1/tables/{table['table']['id']}/webhooks",
            json={"flow_id": "flow_1", "events": ["RECORD_DELETED"]},
        )
        created = await create_records(
            client, table["table"]["id"], {"name": "Ada"}, {"name": "Alan"}
        )

        response = await client.request(
            "DELETE", "/v1/records", json={"ids": [r["id"] for r in created]}
        )

        assert response.status_code == 200
        assert services.webhook_handler.handle_webhook.await_count == 2

    @pytest.mark.asyncio
    async def test_delete_webhook(self, client, services, table):
        response = await client.post(
            f"/v1/tables/{table['table']['id']}/webhooks",
            json={"flow_id": "flow_1", "events": ["RECORD_CREATED"]},
        )
        webhook_id = response.json()["data"]["id"]

        response = await client.delete(
            f"/v1/tables/{table['table']['id']}/webhooks/{webhook_id}"
        )
        assert response.status_code == 200

        await create_records(client, table["table"]["id"], {"name": "Ada"})
        services.webhook_handler.handle_webhook.assert_not_awaited()
