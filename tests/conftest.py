"""Shared pytest fixtures for testing."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from flowtables_core.api.app import create_app
from flowtables_core.config import AppConfig
from flowtables_core.container import ServiceContainer
from flowtables_core.database.base import DatabaseManager
from flowtables_core.flags.service import FlagService
from flowtables_core.tables.field_service import FieldService
from flowtables_core.tables.record_service import RecordService
from flowtables_core.tables.table_service import TableService


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def project_id() -> str:
    """Generate a test project ID."""
    return f"prj_{uuid4().hex[:12]}"


@pytest.fixture
def other_project_id() -> str:
    """A second project, for isolation checks."""
    return f"prj_{uuid4().hex[:12]}"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[DatabaseManager, None]:
    """Fresh SQLite database in a temporary file."""
    db = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'flowtables.db'}")
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
def table_service(database) -> TableService:
    return TableService(database)


@pytest.fixture
def field_service(database) -> FieldService:
    return FieldService(database)


@pytest.fixture
def flag_service(database) -> FlagService:
    return FlagService(database)


@pytest.fixture
def record_service(database) -> RecordService:
    return RecordService(database)


@pytest_asyncio.fixture
async def people_table(table_service, field_service, project_id):
    """A table with `name` and `age` fields."""
    table = await table_service.create(project_id=project_id, name="People")
    name = await field_service.create(project_id=project_id, table_id=table.id, name="name")
    age = await field_service.create(project_id=project_id, table_id=table.id, name="age")
    return {"table": table, "name": name, "age": age}


# =============================================================================
# API Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def services(tmp_path) -> AsyncGenerator[ServiceContainer, None]:
    """Service container on a temporary database with a mocked webhook handler."""
    config = AppConfig(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        public_url="https://flows.example.com",
        docs_enabled=False,
    )
    container = ServiceContainer.build(config)
    container.webhook_handler.handle_webhook = AsyncMock(return_value=True)
    await container.database.create_all()
    await container.flags.save("PUBLIC_URL", config.public_url)
    yield container
    await container.database.close()


@pytest_asyncio.fixture
async def client(services, project_id) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the project."""
    app = create_app(services.config, services=services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        ac.headers["X-Project-ID"] = project_id
        ac.headers["Authorization"] = "Bearer test_token"
        yield ac
