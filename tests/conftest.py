"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

# Add project root (and this directory, for notion_fakes) to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
sys.path.insert(0, str(Path(__file__).parent))

from config import Config  # noqa: E402
from infra import InfraBootstrap  # noqa: E402
from memo import InMemoryMemoRepository, NotionClient, NotionMemoRepository  # noqa: E402
from notion_fakes import FakeNotionServer  # noqa: E402


@pytest.fixture
def stub_config() -> Config:
    return Config(memo_backend="stub")


@pytest.fixture
def stub_repository() -> InMemoryMemoRepository:
    return InMemoryMemoRepository()


@pytest.fixture
def stub_infra(stub_config, stub_repository) -> InfraBootstrap:
    return InfraBootstrap(config=stub_config, memo_repository=stub_repository)


@pytest.fixture
def mock_notion_client() -> MagicMock:
    """NotionClient with every endpoint replaced by an AsyncMock."""
    client = MagicMock(spec=NotionClient)
    client.create_page = AsyncMock()
    client.retrieve_page = AsyncMock()
    client.update_page = AsyncMock()
    client.query_database = AsyncMock()
    client.list_block_children = AsyncMock()
    client.list_all_block_children = AsyncMock()
    client.append_block_children = AsyncMock()
    client.delete_block = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def notion_server() -> FakeNotionServer:
    return FakeNotionServer()


@pytest.fixture
def notion_repository(notion_server) -> NotionMemoRepository:
    """Notion repository wired to the in-memory fake server."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(notion_server.handler))
    client = NotionClient(
        api_key=notion_server.api_key,
        base_url="https://api.notion.com/v1",
        http_client=http,
    )
    return NotionMemoRepository(client=client, database_id="db-123")
