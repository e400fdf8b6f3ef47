"""
Infrastructure initialization and bootstrap.

Builds the one memo repository the process uses, from configuration.
The repository (and the HTTP client inside it) is shared by reference
across all requests and never mutated after startup.
"""

import logging
from typing import Optional

from config import Config, get_config
from memo import InMemoryMemoRepository, MemoRepository, NotionClient, NotionMemoRepository

logger = logging.getLogger(__name__)


def create_memo_repository(config: Config) -> MemoRepository:
    """Create the memo repository selected by configuration."""
    if config.memo_backend == "stub":
        return InMemoryMemoRepository()

    client = NotionClient(
        api_key=config.notion_api_key,
        base_url=config.notion_base_url,
        notion_version=config.notion_version,
        timeout=config.notion_timeout_s,
    )
    return NotionMemoRepository(
        client=client,
        database_id=config.database_id,
        title_property=config.content_property,
        tag_property=config.tag_property,
        operation_timeout=config.operation_timeout_s,
        block_fetch_concurrency=config.block_fetch_concurrency,
    )


class InfraBootstrap:
    """
    Bootstrap infrastructure based on configuration.

    Singleton pattern - single instance per process.
    """

    _instance: Optional["InfraBootstrap"] = None

    def __init__(
        self,
        config: Optional[Config] = None,
        memo_repository: Optional[MemoRepository] = None,
    ):
        """
        Initialize bootstrap with configuration.

        Raises:
            ConfigError: Configuration cannot start the service
        """
        self.config = config or get_config()
        self.config.validate()
        self.memo_repository = memo_repository or create_memo_repository(self.config)

    @classmethod
    def get_instance(cls, config: Optional[Config] = None) -> "InfraBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton InfraBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    def get_memo_repository(self) -> MemoRepository:
        """Get memo repository."""
        return self.memo_repository

    async def aclose(self) -> None:
        """Release the repository's network resources."""
        await self.memo_repository.aclose()

    def __repr__(self) -> str:
        return (
            f"InfraBootstrap(backend={self.config.memo_backend}, "
            f"database={self.config.database_id or '-'})"
        )


def bootstrap_infrastructure(config: Optional[Config] = None) -> InfraBootstrap:
    """
    Bootstrap all infrastructure backends.

    Args:
        config: Optional custom configuration

    Returns:
        InfraBootstrap instance with the memo repository initialized
    """
    return InfraBootstrap.get_instance(config)
