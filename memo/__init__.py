"""
Memo module exports.

Clean interface for the HTTP layer to import memo components.
"""

from memo.base import DEFAULT_LIMIT, MAX_LIMIT, MemoRepository
from memo.errors import ExternalServiceError, MemoError, ValidationError
from memo.notion import NotionMemoRepository
from memo.notion_client import NotionAPIError, NotionClient
from memo.stub import InMemoryMemoRepository
from memo.types import MemoRecord

__all__ = [
    # Domain
    "MemoRecord",
    # Errors
    "MemoError",
    "ValidationError",
    "ExternalServiceError",
    # Repositories
    "MemoRepository",
    "NotionMemoRepository",
    "InMemoryMemoRepository",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    # Notion client
    "NotionClient",
    "NotionAPIError",
]
