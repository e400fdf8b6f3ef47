"""
Abstract memo repository interface.

The HTTP layer depends only on this interface, not on Notion.

Key properties:
- One call per domain operation; external calls inside it are sequential
- Single attempt: no retries, no rollback
- Every external failure raises ExternalServiceError
- Nothing is cached between calls
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from memo.types import MemoRecord

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


class MemoRepository(ABC):
    """
    Abstract memo store.

    Record lifecycle (owned by the backing store):
        nonexistent -> active -> archived
    There is no way back from archived.
    """

    @abstractmethod
    async def create(self, content: str, tags: Sequence[str] = ()) -> MemoRecord:
        """
        Create a memo.

        Returns:
            MemoRecord with the assigned id and timestamps. content and tags
            are the caller's values, not re-derived from the store.

        Raises:
            ExternalServiceError: The store rejected or failed the write
        """
        raise NotImplementedError

    @abstractmethod
    async def list(
        self, tag: Optional[str] = None, limit: int = DEFAULT_LIMIT
    ) -> List[MemoRecord]:
        """
        List active memos, newest first.

        Args:
            tag: Only memos carrying this tag
            limit: Maximum number of memos (1..MAX_LIMIT)

        Raises:
            ExternalServiceError: Any call failed; no partial list is returned
        """
        raise NotImplementedError

    @abstractmethod
    async def update(
        self,
        memo_id: str,
        content: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> MemoRecord:
        """
        Update content and/or tags of a memo.

        Tags replace the existing set wholesale. A content change rewrites
        the title and the body together. The caller ensures at least one of
        content/tags is given.

        Raises:
            ExternalServiceError: Any phase failed. The memo may be left with
                a mismatched title and body; re-run the whole update.
        """
        raise NotImplementedError

    @abstractmethod
    async def archive(self, memo_id: str) -> bool:
        """
        Archive (soft delete) a memo.

        Returns:
            True on success

        Raises:
            ExternalServiceError: The store rejected or failed the call
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release any held resources."""
        return None
