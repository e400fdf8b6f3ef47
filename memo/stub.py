"""
Stub memo repository for local development and tests.

In-memory, deterministic, no external dependencies.
Follows the same lifecycle and error contract as the Notion repository:
unknown or archived ids raise ExternalServiceError, just as Notion's own
rejection would.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from memo.base import DEFAULT_LIMIT, MAX_LIMIT, MemoRepository
from memo.errors import ExternalServiceError, ValidationError
from memo.types import MemoRecord


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class InMemoryMemoRepository(MemoRepository):
    """
    Deterministic in-memory memo store.

    Properties:
    - Insertion ordered; list() returns newest first
    - Archived memos are retained but never listed
    - Tags replaced wholesale on update
    - Returned records are copies; callers cannot mutate stored state
    """

    def __init__(self):
        self._memos: Dict[str, MemoRecord] = {}
        self._archived: Dict[str, bool] = {}
        self._sequence: List[str] = []

    def _active(self, memo_id: str, operation: str) -> MemoRecord:
        memo = self._memos.get(memo_id)
        if memo is None:
            raise ExternalServiceError(
                f"Failed to {operation} memo: {memo_id} not found",
                operation=operation,
                upstream_status=404,
            )
        if self._archived.get(memo_id):
            raise ExternalServiceError(
                f"Failed to {operation} memo: {memo_id} is archived",
                operation=operation,
                upstream_status=400,
            )
        return memo

    async def create(self, content: str, tags: Sequence[str] = ()) -> MemoRecord:
        timestamp = _now()
        memo = MemoRecord(
            id=str(uuid.uuid4()),
            content=content,
            tags=list(tags),
            created_at=timestamp,
            updated_at=timestamp,
        )
        self._memos[memo.id] = memo
        self._archived[memo.id] = False
        self._sequence.append(memo.id)
        return replace(memo, tags=list(memo.tags))

    async def list(
        self, tag: Optional[str] = None, limit: int = DEFAULT_LIMIT
    ) -> List[MemoRecord]:
        limit = max(1, min(limit, MAX_LIMIT))
        results = []
        for memo_id in reversed(self._sequence):
            if self._archived[memo_id]:
                continue
            memo = self._memos[memo_id]
            if tag and tag not in memo.tags:
                continue
            results.append(replace(memo, tags=list(memo.tags)))
            if len(results) >= limit:
                break
        return results

    async def update(
        self,
        memo_id: str,
        content: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> MemoRecord:
        if content is None and tags is None:
            raise ValidationError("Content or tags is required for update")

        memo = self._active(memo_id, "update")
        updated = replace(
            memo,
            content=memo.content if content is None else content,
            tags=list(memo.tags) if tags is None else list(tags),
            updated_at=_now(),
        )
        self._memos[memo_id] = updated
        return replace(updated, tags=list(updated.tags))

    async def archive(self, memo_id: str) -> bool:
        self._active(memo_id, "archive")
        self._archived[memo_id] = True
        return True
