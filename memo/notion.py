"""
Notion-backed memo repository.

Each memo is one page in a Notion database:
  - title property   <- first 100 characters of content
  - multi-select     <- tags
  - paragraph block  <- full content

Key properties:
- Single attempt per call, no retries, no rollback
- Every failure surfaces as ExternalServiceError
- Whole operations are bounded by operation_timeout; expiry cancels the
  in-flight HTTP call
- update is a two-phase sequence (properties, then blocks) that is NOT
  atomic; a mid-sequence failure must be recovered by re-running update
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, Sequence, TypeVar

from memo.base import DEFAULT_LIMIT, MAX_LIMIT, MemoRepository
from memo.errors import ExternalServiceError, ValidationError
from memo.notion_client import NotionAPIError, NotionClient
from memo.schemas import parse_list_response, parse_page
from memo.translation import (
    decode_content,
    decode_page,
    decode_tags,
    encode_content_block,
    encode_page_create,
    encode_properties,
)
from memo.types import MemoRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_OPERATION_TIMEOUT_S = 60.0


class NotionMemoRepository(MemoRepository):
    """
    Memo repository over the Notion REST API.

    Configuration:
    - client: shared NotionClient (one per process)
    - database_id: target database
    - title_property / tag_property: property names in that database
    - operation_timeout: upper bound for a whole operation (None disables)
    - block_fetch_concurrency: parallel block fetches while listing
      (1 = strictly sequential, in listing order)
    """

    def __init__(
        self,
        client: NotionClient,
        database_id: str,
        title_property: str = "Content",
        tag_property: str = "Tags",
        operation_timeout: Optional[float] = DEFAULT_OPERATION_TIMEOUT_S,
        block_fetch_concurrency: int = 1,
    ):
        self.client = client
        self.database_id = database_id
        self.title_property = title_property
        self.tag_property = tag_property
        self.operation_timeout = operation_timeout
        self.block_fetch_concurrency = max(1, block_fetch_concurrency)

    async def aclose(self) -> None:
        await self.client.aclose()

    # ── Error plumbing ────────────────────────────────────────

    def _failure(
        self,
        operation: str,
        error: Any,
        phase: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ) -> ExternalServiceError:
        message = f"Failed to {operation} Notion memo: {error}"
        logger.error(message, extra={"operation": operation, "phase": phase})
        return ExternalServiceError(
            message,
            operation=operation,
            phase=phase,
            upstream_status=upstream_status,
        )

    async def _bounded(
        self,
        operation: str,
        call: Awaitable[T],
        progress: Optional[Dict[str, str]] = None,
    ) -> T:
        """
        Run one repository operation under the timeout and error contract.

        progress["phase"] is kept current by multi-phase operations so a
        timeout reports the phase that was cut off.
        """
        try:
            if self.operation_timeout:
                return await asyncio.wait_for(call, timeout=self.operation_timeout)
            return await call
        except ExternalServiceError:
            raise
        except asyncio.TimeoutError as e:
            raise self._failure(
                operation,
                f"timed out after {self.operation_timeout}s",
                phase=(progress or {}).get("phase"),
            ) from e
        except NotionAPIError as e:
            raise self._failure(
                operation, e.message, upstream_status=e.status_code
            ) from e

    # ── create ────────────────────────────────────────────────

    async def create(self, content: str, tags: Sequence[str] = ()) -> MemoRecord:
        return await self._bounded("create", self._create(content, list(tags)))

    async def _create(self, content: str, tags: List[str]) -> MemoRecord:
        payload = encode_page_create(
            self.database_id,
            self.title_property,
            self.tag_property,
            content,
            tags,
        )
        page = parse_page(await self.client.create_page(payload))
        if not page.id:
            raise self._failure("create", "response carried no page id")

        logger.info(f"Created new Notion memo with ID: {page.id}")
        return MemoRecord(
            id=page.id,
            content=content,
            tags=tags,
            created_at=page.created_time,
            updated_at=page.last_edited_time,
        )

    # ── list ──────────────────────────────────────────────────

    async def list(
        self, tag: Optional[str] = None, limit: int = DEFAULT_LIMIT
    ) -> List[MemoRecord]:
        return await self._bounded("retrieve", self._list(tag, limit))

    async def _list(self, tag: Optional[str], limit: int) -> List[MemoRecord]:
        tag_filter = None
        if tag:
            tag_filter = {
                "property": self.tag_property,
                "multi_select": {"contains": tag},
            }

        response = parse_list_response(
            await self.client.query_database(
                self.database_id,
                filter=tag_filter,
                sorts=[{"timestamp": "created_time", "direction": "descending"}],
                page_size=max(1, min(limit, MAX_LIMIT)),
            )
        )

        pages = []
        for raw in response.results:
            page_id = parse_page(raw).id
            if not page_id:
                logger.warning("Skipping query result without a page id")
                continue
            pages.append((page_id, raw))

        blocks = await self._fetch_blocks([page_id for page_id, _ in pages])

        memos = [
            decode_page(raw, page_blocks, self.title_property, self.tag_property)
            for (_, raw), page_blocks in zip(pages, blocks)
        ]
        logger.info(
            f"Retrieved {len(memos)} Notion memos",
            extra={"tag": tag, "limit": limit},
        )
        return memos

    async def _page_blocks(self, page_id: str) -> List[Any]:
        return parse_list_response(await self.client.list_block_children(page_id)).results

    async def _fetch_blocks(self, page_ids: List[str]) -> List[List[Any]]:
        """Child blocks per page, in the same order as page_ids."""
        if self.block_fetch_concurrency <= 1:
            return [await self._page_blocks(page_id) for page_id in page_ids]

        semaphore = asyncio.Semaphore(self.block_fetch_concurrency)

        async def fetch(page_id: str) -> List[Any]:
            async with semaphore:
                return await self._page_blocks(page_id)

        tasks = [asyncio.ensure_future(fetch(page_id)) for page_id in page_ids]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # Collect outstanding results so no task exception goes unretrieved
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    # ── update ────────────────────────────────────────────────

    async def update(
        self,
        memo_id: str,
        content: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> MemoRecord:
        if content is None and tags is None:
            raise ValidationError("Content or tags is required for update")
        progress: Dict[str, str] = {}
        return await self._bounded(
            "update",
            self._update(memo_id, content, None if tags is None else list(tags), progress),
            progress,
        )

    def _warn_torn(self, memo_id: str) -> None:
        logger.warning(
            f"Memo {memo_id} left with title/body mismatch; "
            f"the whole update must be retried",
            extra={"memo_id": memo_id, "phase": "blocks"},
        )

    async def _update(
        self,
        memo_id: str,
        content: Optional[str],
        tags: Optional[List[str]],
        progress: Dict[str, str],
    ) -> MemoRecord:
        # Phase 1: title and/or tags in one property write
        progress["phase"] = "properties"
        properties = encode_properties(
            self.title_property, self.tag_property, content, tags
        )
        try:
            await self.client.update_page(memo_id, {"properties": properties})
        except NotionAPIError as e:
            raise self._failure(
                "update", e.message, phase="properties", upstream_status=e.status_code
            ) from e

        # Phase 2: replace the body; title is already rewritten at this point
        if content is not None:
            progress["phase"] = "blocks"
            try:
                await self._replace_body(memo_id, content)
            except asyncio.CancelledError:
                self._warn_torn(memo_id)
                raise
            except NotionAPIError as e:
                self._warn_torn(memo_id)
                raise self._failure(
                    "update", e.message, phase="blocks", upstream_status=e.status_code
                ) from e

        # Read back authoritative tags and timestamps
        progress["phase"] = "retrieve"
        try:
            page = parse_page(await self.client.retrieve_page(memo_id))
            if content is None:
                blocks = await self._page_blocks(memo_id)
                content = decode_content(page.properties, blocks, self.title_property)
        except NotionAPIError as e:
            raise self._failure(
                "update", e.message, phase="retrieve", upstream_status=e.status_code
            ) from e

        logger.info(f"Updated Notion memo with ID: {memo_id}")
        return MemoRecord(
            id=memo_id,
            content=content,
            tags=decode_tags(page.properties, self.tag_property),
            created_at=page.created_time,
            updated_at=page.last_edited_time,
        )

    async def _replace_body(self, memo_id: str, content: str) -> None:
        """Delete every existing child block, then append one content block."""
        existing = await self.client.list_all_block_children(memo_id)
        for block in existing:
            block_id = block.get("id") if isinstance(block, dict) else None
            if block_id:
                await self.client.delete_block(block_id)

        await self.client.append_block_children(
            memo_id, [encode_content_block(content)]
        )

    # ── archive ───────────────────────────────────────────────

    async def archive(self, memo_id: str) -> bool:
        return await self._bounded("archive", self._archive(memo_id))

    async def _archive(self, memo_id: str) -> bool:
        await self.client.update_page(memo_id, {"archived": True})
        logger.info(f"Archived Notion memo with ID: {memo_id}")
        return True
