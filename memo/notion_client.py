"""
Notion REST Client

Thin async wrapper over the handful of Notion endpoints the memo
repository needs. One shared httpx.AsyncClient per process.

No retries. No translation. No logic.
Every failure (transport, timeout, non-2xx, bad JSON) raises NotionAPIError.

Endpoints:
  POST   /pages                    create_page
  GET    /pages/{id}               retrieve_page
  PATCH  /pages/{id}               update_page
  POST   /databases/{id}/query     query_database
  GET    /blocks/{id}/children     list_block_children
  PATCH  /blocks/{id}/children     append_block_children
  DELETE /blocks/{id}              delete_block

ref: https://developers.notion.com/reference/intro
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from memo.schemas import parse_list_response

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_TIMEOUT_S = 30.0
MAX_PAGE_SIZE = 100


def _segment(value: str) -> str:
    """Percent-encode an id for use as one URL path segment."""
    return quote(str(value), safe="")


class NotionAPIError(Exception):
    """A Notion API call failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class NotionClient:
    """
    Async Notion API client.

    Usage:
        client = NotionClient(api_key="secret_...")
        page = await client.retrieve_page(page_id)
        await client.aclose()

    Guarantees:
    - Credential only ever sent in the Authorization header, never logged
    - Single attempt per call
    - Bounded by `timeout` seconds per call
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        notion_version: str = DEFAULT_NOTION_VERSION,
        timeout: float = DEFAULT_TIMEOUT_S,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
        )
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": notion_version,
            "Content-Type": "application/json",
        }

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    # ── Core request ──────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Notion request timed out: {method} {path}")
            raise NotionAPIError(
                f"Request timed out after {self.timeout}s", code="timeout"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Notion request failed: {method} {path}: {e}")
            raise NotionAPIError(f"HTTP request failed: {e}") from e
        except httpx.InvalidURL as e:
            logger.error(f"Notion request URL rejected: {method} {path}: {e}")
            raise NotionAPIError(f"Invalid request URL: {e}") from e

        if response.status_code >= 400:
            code, message = self._error_details(response)
            logger.error(
                f"Notion API error: {response.status_code} - {code}",
                extra={
                    "status_code": response.status_code,
                    "notion_code": code,
                    "path": path,
                },
            )
            raise NotionAPIError(
                f"Notion API returned {response.status_code}: {message}",
                status_code=response.status_code,
                code=code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise NotionAPIError(
                "Notion API returned a non-JSON body",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise NotionAPIError(
                "Notion API returned an unexpected body",
                status_code=response.status_code,
            )
        return data

    @staticmethod
    def _error_details(response: httpx.Response) -> tuple:
        """Extract (code, message) from a Notion error body, if any."""
        try:
            body = response.json()
        except ValueError:
            return None, response.text or response.reason_phrase
        if isinstance(body, dict):
            return body.get("code"), body.get("message") or response.reason_phrase
        return None, response.reason_phrase

    # ── Pages ─────────────────────────────────────────────────

    async def create_page(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/pages", json=payload)

    async def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/pages/{_segment(page_id)}")

    async def update_page(self, page_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"/pages/{_segment(page_id)}", json=payload)

    # ── Databases ─────────────────────────────────────────────

    async def query_database(
        self,
        database_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"page_size": page_size}
        if filter is not None:
            body["filter"] = filter
        if sorts is not None:
            body["sorts"] = sorts
        return await self._request("POST", f"/databases/{_segment(database_id)}/query", json=body)

    # ── Blocks ────────────────────────────────────────────────

    async def list_block_children(
        self,
        block_id: str,
        start_cursor: Optional[str] = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page_size": page_size}
        if start_cursor:
            params["start_cursor"] = start_cursor
        return await self._request("GET", f"/blocks/{_segment(block_id)}/children", params=params)

    async def list_all_block_children(self, block_id: str) -> List[Any]:
        """Follow next_cursor until every child block has been collected."""
        blocks: List[Any] = []
        cursor: Optional[str] = None
        while True:
            page = parse_list_response(
                await self.list_block_children(block_id, start_cursor=cursor)
            )
            blocks.extend(page.results)
            if not page.has_more or not page.next_cursor:
                return blocks
            cursor = page.next_cursor

    async def append_block_children(
        self, block_id: str, children: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        return await self._request(
            "PATCH", f"/blocks/{_segment(block_id)}/children", json={"children": children}
        )

    async def delete_block(self, block_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/blocks/{_segment(block_id)}")
