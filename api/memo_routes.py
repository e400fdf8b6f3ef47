"""
Memo HTTP Routes

FastAPI router exposing create/list/update/archive over the memo repository.
No Notion imports. No translation. Pure request/response binding.

Errors raised here or below are rendered by the handlers registered in
main.py:
  ValidationError       -> 400
  ExternalServiceError  -> 500
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from memo import MAX_LIMIT, MemoRepository, ValidationError

from .schemas import CreateMemoRequest, UpdateMemoRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Memos"])


def get_memo_repository(request: Request) -> MemoRepository:
    """The process-wide repository built at startup."""
    return request.app.state.infra.get_memo_repository()


def get_default_limit(request: Request) -> int:
    return request.app.state.infra.config.default_limit


def _require_id(memo_id: Optional[str]) -> str:
    if not memo_id or not memo_id.strip():
        raise ValidationError("Memo ID is required")
    return memo_id.strip()


# ============================================================================
# HEALTH
# ============================================================================

@router.get("/health")
async def health() -> Dict[str, str]:
    """Liveness check. Does not touch Notion."""
    return {"status": "ok"}


# ============================================================================
# MEMOS
# ============================================================================

@router.post("/memo", status_code=status.HTTP_201_CREATED)
async def create_memo(
    body: CreateMemoRequest,
    repository: MemoRepository = Depends(get_memo_repository),
) -> Dict[str, Any]:
    """Create a memo. 400 if content is missing."""
    if not body.content:
        raise ValidationError("Content is required")

    memo = await repository.create(body.content, body.tags or [])
    return {
        "status": "success",
        "data": {"memo": memo.to_dict()},
    }


@router.get("/memos")
async def list_memos(
    tag: Optional[str] = Query(None, description="Only memos carrying this tag"),
    limit: Optional[int] = Query(None, ge=1, le=MAX_LIMIT, description="Max memos to return"),
    repository: MemoRepository = Depends(get_memo_repository),
    default_limit: int = Depends(get_default_limit),
) -> Dict[str, Any]:
    """List memos, newest first, optionally filtered by tag."""
    memos = await repository.list(tag or None, limit or default_limit)
    return {
        "status": "success",
        "results": len(memos),
        "data": {"memos": [memo.to_dict() for memo in memos]},
    }


@router.delete("/memo/{memo_id}")
async def archive_memo(
    memo_id: str,
    repository: MemoRepository = Depends(get_memo_repository),
) -> Dict[str, Any]:
    """Archive (soft delete) a memo."""
    success = await repository.archive(_require_id(memo_id))
    return {
        "status": "success",
        "data": {"success": success},
    }


@router.patch("/memo/{memo_id}")
async def update_memo(
    memo_id: str,
    body: UpdateMemoRequest,
    repository: MemoRepository = Depends(get_memo_repository),
) -> Dict[str, Any]:
    """
    Update content and/or tags.

    Tags replace the existing list. If this fails after partially applying,
    the client should repeat the same request.
    """
    memo_id = _require_id(memo_id)
    content = body.content or None
    if content is None and body.tags is None:
        raise ValidationError("Content or tags is required for update")

    memo = await repository.update(memo_id, content=content, tags=body.tags)
    return {
        "status": "success",
        "data": {"memo": memo.to_dict()},
    }


@router.delete("/memo", include_in_schema=False)
@router.patch("/memo", include_in_schema=False)
async def memo_id_missing() -> None:
    raise ValidationError("Memo ID is required")
