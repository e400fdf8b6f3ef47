"""HTTP API - Module Exports"""

from .memo_routes import get_memo_repository, router
from .schemas import CreateMemoRequest, UpdateMemoRequest

__all__ = [
    "router",
    "get_memo_repository",
    "CreateMemoRequest",
    "UpdateMemoRequest",
]
