"""
Memo domain types.

A MemoRecord is the flat shape this service hands to callers.
It is built fresh for every operation and never cached.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class MemoRecord:
    """One memo as stored in the external service."""

    content: str
    tags: List[str] = field(default_factory=list)
    id: str = ""                      # Assigned by the external service on create
    created_at: Optional[str] = None  # ISO timestamp (set by the external service)
    updated_at: Optional[str] = None  # ISO timestamp (set by the external service)

    @property
    def is_persisted(self) -> bool:
        """True once the external service has assigned an id."""
        return bool(self.id)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the HTTP surface (camelCase timestamps)."""
        return {
            "id": self.id,
            "content": self.content,
            "tags": list(self.tags),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
