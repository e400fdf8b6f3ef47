"""
Memo HTTP Schemas - Pydantic Models

Request bodies accepted by the memo routes.
Presence checks (content required, content-or-tags required) are done by
the routes so they surface as 400 with the service's error envelope.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class CreateMemoRequest(BaseModel):
    """POST /memo body."""

    content: Optional[str] = Field(None, description="Full memo text (required)")
    tags: Optional[List[str]] = Field(None, description="Tag names, passed through verbatim")


class UpdateMemoRequest(BaseModel):
    """PATCH /memo/{id} body. At least one field must be present."""

    content: Optional[str] = Field(None, description="New full memo text")
    tags: Optional[List[str]] = Field(
        None, description="Replacement tag list (not merged with existing tags)"
    )
