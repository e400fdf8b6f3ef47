"""
Memo error taxonomy.

Two kinds reach callers:
- ValidationError: caller input is malformed (HTTP 400)
- ExternalServiceError: anything failed while talking to Notion (HTTP 500)

No sub-kinds of external failure are distinguished. Every external failure
is retryable by re-running the whole operation.
"""

from typing import Optional


class MemoError(Exception):
    """Base class for memo service errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MemoError):
    """Caller-supplied input is missing or malformed."""

    status_code = 400


class ExternalServiceError(MemoError):
    """
    A call to the external service failed.

    Attributes:
        operation: Repository operation that failed ("create", "list", ...)
        phase: For update, which phase failed ("properties" or "blocks")
        upstream_status: HTTP status returned by Notion, when known
        retryable: Always True; recovery is re-running the whole operation
    """

    status_code = 500
    retryable = True

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        phase: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.phase = phase
        self.upstream_status = upstream_status
