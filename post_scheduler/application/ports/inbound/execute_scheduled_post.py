from abc import ABC, abstractmethod
from enum import Enum


class ExecutionOutcome(Enum):
    """Result of a fire-time callback, carrying the HTTP status to answer with."""

    PUBLISHED = (200, "Post published")
    ALREADY_PUBLISHED = (200, "Post already published")
    STALE_JOB = (200, "Delivery superseded")
    PUBLISHED_UNRECORDED = (200, "Post published, record not updated")
    BAD_REQUEST = (400, "Missing post id")
    MISSING_CREDENTIALS = (400, "Account not found or missing credentials")
    FORBIDDEN = (403, "Invalid signature")
    NOT_FOUND = (404, "Post not found")
    UPSTREAM_FAILED = (502, "Failed to publish post")
    STORE_UNAVAILABLE = (503, "Temporarily unavailable")

    def __init__(self, status_code: int, reason: str) -> None:
        self.status_code = status_code
        self.reason = reason


class ExecuteScheduledPostUseCase(ABC):
    """Input port for the queue's fire-time callback."""

    @abstractmethod
    async def execute(
        self, body: bytes, signature: str | None, job_id: str | None = None
    ) -> ExecutionOutcome:
        pass
