from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from ..exceptions import ScheduleConflict


def new_record_id() -> str:
    """Generate a schedule record id. Done once, before queue registration."""
    return str(uuid4())


@dataclass
class ScheduleRecord:
    """Scheduled post aggregate root.

    A record is either pending (scheduled with a live queue job) or published
    (carrying the platform's post id). Cancelled records are deleted.
    """

    id: str
    owner_user_id: str
    publishing_account_id: str
    content: str
    scheduled_at_unix: int
    created_at: datetime
    updated_at: datetime
    media_refs: list[str] = field(default_factory=list)
    queue_job_id: str | None = None
    external_post_id: str | None = None
    is_scheduled: bool = False
    is_published: bool = False

    @classmethod
    def create(
        cls,
        record_id: str,
        owner_user_id: str,
        publishing_account_id: str,
        content: str,
        scheduled_at_unix: int,
        media_refs: list[str],
        queue_job_id: str,
    ) -> "ScheduleRecord":
        """Factory method for a freshly scheduled record."""
        now = datetime.now(UTC)
        return cls(
            id=record_id,
            owner_user_id=owner_user_id,
            publishing_account_id=publishing_account_id,
            content=content,
            scheduled_at_unix=int(scheduled_at_unix),
            created_at=now,
            updated_at=now,
            media_refs=list(media_refs),
            queue_job_id=queue_job_id,
            is_scheduled=True,
            is_published=False,
        )

    @property
    def is_pending(self) -> bool:
        return self.is_scheduled and not self.is_published

    def reschedule(
        self,
        content: str,
        scheduled_at_unix: int,
        media_refs: list[str],
        queue_job_id: str,
    ) -> None:
        """Replace content, time and queue job. Identity is preserved."""
        if not self.is_pending:
            raise ScheduleConflict("Only pending posts can be rescheduled")
        self.content = content
        self.scheduled_at_unix = int(scheduled_at_unix)
        self.media_refs = list(media_refs)
        self.queue_job_id = queue_job_id
        self.updated_at = datetime.now(UTC)

    def mark_published(self, external_post_id: str) -> None:
        """Terminal transition: scheduled -> published.

        In-memory form of the rule. Deliveries go through the store's
        conditional ``mark_published``, which is the authoritative transition
        under concurrency.
        """
        if self.is_published:
            raise ScheduleConflict("Post is already published")
        if not self.is_scheduled:
            raise ScheduleConflict("Post is not scheduled")
        self.is_published = True
        self.is_scheduled = False
        self.external_post_id = external_post_id
        self.queue_job_id = None
        self.updated_at = datetime.now(UTC)
