from datetime import UTC, datetime
from typing import overload

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ...domain.entities import PublishingAccount, ScheduleRecord


@overload
def _aware_utc(dt: datetime) -> datetime: ...


@overload
def _aware_utc(dt: None) -> None: ...


def _aware_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC timezone to naive datetimes read from the database."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    pass


class PublishingAccountModel(Base):
    """SQLAlchemy model for connected publishing accounts."""

    __tablename__ = "publishing_accounts"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    owner_user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    access_token: Mapped[str | None] = mapped_column(Text)
    access_secret: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def to_entity(self) -> PublishingAccount:
        return PublishingAccount(
            id=self.id,
            owner_user_id=self.owner_user_id,
            provider=self.provider,
            access_token=self.access_token,
            access_secret=self.access_secret,
            created_at=_aware_utc(self.created_at),
        )


class ScheduledPostModel(Base):
    """SQLAlchemy model for ScheduleRecord."""

    __tablename__ = "scheduled_posts"
    __table_args__ = (
        CheckConstraint(
            "NOT (is_scheduled AND is_published)",
            name="ck_scheduled_posts_single_state",
        ),
        CheckConstraint(
            "(queue_job_id IS NOT NULL) = (is_scheduled AND NOT is_published)",
            name="ck_scheduled_posts_job_when_pending",
        ),
        CheckConstraint(
            "(external_post_id IS NOT NULL) = is_published",
            name="ck_scheduled_posts_external_id_when_published",
        ),
        # Published history pages newest first by updated_at (the publish time)
        Index("ix_scheduled_posts_owner_published_updated", "owner_user_id", "is_published", "updated_at"),
        Index("ix_scheduled_posts_scheduled_time", "is_scheduled", "scheduled_at_unix"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    publishing_account_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("publishing_accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    media_refs: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    queue_job_id: Mapped[str | None] = mapped_column(String(255))
    external_post_id: Mapped[str | None] = mapped_column(String(255), index=True)
    scheduled_at_unix: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_scheduled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @classmethod
    def from_entity(cls, record: ScheduleRecord) -> "ScheduledPostModel":
        """Convert domain entity to ORM model."""
        return cls(
            id=record.id,
            owner_user_id=record.owner_user_id,
            publishing_account_id=record.publishing_account_id,
            content=record.content,
            media_refs=list(record.media_refs),
            queue_job_id=record.queue_job_id,
            external_post_id=record.external_post_id,
            scheduled_at_unix=record.scheduled_at_unix,
            is_scheduled=record.is_scheduled,
            is_published=record.is_published,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def to_entity(self) -> ScheduleRecord:
        """Convert ORM model to domain entity."""
        return ScheduleRecord(
            id=self.id,
            owner_user_id=self.owner_user_id,
            publishing_account_id=self.publishing_account_id,
            content=self.content,
            media_refs=list(self.media_refs or []),
            queue_job_id=self.queue_job_id,
            external_post_id=self.external_post_id,
            scheduled_at_unix=self.scheduled_at_unix,
            is_scheduled=self.is_scheduled,
            is_published=self.is_published,
            created_at=_aware_utc(self.created_at),
            updated_at=_aware_utc(self.updated_at),
        )
