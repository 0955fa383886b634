"""Scheduled post DTOs.

Length, time window and media rules live in the domain validator so every
caller gets the same human-readable errors; these models only enforce shape.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ...domain.entities import ScheduleRecord


class SchedulePostDTO(BaseModel):
    """DTO for scheduling a new post."""

    content: str
    scheduled_at_unix: int = Field(..., gt=0)
    media_refs: list[str] = Field(default_factory=list)
    account_id: str | None = None

    @field_validator("account_id", mode="after")
    @classmethod
    def blank_account_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class UpdateScheduledPostDTO(BaseModel):
    """DTO for replacing content and time of a pending post."""

    content: str
    scheduled_at_unix: int = Field(..., gt=0)
    media_refs: list[str] = Field(default_factory=list)


class ScheduleResultDTO(BaseModel):
    """Result of schedule and update."""

    id: str
    scheduled_at_unix: int
    account_id: str


class CancelResultDTO(BaseModel):
    id: str


class ScheduledPostResponseDTO(BaseModel):
    """A pending post as shown to its owner."""

    id: str
    content: str
    scheduled_at_unix: int
    media_refs: list[str]
    account_id: str
    created_at: datetime

    @classmethod
    def from_entity(cls, record: ScheduleRecord) -> "ScheduledPostResponseDTO":
        return cls(
            id=record.id,
            content=record.content,
            scheduled_at_unix=record.scheduled_at_unix,
            media_refs=record.media_refs,
            account_id=record.publishing_account_id,
            created_at=record.created_at,
        )


class PublishedPostResponseDTO(BaseModel):
    """A post that has been published to the platform."""

    id: str
    content: str
    media_refs: list[str]
    account_id: str
    external_post_id: str
    published_at: datetime

    @classmethod
    def from_entity(cls, record: ScheduleRecord) -> "PublishedPostResponseDTO":
        return cls(
            id=record.id,
            content=record.content,
            media_refs=record.media_refs,
            account_id=record.publishing_account_id,
            external_post_id=record.external_post_id or "",
            published_at=record.updated_at,
        )
