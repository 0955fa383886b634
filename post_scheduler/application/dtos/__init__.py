from .scheduled_post_dto import (
    CancelResultDTO,
    PublishedPostResponseDTO,
    ScheduledPostResponseDTO,
    SchedulePostDTO,
    ScheduleResultDTO,
    UpdateScheduledPostDTO,
)

__all__ = [
    "CancelResultDTO",
    "PublishedPostResponseDTO",
    "ScheduledPostResponseDTO",
    "SchedulePostDTO",
    "ScheduleResultDTO",
    "UpdateScheduledPostDTO",
]
