from abc import ABC, abstractmethod
from datetime import datetime

from ...dtos import (
    CancelResultDTO,
    PublishedPostResponseDTO,
    ScheduledPostResponseDTO,
    SchedulePostDTO,
    ScheduleResultDTO,
    UpdateScheduledPostDTO,
)


class ManageScheduledPostsUseCase(ABC):
    """Input port for scheduling, rescheduling and cancelling posts."""

    @abstractmethod
    async def schedule(
        self, owner_user_id: str, dto: SchedulePostDTO, record_id: str | None = None
    ) -> ScheduleResultDTO:
        pass

    @abstractmethod
    async def update(
        self, owner_user_id: str, record_id: str, dto: UpdateScheduledPostDTO
    ) -> ScheduleResultDTO:
        pass

    @abstractmethod
    async def cancel(self, owner_user_id: str, record_id: str) -> CancelResultDTO:
        pass

    @abstractmethod
    async def list_scheduled(self, owner_user_id: str) -> list[ScheduledPostResponseDTO]:
        pass

    @abstractmethod
    async def list_published(
        self, owner_user_id: str, limit: int = 20, before: datetime | None = None
    ) -> list[PublishedPostResponseDTO]:
        pass
