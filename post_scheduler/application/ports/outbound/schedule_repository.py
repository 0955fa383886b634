from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from ....domain.entities import ScheduleRecord


class ScheduleRepository(ABC):
    """Output port for schedule record persistence.

    Every mutation is a single atomic conditional statement scoped by
    ``(id, owner_user_id)``. Implementations raise ``PersistenceError`` when
    the store itself fails.
    """

    @abstractmethod
    async def insert(self, record: ScheduleRecord) -> ScheduleRecord:
        """Persist a new record."""
        ...

    @abstractmethod
    async def update_by_id(
        self,
        record_id: str,
        owner_user_id: str,
        patch: dict[str, Any],
        expected_job_id: str | None = None,
    ) -> ScheduleRecord | None:
        """Patch a pending record owned by ``owner_user_id``.

        Returns None when the record is missing, not owned, already published
        or (with ``expected_job_id``) no longer bound to that queue job.
        """
        ...

    @abstractmethod
    async def find_by_id(self, record_id: str) -> ScheduleRecord | None:
        """Retrieve a record regardless of owner (webhook path)."""
        ...

    @abstractmethod
    async def find_owned(self, record_id: str, owner_user_id: str) -> ScheduleRecord | None:
        """Retrieve a record scoped to its owner."""
        ...

    @abstractmethod
    async def delete_by_id(self, record_id: str, owner_user_id: str) -> bool:
        """Hard delete a pending record. Returns False if nothing was deleted."""
        ...

    @abstractmethod
    async def list_scheduled(self, owner_user_id: str) -> list[ScheduleRecord]:
        """Pending records ordered by scheduled time, earliest first."""
        ...

    @abstractmethod
    async def list_published(
        self,
        owner_user_id: str,
        limit: int = 20,
        before: datetime | None = None,
    ) -> list[ScheduleRecord]:
        """Published records, newest first."""
        ...

    @abstractmethod
    async def mark_published(self, record_id: str, external_post_id: str) -> bool:
        """Atomically flip an unpublished record to published.

        Returns False when another delivery already published it.
        """
        ...
