"""
Application service for scheduling, rescheduling and cancelling posts.

Each operation spans two systems (the delivery queue and the schedule store)
without a shared transaction. Every failure after a queue job was registered
is followed by a compensating cancel of that job. Compensation failures are
logged and never replace the error returned to the caller.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

import structlog

from ...domain.entities import PublishingAccount, ScheduleRecord
from ...domain.entities.scheduled_post import new_record_id
from ...domain.exceptions import (
    AccountNotFound,
    CancelFailed,
    PersistenceError,
    QueueJobNotFound,
    QueueUnavailable,
    ScheduleConflict,
    ScheduleNotFound,
)
from ...domain.services import validate_schedule
from ..dtos import (
    CancelResultDTO,
    PublishedPostResponseDTO,
    ScheduledPostResponseDTO,
    SchedulePostDTO,
    ScheduleResultDTO,
    UpdateScheduledPostDTO,
)
from ..ports.inbound import ManageScheduledPostsUseCase
from ..ports.outbound import AccountRepository, DeliveryQueue, ScheduleRepository

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_IO_TIMEOUT = 10.0


class ScheduleCoordinator(ManageScheduledPostsUseCase):
    """
    Coordinates the delivery queue and the schedule store.

    Holds no mutable state across calls; every dependency is injected so the
    service can run per request.
    """

    def __init__(
        self,
        queue: DeliveryQueue,
        repository: ScheduleRepository,
        accounts: AccountRepository,
        callback_url: str,
        clock: Callable[[], float] = time.time,
        io_timeout: float = DEFAULT_IO_TIMEOUT,
    ) -> None:
        self._queue = queue
        self._repository = repository
        self._accounts = accounts
        self._callback_url = callback_url
        self._clock = clock
        self._io_timeout = io_timeout

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def schedule(
        self,
        owner_user_id: str,
        dto: SchedulePostDTO,
        record_id: str | None = None,
    ) -> ScheduleResultDTO:
        """
        Schedule a post for publication.

        Args:
            owner_user_id: Authenticated user
            dto: Content, time, media and optional account
            record_id: Id from a previous attempt, so a retried call reuses it

        Returns:
            ScheduleResultDTO with id, time and the resolved account
        """
        validate_schedule(dto.content, dto.scheduled_at_unix, dto.media_refs, self._clock())

        if record_id is not None:
            existing = await self._store(
                self._repository.find_by_id(record_id),
                "Failed to load scheduled post",
            )
            if existing is not None:
                if existing.owner_user_id != owner_user_id:
                    logger.warning("Schedule id already taken by another user", record_id=record_id)
                    raise ScheduleConflict("Post id is already in use")
                if not existing.is_pending:
                    raise ScheduleConflict("Post has already been published")
                logger.info("Schedule retried for existing post", record_id=record_id)
                return self._result(existing)

        account = await self._resolve_account(owner_user_id, dto.account_id)
        record_id = record_id or new_record_id()
        log = logger.bind(record_id=record_id, account_id=account.id)

        job_id = await self._publish_job(record_id, dto.scheduled_at_unix)

        record = ScheduleRecord.create(
            record_id=record_id,
            owner_user_id=owner_user_id,
            publishing_account_id=account.id,
            content=dto.content,
            scheduled_at_unix=dto.scheduled_at_unix,
            media_refs=dto.media_refs,
            queue_job_id=job_id,
        )

        try:
            await self._with_timeout(self._repository.insert(record))
        except Exception as e:
            log.error(
                "Failed to persist scheduled post",
                job_id=job_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._compensate(job_id, record_id)
            raise PersistenceError("Failed to schedule post") from e

        log.info(
            "Post scheduled",
            job_id=job_id,
            scheduled_at_unix=record.scheduled_at_unix,
            media_count=len(record.media_refs),
        )
        return self._result(record)

    async def update(
        self,
        owner_user_id: str,
        record_id: str,
        dto: UpdateScheduledPostDTO,
    ) -> ScheduleResultDTO:
        """
        Replace content and time of a pending post.

        The new job is registered and swapped in atomically before the old
        job is retired, so a failure at any step leaves the record bound to
        a live job.
        """
        validate_schedule(dto.content, dto.scheduled_at_unix, dto.media_refs, self._clock())

        record = await self._store(
            self._repository.find_owned(record_id, owner_user_id),
            "Failed to load scheduled post",
        )
        if record is None:
            raise ScheduleNotFound()
        if not record.is_pending:
            raise ScheduleConflict("Post has already been published")

        log = logger.bind(record_id=record_id)
        old_job_id = record.queue_job_id
        new_job_id = await self._publish_job(record_id, dto.scheduled_at_unix)

        record.reschedule(
            content=dto.content,
            scheduled_at_unix=dto.scheduled_at_unix,
            media_refs=dto.media_refs,
            queue_job_id=new_job_id,
        )
        patch = {
            "content": record.content,
            "scheduled_at_unix": record.scheduled_at_unix,
            "media_refs": record.media_refs,
            "queue_job_id": record.queue_job_id,
        }

        try:
            updated = await self._with_timeout(
                self._repository.update_by_id(
                    record_id, owner_user_id, patch, expected_job_id=old_job_id
                )
            )
        except Exception as e:
            log.error(
                "Failed to persist rescheduled post",
                new_job_id=new_job_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._compensate(new_job_id, record_id)
            raise PersistenceError("Failed to update scheduled post") from e

        if updated is None:
            log.warning("Post changed during update", new_job_id=new_job_id)
            await self._compensate(new_job_id, record_id)
            raise ScheduleConflict("Post was published or changed while updating")

        if old_job_id:
            await self._retire_job(old_job_id, record_id)

        log.info(
            "Post rescheduled",
            old_job_id=old_job_id,
            new_job_id=new_job_id,
            scheduled_at_unix=updated.scheduled_at_unix,
        )
        return self._result(updated)

    async def cancel(self, owner_user_id: str, record_id: str) -> CancelResultDTO:
        """Cancel the queue job, then delete the pending post."""
        record = await self._store(
            self._repository.find_owned(record_id, owner_user_id),
            "Failed to load scheduled post",
        )
        if record is None or not record.is_pending:
            raise ScheduleNotFound()

        log = logger.bind(record_id=record_id, job_id=record.queue_job_id)

        if record.queue_job_id:
            try:
                await self._with_timeout(self._queue.cancel(record.queue_job_id))
            except QueueJobNotFound as e:
                log.warning("Queue job already gone, post left in place")
                raise CancelFailed("Post is already being sent and can no longer be cancelled") from e
            except (QueueUnavailable, TimeoutError) as e:
                log.error("Failed to cancel queue job", error=str(e))
                raise CancelFailed() from e

        deleted = await self._store(
            self._repository.delete_by_id(record_id, owner_user_id),
            "Failed to delete scheduled post",
        )
        if not deleted:
            # Published between our read and the delete
            log.warning("Post no longer pending at delete time")
            raise ScheduleNotFound()

        log.info("Scheduled post cancelled")
        return CancelResultDTO(id=record_id)

    async def list_scheduled(self, owner_user_id: str) -> list[ScheduledPostResponseDTO]:
        records = await self._store(
            self._repository.list_scheduled(owner_user_id),
            "Failed to load scheduled posts",
        )
        return [ScheduledPostResponseDTO.from_entity(r) for r in records]

    async def list_published(
        self,
        owner_user_id: str,
        limit: int = 20,
        before: datetime | None = None,
    ) -> list[PublishedPostResponseDTO]:
        records = await self._store(
            self._repository.list_published(owner_user_id, limit=limit, before=before),
            "Failed to load published posts",
        )
        return [PublishedPostResponseDTO.from_entity(r) for r in records]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _resolve_account(
        self, owner_user_id: str, account_id: str | None
    ) -> PublishingAccount:
        account = await self._store(
            self._accounts.get_for_owner(owner_user_id, account_id),
            "Failed to load publishing account",
        )
        if account is None:
            if account_id:
                raise AccountNotFound("Selected account not found")
            raise AccountNotFound("No connected publishing accounts")
        return account

    async def _publish_job(self, record_id: str, scheduled_at_unix: int) -> str:
        try:
            return await self._with_timeout(
                self._queue.publish(self._callback_url, scheduled_at_unix, {"id": record_id})
            )
        except TimeoutError as e:
            logger.error("Timed out registering queue job", record_id=record_id)
            raise QueueUnavailable() from e

    async def _compensate(self, job_id: str, record_id: str) -> None:
        """Best-effort cancel of a job whose record was never committed."""
        try:
            await self._with_timeout(self._queue.cancel(job_id))
            logger.info("Compensated orphaned queue job", job_id=job_id, record_id=record_id)
        except Exception as e:
            logger.error(
                "Compensating cancel failed, queue job orphaned",
                job_id=job_id,
                record_id=record_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def _retire_job(self, job_id: str, record_id: str) -> None:
        """Best-effort cancel of a job the record no longer points to.

        A surviving job is harmless: the executor ignores deliveries from a
        job that is not the record's current one.
        """
        try:
            await self._with_timeout(self._queue.cancel(job_id))
        except QueueJobNotFound:
            logger.info("Superseded queue job already gone", job_id=job_id, record_id=record_id)
        except Exception as e:
            logger.warning(
                "Failed to cancel superseded queue job",
                job_id=job_id,
                record_id=record_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def _store(self, awaitable: Awaitable[T], message: str) -> T:
        try:
            return await self._with_timeout(awaitable)
        except TimeoutError as e:
            logger.error("Schedule store timed out", operation=message)
            raise PersistenceError(message) from e

    async def _with_timeout(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self._io_timeout)

    @staticmethod
    def _result(record: ScheduleRecord) -> ScheduleResultDTO:
        return ScheduleResultDTO(
            id=record.id,
            scheduled_at_unix=record.scheduled_at_unix,
            account_id=record.publishing_account_id,
        )
