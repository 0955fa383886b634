from datetime import UTC, datetime
from typing import Any, NoReturn

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ....application.ports.outbound import ScheduleRepository
from ....domain.entities import ScheduleRecord
from ....domain.exceptions import PersistenceError
from ...persistence.models import ScheduledPostModel

logger = structlog.get_logger()

# Fields a caller may replace on a pending record
PATCHABLE_FIELDS = frozenset({"content", "scheduled_at_unix", "media_refs", "queue_job_id"})


class PostgresScheduleRepository(ScheduleRepository):
    """SQLAlchemy adapter implementing ScheduleRepository.

    Each mutation is one conditional statement committed on its own, so
    concurrent handlers are serialized by the database rather than by
    read-then-write sequences in Python.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert(self, record: ScheduleRecord) -> ScheduleRecord:
        try:
            self._session.add(ScheduledPostModel.from_entity(record))
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._fail("insert", record.id, e)
        return record

    async def update_by_id(
        self,
        record_id: str,
        owner_user_id: str,
        patch: dict[str, Any],
        expected_job_id: str | None = None,
    ) -> ScheduleRecord | None:
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot patch fields: {sorted(unknown)}")

        stmt = update(ScheduledPostModel).where(
            ScheduledPostModel.id == record_id,
            ScheduledPostModel.owner_user_id == owner_user_id,
            ScheduledPostModel.is_scheduled.is_(True),
            ScheduledPostModel.is_published.is_(False),
        )
        if expected_job_id is not None:
            stmt = stmt.where(ScheduledPostModel.queue_job_id == expected_job_id)
        stmt = (
            stmt.values(**patch, updated_at=datetime.now(UTC))
            .returning(ScheduledPostModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )

        try:
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
            record = model.to_entity() if model else None
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._fail("update", record_id, e)
        return record

    async def find_by_id(self, record_id: str) -> ScheduleRecord | None:
        stmt = select(ScheduledPostModel).where(ScheduledPostModel.id == record_id)
        return await self._fetch_one(stmt, record_id)

    async def find_owned(self, record_id: str, owner_user_id: str) -> ScheduleRecord | None:
        stmt = select(ScheduledPostModel).where(
            ScheduledPostModel.id == record_id,
            ScheduledPostModel.owner_user_id == owner_user_id,
        )
        return await self._fetch_one(stmt, record_id)

    async def delete_by_id(self, record_id: str, owner_user_id: str) -> bool:
        stmt = (
            delete(ScheduledPostModel)
            .where(
                ScheduledPostModel.id == record_id,
                ScheduledPostModel.owner_user_id == owner_user_id,
                ScheduledPostModel.is_scheduled.is_(True),
                ScheduledPostModel.is_published.is_(False),
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._fail("delete", record_id, e)
        return result.rowcount > 0

    async def list_scheduled(self, owner_user_id: str) -> list[ScheduleRecord]:
        stmt = (
            select(ScheduledPostModel)
            .where(
                ScheduledPostModel.owner_user_id == owner_user_id,
                ScheduledPostModel.is_scheduled.is_(True),
                ScheduledPostModel.is_published.is_(False),
            )
            .order_by(ScheduledPostModel.scheduled_at_unix.asc(), ScheduledPostModel.created_at.asc())
        )
        return await self._fetch_all(stmt)

    async def list_published(
        self,
        owner_user_id: str,
        limit: int = 20,
        before: datetime | None = None,
    ) -> list[ScheduleRecord]:
        stmt = select(ScheduledPostModel).where(
            ScheduledPostModel.owner_user_id == owner_user_id,
            ScheduledPostModel.is_published.is_(True),
        )
        if before is not None:
            stmt = stmt.where(ScheduledPostModel.updated_at < before)
        stmt = stmt.order_by(ScheduledPostModel.updated_at.desc()).limit(limit)
        return await self._fetch_all(stmt)

    async def mark_published(self, record_id: str, external_post_id: str) -> bool:
        stmt = (
            update(ScheduledPostModel)
            .where(
                ScheduledPostModel.id == record_id,
                ScheduledPostModel.is_published.is_(False),
            )
            .values(
                is_published=True,
                is_scheduled=False,
                external_post_id=external_post_id,
                queue_job_id=None,
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._fail("mark_published", record_id, e)
        return result.rowcount == 1

    async def _fetch_one(self, stmt, record_id: str) -> ScheduleRecord | None:
        # Rows may have changed through conditional statements in this session
        stmt = stmt.execution_options(populate_existing=True)
        try:
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("select", record_id, e)
        return model.to_entity() if model else None

    async def _fetch_all(self, stmt) -> list[ScheduleRecord]:
        stmt = stmt.execution_options(populate_existing=True)
        try:
            result = await self._session.execute(stmt)
            models = result.scalars().all()
        except SQLAlchemyError as e:
            await self._fail("select", None, e)
        return [model.to_entity() for model in models]

    async def _fail(
        self, operation: str, record_id: str | None, error: SQLAlchemyError
    ) -> NoReturn:
        logger.error(
            "Schedule store operation failed",
            operation=operation,
            record_id=record_id,
            error=str(error),
            error_type=type(error).__name__,
        )
        await self._session.rollback()
        raise PersistenceError(f"Schedule store {operation} failed") from error
