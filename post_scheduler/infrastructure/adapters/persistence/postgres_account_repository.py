import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ....application.ports.outbound import AccountRepository
from ....domain.entities import PublishingAccount
from ....domain.exceptions import PersistenceError
from ...persistence.models import PublishingAccountModel

logger = structlog.get_logger()

DEFAULT_PROVIDER = "twitter"


class PostgresAccountRepository(AccountRepository):
    """SQLAlchemy adapter implementing AccountRepository."""

    def __init__(self, session: AsyncSession, provider: str = DEFAULT_PROVIDER) -> None:
        self._session = session
        self._provider = provider

    async def get_for_owner(
        self, owner_user_id: str, account_id: str | None = None
    ) -> PublishingAccount | None:
        """Return the requested account if owned, else the owner's oldest account."""
        stmt = select(PublishingAccountModel).where(
            PublishingAccountModel.owner_user_id == owner_user_id,
            PublishingAccountModel.provider == self._provider,
        )
        if account_id:
            stmt = stmt.where(PublishingAccountModel.id == account_id)
        stmt = stmt.order_by(PublishingAccountModel.created_at.asc()).limit(1)
        return await self._fetch_one(stmt)

    async def get_by_id(self, account_id: str) -> PublishingAccount | None:
        stmt = select(PublishingAccountModel).where(
            PublishingAccountModel.id == account_id,
            PublishingAccountModel.provider == self._provider,
        )
        return await self._fetch_one(stmt)

    async def _fetch_one(self, stmt) -> PublishingAccount | None:
        try:
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Account lookup failed", error=str(e), error_type=type(e).__name__)
            await self._session.rollback()
            raise PersistenceError("Failed to load publishing account") from e
        return model.to_entity() if model else None
