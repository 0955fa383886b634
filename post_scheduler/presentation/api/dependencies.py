from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...application.ports.outbound import (
    AccountRepository,
    DeliveryQueue,
    PublishingClient,
    ScheduleRepository,
    SignatureVerifier,
)
from ...application.services import ScheduleCoordinator, WebhookExecutor
from ...config import settings
from ...infrastructure.adapters import (
    PostgresAccountRepository,
    PostgresScheduleRepository,
    QStashDeliveryQueue,
    QStashSignatureVerifier,
    TwitterPublisher,
)
from ...infrastructure.persistence import Database

# Singleton database instance
_database: Database | None = None


def get_database() -> Database:
    global _database
    if _database is None:
        _database = Database(settings.database_url, echo=settings.debug)
    return _database


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    db = get_database()
    session = db.session()
    try:
        yield session
    finally:
        await session.close()


def get_schedule_repository(session: AsyncSession = Depends(get_session)) -> ScheduleRepository:
    return PostgresScheduleRepository(session)


def get_account_repository(session: AsyncSession = Depends(get_session)) -> AccountRepository:
    return PostgresAccountRepository(session)


def get_delivery_queue() -> DeliveryQueue:
    return QStashDeliveryQueue(
        token=settings.qstash_token,
        base_url=settings.qstash_url,
        timeout=settings.io_timeout_seconds,
        retries=settings.qstash_retries,
    )


def get_signature_verifier() -> SignatureVerifier:
    return QStashSignatureVerifier(
        current_signing_key=settings.qstash_current_signing_key,
        next_signing_key=settings.qstash_next_signing_key,
        expected_url=settings.callback_url,
    )


def get_publishing_client() -> PublishingClient:
    return TwitterPublisher(
        api_key=settings.twitter_api_key,
        api_secret=settings.twitter_api_secret,
    )


def get_schedule_coordinator(
    queue: DeliveryQueue = Depends(get_delivery_queue),
    repository: ScheduleRepository = Depends(get_schedule_repository),
    accounts: AccountRepository = Depends(get_account_repository),
) -> ScheduleCoordinator:
    return ScheduleCoordinator(
        queue=queue,
        repository=repository,
        accounts=accounts,
        callback_url=settings.callback_url,
        io_timeout=settings.io_timeout_seconds,
    )


def get_webhook_executor(
    repository: ScheduleRepository = Depends(get_schedule_repository),
    accounts: AccountRepository = Depends(get_account_repository),
    publisher: PublishingClient = Depends(get_publishing_client),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> WebhookExecutor:
    return WebhookExecutor(
        repository=repository,
        accounts=accounts,
        publisher=publisher,
        verifier=verifier,
        io_timeout=settings.publish_timeout_seconds,
    )
