"""
Application service for the queue's fire-time callback.

The queue delivers at least once, so this handler must be idempotent: a
record is published to the platform at most once, and every later delivery
for it is answered with success without side effects. The answer is only an
outcome code; error details stay in the logs.
"""

import asyncio
import json

import structlog

from ...domain.exceptions import (
    CredentialsMissing,
    PersistenceError,
    SignatureInvalid,
    UpstreamPublishError,
)
from ..ports.inbound import ExecuteScheduledPostUseCase, ExecutionOutcome
from ..ports.outbound import (
    AccountRepository,
    PublishingClient,
    PublishRequest,
    ScheduleRepository,
    SignatureVerifier,
)

logger = structlog.get_logger()

DEFAULT_IO_TIMEOUT = 30.0


def parse_record_id(body: bytes) -> str | None:
    """Extract the record id from a callback body, or None if malformed."""
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    record_id = payload.get("id")
    if not isinstance(record_id, str) or not record_id.strip():
        return None
    return record_id


class WebhookExecutor(ExecuteScheduledPostUseCase):
    """Publishes a scheduled post when its queue job fires."""

    def __init__(
        self,
        repository: ScheduleRepository,
        accounts: AccountRepository,
        publisher: PublishingClient,
        verifier: SignatureVerifier,
        io_timeout: float = DEFAULT_IO_TIMEOUT,
    ) -> None:
        self._repository = repository
        self._accounts = accounts
        self._publisher = publisher
        self._verifier = verifier
        self._io_timeout = io_timeout

    async def execute(
        self,
        body: bytes,
        signature: str | None,
        job_id: str | None = None,
    ) -> ExecutionOutcome:
        """
        Handle one delivery.

        Args:
            body: Raw request body, exactly as signed
            signature: Value of the queue's signature header
            job_id: Queue job id of this delivery, when the queue sends it

        Returns:
            ExecutionOutcome whose status code is returned to the queue
        """
        try:
            self._verifier.verify(body, signature or "")
        except SignatureInvalid as e:
            logger.warning("Rejected callback with invalid signature", job_id=job_id, reason=str(e))
            return ExecutionOutcome.FORBIDDEN

        record_id = parse_record_id(body)
        if record_id is None:
            logger.warning("Callback body missing post id", job_id=job_id)
            return ExecutionOutcome.BAD_REQUEST

        log = logger.bind(record_id=record_id, job_id=job_id)

        try:
            record = await asyncio.wait_for(
                self._repository.find_by_id(record_id), timeout=self._io_timeout
            )
        except (PersistenceError, TimeoutError) as e:
            log.error("Failed to load scheduled post", error=str(e), error_type=type(e).__name__)
            return ExecutionOutcome.STORE_UNAVAILABLE

        if record is None:
            log.warning("Callback for unknown post")
            return ExecutionOutcome.NOT_FOUND

        if record.is_published:
            log.info("Duplicate delivery for published post", external_post_id=record.external_post_id)
            return ExecutionOutcome.ALREADY_PUBLISHED

        if not record.is_scheduled:
            log.warning("Callback for post that is not scheduled")
            return ExecutionOutcome.NOT_FOUND

        if job_id and record.queue_job_id and job_id != record.queue_job_id:
            log.info("Delivery from superseded job ignored", current_job_id=record.queue_job_id)
            return ExecutionOutcome.STALE_JOB

        try:
            account = await asyncio.wait_for(
                self._accounts.get_by_id(record.publishing_account_id), timeout=self._io_timeout
            )
        except (PersistenceError, TimeoutError) as e:
            log.error("Failed to load publishing account", error=str(e), error_type=type(e).__name__)
            return ExecutionOutcome.STORE_UNAVAILABLE

        if account is None or not account.has_credentials:
            log.error(
                "Publishing account not found or missing credentials",
                account_id=record.publishing_account_id,
            )
            return ExecutionOutcome.MISSING_CREDENTIALS

        request = PublishRequest(text=record.content, media_ids=list(record.media_refs))

        try:
            result = await asyncio.wait_for(
                self._publisher.publish(account, request), timeout=self._io_timeout
            )
        except (UpstreamPublishError, TimeoutError) as e:
            # Record stays scheduled; the queue redelivers on 5xx
            log.error(
                "Failed to publish scheduled post",
                account_id=account.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ExecutionOutcome.UPSTREAM_FAILED
        except CredentialsMissing:
            log.error("Publishing client refused account credentials", account_id=account.id)
            return ExecutionOutcome.MISSING_CREDENTIALS

        try:
            marked = await asyncio.wait_for(
                self._repository.mark_published(record_id, result.external_post_id),
                timeout=self._io_timeout,
            )
        except (PersistenceError, TimeoutError) as e:
            log.error(
                "Post published but record not updated",
                external_post_id=result.external_post_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ExecutionOutcome.PUBLISHED_UNRECORDED

        if not marked:
            log.warning(
                "Concurrent delivery already marked post published",
                external_post_id=result.external_post_id,
            )
            return ExecutionOutcome.ALREADY_PUBLISHED

        log.info("Scheduled post published", external_post_id=result.external_post_id)
        return ExecutionOutcome.PUBLISHED
