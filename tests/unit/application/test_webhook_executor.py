import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from post_scheduler.application.ports.inbound import ExecutionOutcome
from post_scheduler.application.ports.outbound import PublishRequest, PublishResult
from post_scheduler.application.services import WebhookExecutor
from post_scheduler.application.services.webhook_executor import parse_record_id
from post_scheduler.domain.exceptions import (
    CredentialsMissing,
    PersistenceError,
    SignatureInvalid,
    UpstreamPublishError,
)

BODY = json.dumps({"id": "post-1"}).encode()


@pytest.fixture
def mock_repository(pending_record):
    repository = AsyncMock()
    repository.find_by_id.return_value = pending_record
    repository.mark_published.return_value = True
    return repository


@pytest.fixture
def mock_accounts(account):
    accounts = AsyncMock()
    accounts.get_by_id.return_value = account
    return accounts


@pytest.fixture
def mock_publisher():
    publisher = AsyncMock()
    publisher.publish.return_value = PublishResult(external_post_id="tweet-1")
    return publisher


@pytest.fixture
def mock_verifier():
    return MagicMock()


@pytest.fixture
def executor(mock_repository, mock_accounts, mock_publisher, mock_verifier):
    return WebhookExecutor(
        repository=mock_repository,
        accounts=mock_accounts,
        publisher=mock_publisher,
        verifier=mock_verifier,
        io_timeout=1.0,
    )


class TestParseRecordId:
    def test_valid_body(self):
        assert parse_record_id(BODY) == "post-1"

    @pytest.mark.parametrize(
        "body",
        [b"", b"not json", b"[1, 2]", b'{"id": ""}', b'{"id": 42}', b'{"other": "x"}', b"\xff\xfe"],
    )
    def test_malformed_bodies(self, body):
        assert parse_record_id(body) is None


class TestExecute:
    @pytest.mark.asyncio
    async def test_publishes_and_marks_record(
        self, executor, mock_publisher, mock_repository, account
    ):
        outcome = await executor.execute(BODY, "sig", job_id="job-old")

        assert outcome is ExecutionOutcome.PUBLISHED
        assert outcome.status_code == 200
        mock_publisher.publish.assert_called_once_with(
            account, PublishRequest(text="Hello world", media_ids=[])
        )
        mock_repository.mark_published.assert_called_once_with("post-1", "tweet-1")

    @pytest.mark.asyncio
    async def test_invalid_signature_forbidden(
        self, executor, mock_verifier, mock_repository, mock_publisher
    ):
        mock_verifier.verify.side_effect = SignatureInvalid()

        outcome = await executor.execute(BODY, "forged")

        assert outcome is ExecutionOutcome.FORBIDDEN
        assert outcome.status_code == 403
        mock_repository.find_by_id.assert_not_called()
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_signature_passed_as_empty(self, executor, mock_verifier):
        await executor.execute(BODY, None)

        mock_verifier.verify.assert_called_once_with(BODY, "")

    @pytest.mark.asyncio
    async def test_malformed_body_bad_request(self, executor, mock_repository):
        outcome = await executor.execute(b"{}", "sig")

        assert outcome is ExecutionOutcome.BAD_REQUEST
        assert outcome.status_code == 400
        mock_repository.find_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_record_not_found(self, executor, mock_repository, mock_publisher):
        mock_repository.find_by_id.return_value = None

        outcome = await executor.execute(BODY, "sig")

        assert outcome is ExecutionOutcome.NOT_FOUND
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_is_retryable(self, executor, mock_repository):
        mock_repository.find_by_id.side_effect = PersistenceError()

        outcome = await executor.execute(BODY, "sig")

        assert outcome is ExecutionOutcome.STORE_UNAVAILABLE
        assert outcome.status_code == 503

    @pytest.mark.asyncio
    async def test_duplicate_delivery_is_noop(
        self, executor, mock_repository, mock_publisher, published_record
    ):
        mock_repository.find_by_id.return_value = published_record

        outcome = await executor.execute(BODY, "sig")

        assert outcome is ExecutionOutcome.ALREADY_PUBLISHED
        assert outcome.status_code == 200
        mock_publisher.publish.assert_not_called()
        mock_repository.mark_published.assert_not_called()

    @pytest.mark.asyncio
    async def test_superseded_job_ignored(self, executor, mock_publisher):
        outcome = await executor.execute(BODY, "sig", job_id="job-stale")

        assert outcome is ExecutionOutcome.STALE_JOB
        assert outcome.status_code == 200
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_delivery_without_job_id_is_not_treated_as_stale(self, executor):
        outcome = await executor.execute(BODY, "sig", job_id=None)

        assert outcome is ExecutionOutcome.PUBLISHED

    @pytest.mark.asyncio
    async def test_account_without_credentials(
        self, executor, mock_accounts, mock_publisher, account
    ):
        account.access_token = None

        outcome = await executor.execute(BODY, "sig")

        assert outcome is ExecutionOutcome.MISSING_CREDENTIALS
        assert outcome.status_code == 400
        mock_publisher.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_account(self, executor, mock_accounts):
        mock_accounts.get_by_id.return_value = None

        outcome = await executor.execute(BODY, "sig")

        assert outcome is ExecutionOutcome.MISSING_CREDENTIALS

    @pytest.mark.asyncio
    async def test_publisher_refuses_credentials(self, executor, mock_publisher):
        mock_publisher.publish.side_effect = CredentialsMissing()

        outcome = await executor.execute(BODY, "sig")

        assert outcome is ExecutionOutcome.MISSING_CREDENTIALS

    @pytest.mark.asyncio
    async def test_upstream_failure_leaves_record_for_retry(
        self, executor, mock_publisher, mock_repository
    ):
        mock_publisher.publish.side_effect = UpstreamPublishError()

        outcome = await executor.execute(BODY, "sig")

        assert outcome is ExecutionOutcome.UPSTREAM_FAILED
        assert outcome.status_code == 502
        mock_repository.mark_published.assert_not_called()

    @pytest.mark.asyncio
    async def test_record_update_failure_still_acknowledged(self, executor, mock_repository):
        mock_repository.mark_published.side_effect = PersistenceError()

        outcome = await executor.execute(BODY, "sig")

        assert outcome is ExecutionOutcome.PUBLISHED_UNRECORDED
        assert outcome.status_code == 200

    @pytest.mark.asyncio
    async def test_concurrent_delivery_already_marked(self, executor, mock_repository):
        mock_repository.mark_published.return_value = False

        outcome = await executor.execute(BODY, "sig")

        assert outcome is ExecutionOutcome.ALREADY_PUBLISHED

    @pytest.mark.asyncio
    async def test_media_refs_forwarded_in_order(
        self, executor, mock_publisher, pending_record
    ):
        pending_record.media_refs = ["m2", "m1"]

        await executor.execute(BODY, "sig")

        request = mock_publisher.publish.call_args[0][1]
        assert request.media_ids == ["m2", "m1"]
