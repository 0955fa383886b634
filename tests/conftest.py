from datetime import UTC, datetime

import pytest

from post_scheduler.domain.entities import PublishingAccount, ScheduleRecord

NOW_UNIX = 1_700_000_000


@pytest.fixture
def now_unix() -> int:
    return NOW_UNIX


@pytest.fixture
def account() -> PublishingAccount:
    return PublishingAccount(
        id="acct-1",
        owner_user_id="user-123",
        provider="twitter",
        created_at=datetime(2023, 1, 1, tzinfo=UTC),
        access_token="token",
        access_secret="secret",
    )


@pytest.fixture
def pending_record() -> ScheduleRecord:
    return ScheduleRecord.create(
        record_id="post-1",
        owner_user_id="user-123",
        publishing_account_id="acct-1",
        content="Hello world",
        scheduled_at_unix=NOW_UNIX + 3600,
        media_refs=[],
        queue_job_id="job-old",
    )


@pytest.fixture
def published_record(pending_record) -> ScheduleRecord:
    pending_record.mark_published("tweet-99")
    return pending_record
