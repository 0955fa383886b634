from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from post_scheduler.application.ports.inbound import ExecutionOutcome
from post_scheduler.main import app
from post_scheduler.presentation.api.dependencies import get_webhook_executor

WEBHOOK_URL = "/api/v1/webhooks/qstash/publish"


@pytest.fixture
def mock_executor():
    executor = AsyncMock()
    executor.execute.return_value = ExecutionOutcome.PUBLISHED
    return executor


@pytest.fixture
def client(mock_executor):
    app.dependency_overrides[get_webhook_executor] = lambda: mock_executor
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestQStashWebhook:
    def test_passes_raw_body_and_headers(self, client, mock_executor):
        body = b'{"id": "post-1"}'

        response = client.post(
            WEBHOOK_URL,
            content=body,
            headers={
                "Content-Type": "application/json",
                "Upstash-Signature": "signed.jwt.token",
                "Upstash-Message-Id": "msg_123",
            },
        )

        assert response.status_code == 200
        assert response.text == "Post published"
        mock_executor.execute.assert_called_once_with(
            body, "signed.jwt.token", job_id="msg_123"
        )

    def test_missing_headers_passed_as_none(self, client, mock_executor):
        client.post(WEBHOOK_URL, content=b"{}")

        mock_executor.execute.assert_called_once_with(b"{}", None, job_id=None)

    @pytest.mark.parametrize(
        "outcome",
        [
            ExecutionOutcome.FORBIDDEN,
            ExecutionOutcome.BAD_REQUEST,
            ExecutionOutcome.NOT_FOUND,
            ExecutionOutcome.UPSTREAM_FAILED,
            ExecutionOutcome.ALREADY_PUBLISHED,
        ],
    )
    def test_outcome_status_returned(self, client, mock_executor, outcome):
        mock_executor.execute.return_value = outcome

        response = client.post(WEBHOOK_URL, content=b"{}")

        assert response.status_code == outcome.status_code
        assert response.text == outcome.reason

    def test_response_carries_correlation_id(self, client):
        response = client.post(
            WEBHOOK_URL,
            content=b"{}",
            headers={"Upstash-Message-Id": "msg_123"},
        )

        assert response.headers["X-Correlation-ID"] == "msg_123"
