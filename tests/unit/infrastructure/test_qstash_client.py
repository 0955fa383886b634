import httpx
import pytest

from post_scheduler.domain.exceptions import QueueJobNotFound, QueueUnavailable
from post_scheduler.infrastructure.adapters import QStashDeliveryQueue

BASE_URL = "https://qstash.test"
CALLBACK_URL = "https://app.example.com/api/v1/webhooks/qstash/publish"


def make_queue(handler, retries=None) -> QStashDeliveryQueue:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return QStashDeliveryQueue(
        token="qstash-token",
        base_url=BASE_URL,
        retries=retries,
        client=client,
    )


class TestPublish:
    @pytest.mark.asyncio
    async def test_publish_sends_delayed_callback(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"messageId": "msg_123"})

        queue = make_queue(handler)

        job_id = await queue.publish(CALLBACK_URL, 1_700_003_600, {"id": "post-1"})

        assert job_id == "msg_123"
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/v2/publish/{CALLBACK_URL}"
        assert request.headers["Authorization"] == "Bearer qstash-token"
        assert request.headers["Upstash-Not-Before"] == "1700003600"
        assert "Upstash-Retries" not in request.headers
        assert b"post-1" in request.content

    @pytest.mark.asyncio
    async def test_publish_sets_retries_when_configured(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"messageId": "msg_1"})

        queue = make_queue(handler, retries=3)

        await queue.publish(CALLBACK_URL, 1_700_003_600, {"id": "post-1"})

        assert seen[0].headers["Upstash-Retries"] == "3"

    @pytest.mark.asyncio
    async def test_publish_rejected_raises_unavailable(self):
        queue = make_queue(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(QueueUnavailable):
            await queue.publish(CALLBACK_URL, 1_700_003_600, {"id": "post-1"})

    @pytest.mark.asyncio
    async def test_publish_without_message_id_raises_unavailable(self):
        queue = make_queue(lambda request: httpx.Response(201, json={}))

        with pytest.raises(QueueUnavailable):
            await queue.publish(CALLBACK_URL, 1_700_003_600, {"id": "post-1"})

    @pytest.mark.asyncio
    async def test_transport_error_raises_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        queue = make_queue(handler)

        with pytest.raises(QueueUnavailable):
            await queue.publish(CALLBACK_URL, 1_700_003_600, {"id": "post-1"})

    @pytest.mark.asyncio
    async def test_timeout_raises_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        queue = make_queue(handler)

        with pytest.raises(QueueUnavailable):
            await queue.publish(CALLBACK_URL, 1_700_003_600, {"id": "post-1"})


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_deletes_message(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(202)

        queue = make_queue(handler)

        await queue.cancel("msg_123")

        assert seen[0].method == "DELETE"
        assert str(seen[0].url) == f"{BASE_URL}/v2/messages/msg_123"

    @pytest.mark.asyncio
    async def test_cancel_unknown_job_raises_not_found(self):
        queue = make_queue(lambda request: httpx.Response(404, json={"error": "not found"}))

        with pytest.raises(QueueJobNotFound):
            await queue.cancel("msg_gone")

    @pytest.mark.asyncio
    async def test_cancel_server_error_raises_unavailable(self):
        queue = make_queue(lambda request: httpx.Response(503))

        with pytest.raises(QueueUnavailable):
            await queue.cancel("msg_123")


def test_token_required():
    with pytest.raises(ValueError, match="token"):
        QStashDeliveryQueue(token="")
