import httpx
import structlog

from ....application.ports.outbound import DeliveryQueue
from ....domain.exceptions import QueueJobNotFound, QueueUnavailable
from ...logging import Timer

logger = structlog.get_logger()

DEFAULT_QSTASH_URL = "https://qstash.upstash.io"


class QStashDeliveryQueue(DeliveryQueue):
    """Upstash QStash adapter implementing the DeliveryQueue port.

    QStash POSTs the JSON payload to the callback URL no earlier than the
    ``Upstash-Not-Before`` time, retrying on non-2xx answers.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_QSTASH_URL,
        timeout: float = 10.0,
        retries: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not token:
            raise ValueError("QStash token is required")
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries
        self._client = client

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def publish(self, callback_url: str, not_before_unix: int, payload: dict) -> str:
        """Register a delayed JSON callback and return the QStash message id."""
        headers = {
            **self._headers(),
            "Content-Type": "application/json",
            "Upstash-Not-Before": str(int(not_before_unix)),
        }
        if self._retries is not None:
            headers["Upstash-Retries"] = str(self._retries)

        with Timer() as t:
            response = await self._request(
                "POST",
                f"{self._base_url}/v2/publish/{callback_url}",
                headers=headers,
                json=payload,
            )

        if response.status_code >= 400:
            logger.error(
                "QStash publish rejected",
                status_code=response.status_code,
                duration_ms=t.duration_ms,
            )
            raise QueueUnavailable()

        try:
            data = response.json()
        except ValueError as e:
            raise QueueUnavailable() from e

        message_id = data.get("messageId") if isinstance(data, dict) else None
        if not message_id:
            logger.error("QStash publish response missing messageId")
            raise QueueUnavailable()

        logger.info(
            "QStash job registered",
            job_id=message_id,
            not_before=int(not_before_unix),
            duration_ms=t.duration_ms,
        )
        return message_id

    async def cancel(self, job_id: str) -> None:
        """Cancel a pending QStash message."""
        with Timer() as t:
            response = await self._request(
                "DELETE",
                f"{self._base_url}/v2/messages/{job_id}",
                headers=self._headers(),
            )

        if response.status_code == 404:
            logger.warning("QStash job not found", job_id=job_id)
            raise QueueJobNotFound()
        if response.status_code >= 400:
            logger.error(
                "QStash cancel rejected",
                job_id=job_id,
                status_code=response.status_code,
                duration_ms=t.duration_ms,
            )
            raise QueueUnavailable()

        logger.info("QStash job cancelled", job_id=job_id, duration_ms=t.duration_ms)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            if self._client is not None:
                return await self._client.request(method, url, timeout=self._timeout, **kwargs)
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error("QStash request timed out", method=method)
            raise QueueUnavailable() from e
        except httpx.HTTPError as e:
            logger.error("QStash request failed", method=method, error=str(e))
            raise QueueUnavailable() from e
