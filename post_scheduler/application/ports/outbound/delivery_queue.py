from abc import ABC, abstractmethod
from typing import Any


class DeliveryQueue(ABC):
    """Output port for the external scheduled-callback queue.

    The queue delivers at least once, no earlier than the requested time.
    """

    @abstractmethod
    async def publish(
        self,
        callback_url: str,
        not_before_unix: int,
        payload: dict[str, Any],
    ) -> str:
        """Register a delayed callback and return its job id.

        Raises:
            QueueUnavailable: The queue could not accept the job
        """
        ...

    @abstractmethod
    async def cancel(self, job_id: str) -> None:
        """Cancel a pending job.

        Raises:
            QueueJobNotFound: The queue does not know the job
            QueueUnavailable: The queue could not be reached
        """
        ...
