"""
Outbound port for publishing to the social platform.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ....domain.entities import PublishingAccount


@dataclass
class PublishRequest:
    """Post to create on the platform."""

    text: str
    media_ids: list[str] = field(default_factory=list)


@dataclass
class PublishResult:
    """Platform response for a created post."""

    external_post_id: str


class PublishingClient(ABC):
    """Outbound port for the publishing platform."""

    @abstractmethod
    async def publish(self, account: PublishingAccount, request: PublishRequest) -> PublishResult:
        """
        Create a post on behalf of ``account``.

        Raises:
            UpstreamPublishError: The platform rejected the post or could not be reached
        """
        ...
