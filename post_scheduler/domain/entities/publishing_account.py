from dataclasses import dataclass
from datetime import datetime


@dataclass
class PublishingAccount:
    """A connected account on the publishing platform."""

    id: str
    owner_user_id: str
    provider: str
    created_at: datetime
    access_token: str | None = None
    access_secret: str | None = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_token and self.access_secret)
