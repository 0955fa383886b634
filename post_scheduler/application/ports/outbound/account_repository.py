from abc import ABC, abstractmethod

from ....domain.entities import PublishingAccount


class AccountRepository(ABC):
    """Output port for connected publishing accounts."""

    @abstractmethod
    async def get_for_owner(
        self, owner_user_id: str, account_id: str | None = None
    ) -> PublishingAccount | None:
        """Return the requested account if owned, else the owner's first account."""
        ...

    @abstractmethod
    async def get_by_id(self, account_id: str) -> PublishingAccount | None:
        """Retrieve an account with its credentials."""
        ...
