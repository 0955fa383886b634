from collections.abc import Callable

import aiohttp
import structlog
from tweepy import TweepyException, Unauthorized
from tweepy.asynchronous import AsyncClient

from ....application.ports.outbound import PublishingClient, PublishRequest, PublishResult
from ....domain.entities import PublishingAccount
from ....domain.exceptions import CredentialsMissing, UpstreamPublishError
from ...logging import Timer

logger = structlog.get_logger()

ClientFactory = Callable[[PublishingAccount], AsyncClient]


class TwitterPublisher(PublishingClient):
    """X/Twitter API v2 adapter implementing the PublishingClient port.

    Posts on behalf of the user with OAuth 1.0a user context: the app's
    consumer key pair plus the account's access token pair.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._client_factory = client_factory or self._default_client

    def _default_client(self, account: PublishingAccount) -> AsyncClient:
        return AsyncClient(
            consumer_key=self._api_key,
            consumer_secret=self._api_secret,
            access_token=account.access_token,
            access_token_secret=account.access_secret,
        )

    async def publish(self, account: PublishingAccount, request: PublishRequest) -> PublishResult:
        if not account.has_credentials:
            raise CredentialsMissing()

        client = self._client_factory(account)
        params: dict = {"text": request.text}
        if request.media_ids:
            params["media_ids"] = list(request.media_ids)

        try:
            with Timer() as t:
                response = await client.create_tweet(**params)
        except Unauthorized as e:
            # Revoked or expired user tokens; redelivery cannot succeed
            logger.error("Twitter API refused account credentials", account_id=account.id, error=str(e))
            raise CredentialsMissing("Account credentials were rejected") from e
        except TweepyException as e:
            logger.error(
                "Twitter API rejected post",
                account_id=account.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise UpstreamPublishError(f"Twitter API error: {type(e).__name__}") from e
        except aiohttp.ClientError as e:
            logger.error("Twitter API unreachable", account_id=account.id, error=str(e))
            raise UpstreamPublishError("Twitter API unreachable") from e

        data = response.data or {}
        post_id = data.get("id")
        if not post_id:
            logger.error("Twitter API response missing post id", errors=response.errors)
            raise UpstreamPublishError("Twitter API response missing post id")

        logger.info(
            "Post created on Twitter",
            account_id=account.id,
            external_post_id=post_id,
            media_count=len(request.media_ids),
            duration_ms=t.duration_ms,
        )
        return PublishResult(external_post_id=str(post_id))
