"""Bearer authentication for the scheduling API.

Tokens are Cognito access or id tokens: RS256 only, audience and issuer
pinned, keys fetched from the pool's JWKS document. With ``auth_enabled``
off (development) the caller is read from the ``X-User-Id`` header.
"""

import time
from dataclasses import dataclass
from typing import Annotated, Any

import httpx
import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwk, jwt

from ...config import settings

logger = structlog.get_logger()

security = HTTPBearer(auto_error=False)

ALLOWED_ALGORITHMS = ["RS256"]
REQUIRED_CLAIMS = ("sub", "exp", "iat", "iss")
DEV_USER_HEADER = "X-User-Id"
DEV_USER_ID = "dev-user"


@dataclass
class AuthenticatedUser:
    """Caller identity. ``sub`` is the owner id stored on scheduled posts."""

    sub: str
    email: str | None = None
    name: str | None = None

    @property
    def user_id(self) -> str:
        return self.sub


class JwksKeySet:
    """Cached JWKS document, refetched on TTL expiry or unknown ``kid``."""

    def __init__(
        self,
        url: str,
        ttl_seconds: int = 3600,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._ttl = ttl_seconds
        self._client = client
        self._keys: list[dict[str, Any]] = []
        self._fetched_at = 0.0

    async def find(self, kid: str) -> dict[str, Any] | None:
        if self._is_fresh():
            key = self._lookup(kid)
            if key is not None:
                return key
        # Unknown kid usually means the pool rotated its keys
        await self._refresh()
        return self._lookup(kid)

    def _is_fresh(self) -> bool:
        return bool(self._keys) and time.time() - self._fetched_at < self._ttl

    def _lookup(self, kid: str) -> dict[str, Any] | None:
        return next((k for k in self._keys if k.get("kid") == kid), None)

    async def _refresh(self) -> None:
        try:
            if self._client is not None:
                response = await self._client.get(self._url, timeout=10.0)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.get(self._url)
            response.raise_for_status()
            self._keys = list(response.json().get("keys", []))
            self._fetched_at = time.time()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Failed to fetch JWKS", url=self._url, error=str(e))
            if not self._keys:
                raise JWTError("Unable to fetch JWKS") from e
            logger.warning("Keeping stale JWKS after fetch failure")


class CognitoTokenVerifier:
    """Verifies bearer tokens issued by one Cognito user pool."""

    def __init__(self, keys: JwksKeySet, audience: str, issuer: str) -> None:
        if not audience:
            raise ValueError("Audience (client_id) is required for JWT validation")
        if not issuer:
            raise ValueError("Issuer is required for JWT validation")
        self._keys = keys
        self._audience = audience
        self._issuer = issuer

    @classmethod
    def for_user_pool(cls, region: str, user_pool_id: str, client_id: str) -> "CognitoTokenVerifier":
        issuer = f"https://cognito-idp.{region}.amazonaws.com/{user_pool_id}"
        return cls(JwksKeySet(f"{issuer}/.well-known/jwks.json"), audience=client_id, issuer=issuer)

    async def verify(self, token: str) -> AuthenticatedUser:
        """Return the token's user, or raise 401."""
        try:
            claims = await self._decode(token)
        except JWTError as e:
            logger.warning("Bearer token rejected", error=str(e))
            raise _unauthorized("Invalid or expired token") from e

        return AuthenticatedUser(
            sub=claims["sub"],
            email=claims.get("email"),
            name=claims.get("name") or claims.get("cognito:username"),
        )

    async def _decode(self, token: str) -> dict[str, Any]:
        header = jwt.get_unverified_header(token)
        if header.get("alg") not in ALLOWED_ALGORITHMS:
            raise JWTError(f"Algorithm {header.get('alg')} not allowed")
        kid = header.get("kid")
        if not kid:
            raise JWTError("Token missing kid header")

        key = await self._keys.find(kid)
        if key is None:
            raise JWTError(f"No signing key for kid: {kid}")

        claims = jwt.decode(
            token,
            jwk.construct(key, algorithm="RS256"),
            algorithms=ALLOWED_ALGORITHMS,
            audience=self._audience,
            issuer=self._issuer,
            options={"require_exp": True, "require_iat": True},
        )
        missing = [c for c in REQUIRED_CLAIMS if c not in claims]
        if missing:
            raise JWTError(f"Missing required claims: {missing}")
        return claims


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


_token_verifier: CognitoTokenVerifier | None = None


def get_token_verifier() -> CognitoTokenVerifier:
    global _token_verifier
    if _token_verifier is None:
        if not settings.cognito_user_pool_id or not settings.cognito_client_id:
            raise RuntimeError("Cognito settings not configured")
        _token_verifier = CognitoTokenVerifier.for_user_pool(
            settings.cognito_region,
            settings.cognito_user_pool_id,
            settings.cognito_client_id,
        )
    return _token_verifier


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthenticatedUser | None:
    if not settings.auth_enabled:
        return AuthenticatedUser(sub=request.headers.get(DEV_USER_HEADER, DEV_USER_ID))
    if not credentials:
        return None
    return await get_token_verifier().verify(credentials.credentials)


async def require_auth(
    user: Annotated[AuthenticatedUser | None, Depends(get_current_user)],
) -> AuthenticatedUser:
    """Dependency that requires an authenticated caller."""
    if user is None:
        raise _unauthorized("Authentication required")
    return user
