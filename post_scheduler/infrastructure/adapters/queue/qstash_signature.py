"""QStash callback signature verification.

QStash signs each delivery with a JWT (HS256) in the ``Upstash-Signature``
header. The token is signed with the current signing key, or with the next
one during key rotation, and carries the base64url SHA-256 of the body.
"""

import base64
import hashlib
import hmac

import structlog
from jose import JWTError, jwt

from ....application.ports.outbound import SignatureVerifier
from ....domain.exceptions import SignatureInvalid

logger = structlog.get_logger()

QSTASH_ISSUER = "Upstash"
ALLOWED_ALGORITHMS = ["HS256"]


def body_digest(body: bytes) -> str:
    """Unpadded base64url SHA-256 of the body, as QStash encodes it."""
    return base64.urlsafe_b64encode(hashlib.sha256(body).digest()).decode("ascii").rstrip("=")


class QStashSignatureVerifier(SignatureVerifier):
    """Verifies QStash signatures against the current and next signing keys."""

    def __init__(
        self,
        current_signing_key: str,
        next_signing_key: str | None = None,
        expected_url: str | None = None,
    ) -> None:
        if not current_signing_key:
            raise ValueError("QStash current signing key is required")
        self._keys = [k for k in (current_signing_key, next_signing_key) if k]
        self._expected_url = expected_url

    def verify(self, body: bytes, signature: str) -> None:
        if not signature:
            raise SignatureInvalid("Missing signature")

        claims = self._decode(signature)

        if self._expected_url and claims.get("sub") != self._expected_url:
            raise SignatureInvalid("Signature issued for a different URL")

        signed_digest = str(claims.get("body", "")).rstrip("=")
        if not hmac.compare_digest(signed_digest, body_digest(body)):
            raise SignatureInvalid("Body does not match signature")

    def _decode(self, token: str) -> dict:
        last_error: JWTError | None = None
        for index, key in enumerate(self._keys):
            try:
                return jwt.decode(
                    token,
                    key,
                    algorithms=ALLOWED_ALGORITHMS,
                    issuer=QSTASH_ISSUER,
                    options={"verify_aud": False},
                )
            except JWTError as e:
                last_error = e
                logger.debug("Signature did not verify with key", key_index=index, error=str(e))
        raise SignatureInvalid("Signature verification failed") from last_error
