from .auth import (
    AuthenticatedUser,
    CognitoTokenVerifier,
    JwksKeySet,
    get_current_user,
    require_auth,
)
from .correlation import CorrelationIdMiddleware

__all__ = [
    "AuthenticatedUser",
    "CognitoTokenVerifier",
    "CorrelationIdMiddleware",
    "JwksKeySet",
    "get_current_user",
    "require_auth",
]
