from .entities import PublishingAccount, ScheduleRecord
from .exceptions import (
    AccountNotFound,
    CancelFailed,
    ContentInvalid,
    CredentialsMissing,
    PersistenceError,
    QueueJobNotFound,
    QueueUnavailable,
    ScheduleConflict,
    ScheduleNotFound,
    ScheduleValidationError,
    SchedulingError,
    SignatureInvalid,
    TooFar,
    TooManyMedia,
    TooSoon,
    UpstreamPublishError,
)

__all__ = [
    "AccountNotFound",
    "CancelFailed",
    "ContentInvalid",
    "CredentialsMissing",
    "PersistenceError",
    "PublishingAccount",
    "QueueJobNotFound",
    "QueueUnavailable",
    "ScheduleConflict",
    "ScheduleNotFound",
    "ScheduleRecord",
    "ScheduleValidationError",
    "SchedulingError",
    "SignatureInvalid",
    "TooFar",
    "TooManyMedia",
    "TooSoon",
    "UpstreamPublishError",
]
