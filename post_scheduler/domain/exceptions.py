"""Domain errors for scheduling and publishing.

Every error carries a stable ``code`` and a human-readable ``message`` that
is safe to show to the user who made the request.
"""


class SchedulingError(Exception):
    """Base class for all scheduling errors."""

    code = "scheduling_error"
    default_message = "Scheduling request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ScheduleValidationError(SchedulingError):
    """Invalid input. Never retried."""

    code = "validation_error"
    default_message = "Invalid schedule request"


class ContentInvalid(ScheduleValidationError):
    code = "content_invalid"
    default_message = "Post content is invalid"


class TooSoon(ScheduleValidationError):
    code = "too_soon"
    default_message = "Schedule time must be at least 1 minute in the future"


class TooFar(ScheduleValidationError):
    code = "too_far"
    default_message = "Schedule time cannot be more than 365 days in the future"


class TooManyMedia(ScheduleValidationError):
    code = "too_many_media"
    default_message = "A post can carry at most 4 media attachments"


class ScheduleNotFound(SchedulingError):
    code = "not_found"
    default_message = "Scheduled post not found"


class ScheduleConflict(SchedulingError):
    code = "conflict"
    default_message = "Scheduled post can no longer be changed"


class AccountNotFound(SchedulingError):
    code = "account_not_found"
    default_message = "No connected publishing account"


class QueueUnavailable(SchedulingError):
    code = "queue_unavailable"
    default_message = "Scheduling service is temporarily unavailable"


class QueueJobNotFound(SchedulingError):
    """The delivery queue does not know the job (already fired or expired)."""

    code = "queue_job_not_found"
    default_message = "Scheduled delivery no longer exists"


class CancelFailed(SchedulingError):
    code = "cancel_failed"
    default_message = "Failed to cancel scheduled post"


class PersistenceError(SchedulingError):
    code = "persistence_error"
    default_message = "Failed to save scheduled post"


class SignatureInvalid(SchedulingError):
    code = "signature_invalid"
    default_message = "Invalid callback signature"


class UpstreamPublishError(SchedulingError):
    code = "upstream_publish_error"
    default_message = "Publishing platform rejected the post"


class CredentialsMissing(SchedulingError):
    code = "credentials_missing"
    default_message = "Account not found or missing credentials"
