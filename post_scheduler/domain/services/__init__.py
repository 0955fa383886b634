from .schedule_validator import (
    MAX_CONTENT_LENGTH,
    MAX_LEAD_SECONDS,
    MAX_MEDIA,
    MIN_LEAD_SECONDS,
    validate_schedule,
)

__all__ = [
    "MAX_CONTENT_LENGTH",
    "MAX_LEAD_SECONDS",
    "MAX_MEDIA",
    "MIN_LEAD_SECONDS",
    "validate_schedule",
]
