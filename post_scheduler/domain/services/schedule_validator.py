"""Input rules for scheduling a post. Pure, no I/O."""

from ..exceptions import ContentInvalid, TooFar, TooManyMedia, TooSoon

MAX_CONTENT_LENGTH = 280
MAX_MEDIA = 4
MIN_LEAD_SECONDS = 60
MAX_LEAD_SECONDS = 365 * 24 * 60 * 60


def _to_millis(unix_seconds: float) -> int:
    return round(unix_seconds * 1000)


def validate_schedule(
    content: str,
    scheduled_at_unix: float,
    media_refs: list[str],
    now_unix: float,
) -> None:
    """
    Validate a schedule request.

    Args:
        content: Post text
        scheduled_at_unix: Requested publication time (unix seconds)
        media_refs: Opaque media identifiers, in order
        now_unix: Current time (unix seconds, may carry a fraction)

    Raises:
        ContentInvalid: Empty content, content over 280 characters or a blank media ref
        TooSoon: Less than one minute from now
        TooFar: More than 365 days from now
        TooManyMedia: More than four media refs
    """
    if not content:
        raise ContentInvalid("Post cannot be empty")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ContentInvalid(f"Post exceeds {MAX_CONTENT_LENGTH} characters")

    # Millisecond comparison so now+59.999s is rejected and now+60s accepted
    scheduled_ms = _to_millis(scheduled_at_unix)
    now_ms = _to_millis(now_unix)
    if scheduled_ms < now_ms + MIN_LEAD_SECONDS * 1000:
        raise TooSoon()
    if scheduled_ms > now_ms + MAX_LEAD_SECONDS * 1000:
        raise TooFar()

    if len(media_refs) > MAX_MEDIA:
        raise TooManyMedia()
    if any(not ref or not ref.strip() for ref in media_refs):
        raise ContentInvalid("Media references cannot be blank")
