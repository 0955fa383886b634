"""
Structured logging for the scheduler.

JSON lines through structlog. Every event carries the service name and the
correlation id of the request, or of the queue delivery for callbacks.
Credential-bearing fields are truncated before rendering.
"""

import logging
import sys
import time
from contextvars import ContextVar

import structlog

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Event keys whose values are secrets or bearer material
REDACTED_KEYS = frozenset(
    {"access_token", "access_secret", "authorization", "signature", "token"}
)


def configure_logging(service_name: str, debug: bool = False) -> None:
    """
    Configure structlog on top of stdlib logging.

    Args:
        service_name: Value of the ``service`` key on every event
        debug: Emit DEBUG events when True
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _static_fields(service=service_name),
            _add_correlation_id,
            _redact_secrets,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _static_fields(**fields):
    def processor(logger, method_name, event_dict):
        for key, value in fields.items():
            event_dict.setdefault(key, value)
        return event_dict

    return processor


def _add_correlation_id(logger, method_name, event_dict):
    cid = correlation_id.get()
    if cid:
        event_dict.setdefault("correlation_id", cid)
    return event_dict


def _redact_secrets(logger, method_name, event_dict):
    for key in REDACTED_KEYS.intersection(event_dict):
        value = event_dict[key]
        event_dict[key] = sanitize_for_logging(value if isinstance(value, str) else None)
    return event_dict


def set_correlation_id(cid: str) -> None:
    correlation_id.set(cid)


class Timer:
    """
    Wall-clock timer for outbound calls.

    Usage:
        with Timer() as t:
            await client.create_tweet(text=text)
        logger.info("Post created", duration_ms=t.duration_ms)
    """

    def __init__(self) -> None:
        self._start = 0.0
        self._end = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self._end = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        return round((self._end - self._start) * 1000, 2)


def sanitize_for_logging(value: str | None, visible_chars: int = 8) -> str:
    """Keep the first ``visible_chars`` characters of a secret."""
    if not value:
        return ""
    if len(value) <= visible_chars:
        return value
    return value[:visible_chars] + "..."
