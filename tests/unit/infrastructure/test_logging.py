from post_scheduler.infrastructure.logging import (
    Timer,
    _add_correlation_id,
    _redact_secrets,
    correlation_id,
    sanitize_for_logging,
)


class TestSanitizeForLogging:
    def test_long_value_truncated(self):
        assert sanitize_for_logging("eyJhbGciOiJIUzI1NiJ9.payload.sig") == "eyJhbGci..."

    def test_short_value_kept(self):
        assert sanitize_for_logging("abc") == "abc"

    def test_empty_value(self):
        assert sanitize_for_logging(None) == ""


class TestProcessors:
    def test_secret_fields_redacted(self):
        event = _redact_secrets(
            None,
            "info",
            {"event": "x", "signature": "eyJhbGciOiJIUzI1NiJ9.payload", "job_id": "msg_1"},
        )

        assert event["signature"] == "eyJhbGci..."
        assert event["job_id"] == "msg_1"

    def test_correlation_id_added_when_set(self):
        token = correlation_id.set("msg_123")
        try:
            event = _add_correlation_id(None, "info", {"event": "x"})
        finally:
            correlation_id.reset(token)

        assert event["correlation_id"] == "msg_123"

    def test_correlation_id_absent_when_unset(self):
        assert "correlation_id" not in _add_correlation_id(None, "info", {"event": "x"})


def test_timer_measures_duration():
    with Timer() as t:
        pass

    assert t.duration_ms >= 0
