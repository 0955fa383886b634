import pytest

from post_scheduler.domain.exceptions import (
    ContentInvalid,
    ScheduleValidationError,
    TooFar,
    TooManyMedia,
    TooSoon,
)
from post_scheduler.domain.services import validate_schedule
from post_scheduler.domain.services.schedule_validator import MAX_LEAD_SECONDS

NOW = 1_700_000_000


class TestContentRules:
    def test_empty_content_rejected(self):
        with pytest.raises(ContentInvalid, match="Post cannot be empty"):
            validate_schedule("", NOW + 3600, [], NOW)

    def test_content_at_limit_accepted(self):
        validate_schedule("a" * 280, NOW + 3600, [], NOW)

    def test_content_over_limit_rejected(self):
        with pytest.raises(ContentInvalid, match="Post exceeds 280 characters"):
            validate_schedule("a" * 281, NOW + 3600, [], NOW)

    def test_length_counts_characters_not_bytes(self):
        validate_schedule("é" * 280, NOW + 3600, [], NOW)

    def test_content_checked_before_time(self):
        with pytest.raises(ContentInvalid):
            validate_schedule("", NOW, [], NOW)


class TestTimeWindow:
    def test_exactly_one_minute_ahead_accepted(self):
        validate_schedule("hi", NOW + 60, [], NOW)

    def test_just_under_one_minute_rejected(self):
        # 59.999 seconds ahead
        with pytest.raises(TooSoon, match="at least 1 minute"):
            validate_schedule("hi", NOW + 60, [], NOW + 0.001)

    def test_past_time_rejected(self):
        with pytest.raises(TooSoon):
            validate_schedule("hi", NOW - 10, [], NOW)

    def test_upper_bound_inclusive(self):
        validate_schedule("hi", NOW + MAX_LEAD_SECONDS, [], NOW)

    def test_beyond_upper_bound_rejected(self):
        with pytest.raises(TooFar):
            validate_schedule("hi", NOW + MAX_LEAD_SECONDS + 1, [], NOW)


class TestMediaRules:
    def test_four_media_accepted(self):
        validate_schedule("hi", NOW + 3600, ["m1", "m2", "m3", "m4"], NOW)

    def test_five_media_rejected(self):
        with pytest.raises(TooManyMedia):
            validate_schedule("hi", NOW + 3600, ["m1", "m2", "m3", "m4", "m5"], NOW)

    def test_blank_media_ref_rejected(self):
        with pytest.raises(ContentInvalid, match="Media references"):
            validate_schedule("hi", NOW + 3600, ["m1", "  "], NOW)

    def test_all_rules_share_validation_base(self):
        for error in (ContentInvalid, TooSoon, TooFar, TooManyMedia):
            assert issubclass(error, ScheduleValidationError)
