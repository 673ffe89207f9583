"""Tests for due date and time extraction."""

from datetime import date

import pytest

from prio_router.engine.temporal import TemporalExtractor


class TestDueDate:
    """Tests for extract_due_date."""

    def test_weekday_with_time(self, extractor):
        """Test a named weekday and an hour with meridiem."""
        text = "Submit report by Friday at 3pm"

        due_date = extractor.extract_due_date(text)
        due_time = extractor.extract_due_time(text)

        assert due_date.value == date(2024, 1, 19)
        assert due_date.span == "by Friday"
        assert due_time.value == "15:00"
        assert due_time.span == "at 3pm"

    def test_weekday_never_resolves_to_today(self, extractor):
        """Test naming today's weekday means next week."""
        match = extractor.extract_due_date("Team sync Monday")

        assert match.value == date(2024, 1, 22)

    def test_today_wins_over_tomorrow(self, extractor):
        """Test date precedence."""
        match = extractor.extract_due_date("Finish it today or tomorrow")

        assert match.value == date(2024, 1, 15)
        assert match.span == "today"

    def test_tomorrow_with_prefix(self, extractor):
        """Test the deadline preposition is part of the span."""
        match = extractor.extract_due_date("Pay rent due tomorrow")

        assert match.value == date(2024, 1, 16)
        assert match.span == "due tomorrow"

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Renew passport in 3 days", date(2024, 1, 18)),
            ("Renew passport in two days", date(2024, 1, 17)),
            ("Renew passport in 1 day", date(2024, 1, 16)),
            ("Renew passport in 10 days", date(2024, 1, 25)),
        ],
    )
    def test_in_n_days(self, extractor, text, expected):
        """Test relative day offsets in digits and words."""
        assert extractor.extract_due_date(text).value == expected

    @pytest.mark.parametrize(
        "text", ["Renew passport in 3000000 days", "Renew passport in 99999999999999999999 days"]
    )
    def test_out_of_range_offset_is_no_date(self, extractor, text):
        """Test offsets past the calendar range yield no date."""
        assert extractor.extract_due_date(text) is None

    def test_out_of_range_offset_falls_through(self, extractor):
        """Test a later expression still matches after an unusable offset."""
        match = extractor.extract_due_date("Either in 3000000 days or next week")

        assert match.value == date(2024, 1, 22)
        assert match.span == "next week"

    def test_next_week(self, extractor):
        """Test next week is seven days ahead."""
        assert extractor.extract_due_date("Plan offsite next week").value == date(2024, 1, 22)

    def test_no_date(self, extractor):
        """Test absent dates return None."""
        assert extractor.extract_due_date("Water the plants") is None

    def test_reference_date_argument(self):
        """Test an explicit reference date overrides the clock."""
        extractor = TemporalExtractor(today=lambda: date(2000, 1, 1))

        match = extractor.extract_due_date("Call back tomorrow", today=date(2024, 2, 28))

        assert match.value == date(2024, 2, 29)


class TestDueTime:
    """Tests for extract_due_time."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Standup at 9:15", "09:15"),
            ("Dinner 7:30pm", "19:30"),
            ("Dinner 7:30 PM", "19:30"),
            ("Lunch at 12pm", "12:00"),
            ("Backup job at 12am", "00:00"),
            ("Meeting at 12:45am", "00:45"),
            ("Review at 11am", "11:00"),
        ],
    )
    def test_times_normalize_to_24_hour(self, extractor, text, expected):
        """Test time normalization."""
        assert extractor.extract_due_time(text).value == expected

    def test_invalid_clock_time_is_ignored(self, extractor):
        """Test out-of-range times are rejected."""
        assert extractor.extract_due_time("Ends 25:99") is None

    def test_bare_hour_needs_meridiem(self, extractor):
        """Test "at 3" alone is not read as a time."""
        assert extractor.extract_due_time("Meet at 3 people") is None

    def test_no_time(self, extractor):
        """Test absent times return None."""
        assert extractor.extract_due_time("Water the plants") is None
