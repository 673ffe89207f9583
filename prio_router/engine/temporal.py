"""Natural-language due date and time extraction."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True)
class DateMatch:
    """A resolved due date and the phrase it came from."""

    value: date
    span: str


@dataclass(frozen=True)
class TimeMatch:
    """A 24-hour ``HH:MM`` time and the phrase it came from."""

    value: str
    span: str


class TemporalExtractor:
    """Extracts due dates and times from task text.

    Date precedence, first match wins: today, tomorrow, a named weekday,
    "in N days", "next week". Weekdays resolve forward and never to today.
    """

    WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
    NUMBER_WORDS = {"one": 1, "two": 2, "three": 3, "four": 4, "five": 5}

    TODAY_PATTERN = re.compile(r"\b(?:(?:by|due|before|until)\s+)?today\b", re.IGNORECASE)
    TOMORROW_PATTERN = re.compile(r"\b(?:(?:by|due|before|until)\s+)?tomorrow\b", re.IGNORECASE)
    WEEKDAY_PATTERN = re.compile(
        r"\b(?:(?:on|by|before|until|due)\s+)?"
        r"(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b",
        re.IGNORECASE,
    )
    IN_DAYS_PATTERN = re.compile(r"\bin\s+(\d+|one|two|three|four|five)\s+days?\b", re.IGNORECASE)
    NEXT_WEEK_PATTERN = re.compile(r"\bnext\s+week\b", re.IGNORECASE)

    CLOCK_PATTERN = re.compile(r"\b(?:at\s+)?(\d{1,2}):(\d{2})\s*(am|pm)?\b", re.IGNORECASE)
    AT_HOUR_PATTERN = re.compile(r"\bat\s+(\d{1,2})\s*(am|pm)\b", re.IGNORECASE)

    def __init__(self, today: Callable[[], date] | None = None):
        """Initialize the extractor.

        Args:
            today: Clock returning the reference date; defaults to the local date
        """
        self._today = today or date.today

    def extract_due_date(self, text: str, today: date | None = None) -> DateMatch | None:
        """Find the first due date expression in the text.

        Args:
            text: Task text
            today: Reference date overriding the configured clock

        Returns:
            DateMatch, or None when no date expression is present
        """
        today = today or self._today()

        match = self.TODAY_PATTERN.search(text)
        if match:
            return DateMatch(today, match.group(0))

        match = self.TOMORROW_PATTERN.search(text)
        if match:
            return DateMatch(today + timedelta(days=1), match.group(0))

        match = self.WEEKDAY_PATTERN.search(text)
        if match:
            target = self.WEEKDAYS.index(match.group(1).lower())
            days_ahead = (target - today.weekday()) % 7 or 7
            return DateMatch(today + timedelta(days=days_ahead), match.group(0))

        match = self.IN_DAYS_PATTERN.search(text)
        if match:
            raw = match.group(1).lower()
            days = self.NUMBER_WORDS[raw] if raw in self.NUMBER_WORDS else int(raw)
            try:
                return DateMatch(today + timedelta(days=days), match.group(0))
            except OverflowError:
                # Past date.max; not a usable due date
                pass

        match = self.NEXT_WEEK_PATTERN.search(text)
        if match:
            return DateMatch(today + timedelta(days=7), match.group(0))

        return None

    def extract_due_time(self, text: str) -> TimeMatch | None:
        """Find the first time-of-day expression in the text.

        Args:
            text: Task text

        Returns:
            TimeMatch with a 24-hour ``HH:MM`` value, or None
        """
        for match in self.CLOCK_PATTERN.finditer(text):
            normalized = _normalize(int(match.group(1)), int(match.group(2)), match.group(3))
            if normalized:
                return TimeMatch(normalized, match.group(0))

        for match in self.AT_HOUR_PATTERN.finditer(text):
            normalized = _normalize(int(match.group(1)), 0, match.group(2))
            if normalized:
                return TimeMatch(normalized, match.group(0))

        return None


def _normalize(hour: int, minute: int, meridiem: str | None) -> str | None:
    meridiem = meridiem.lower() if meridiem else None
    if meridiem == "pm" and hour < 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"
