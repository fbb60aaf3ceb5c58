"""Flexible datetime phrases resolved against a reference instant.

The resolver knows a fixed set of grammars, tried in order; the first one that
matches the *whole* phrase wins:

1. relative      ``+2h``, ``+1h30m``, ``+1d`` (exact elapsed time)
2. tomorrow      ``tomorrow``, ``tomorrow 3pm`` (09:00 by default)
3. in N unit     ``in 3 days``, ``in 2 hours``, ``in 30 mins``
4. weekday       ``fri``, ``friday 10am`` (next occurrence, never today)
5. absolute      ``2026-01-15 15:30``, ``Jan 15 3pm``, ``January 15 2026 3:30pm``
6. time of day   ``3pm``, ``3:30 pm``, ``15:30``

Every grammar is a pure ``(phrase, reference) -> datetime | None`` function.
Results carry the reference instant's tzinfo.
"""

import re
from collections.abc import Callable
from datetime import UTC, date, datetime, time, timedelta

Grammar = Callable[[str, datetime], datetime | None]

DEFAULT_TIME = time(9, 0)

_DURATION = re.compile(r"(?:\d+[dhms])+")
_DURATION_PART = re.compile(r"(\d+)([dhms])")
_DURATION_UNITS = {"d": "days", "h": "hours", "m": "minutes", "s": "seconds"}

_TOMORROW = re.compile(r"tomorrow(?:\s+(?P<clause>.+))?", re.IGNORECASE)

_IN_N = re.compile(
    r"in\s+(?P<n>\d+)\s*(?P<unit>days?|d|hours?|h|minutes?|mins?|m)",
    re.IGNORECASE,
)

_WEEKDAY = re.compile(r"(?P<day>[a-z]+)(?:\s+(?P<clause>.+))?", re.IGNORECASE)
_WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_ISO = re.compile(
    r"(?P<y>\d{4})-(?P<mo>\d{2})-(?P<d>\d{2})[T ]"
    r"(?P<h>\d{1,2}):(?P<mi>\d{2})(?::(?P<s>\d{2}))?"
)

# Most specific first: with year before without, with minutes before without
_MONTH_FORMATS_WITH_YEAR = (
    "%b %d %Y %I:%M%p",
    "%b %d %Y %I:%M %p",
    "%b %d %Y %I%p",
    "%b %d %Y %I %p",
    "%B %d %Y %I:%M%p",
    "%B %d %Y %I:%M %p",
    "%B %d %Y %I%p",
    "%B %d %Y %I %p",
)
_MONTH_FORMATS_NO_YEAR = (
    "%b %d %I:%M%p",
    "%b %d %I:%M %p",
    "%b %d %I%p",
    "%b %d %I %p",
    "%B %d %I:%M%p",
    "%B %d %I:%M %p",
    "%B %d %I%p",
    "%B %d %I %p",
)

_CLOCK_12H = re.compile(r"(?P<h>\d{1,2})(?::(?P<mi>\d{2}))?\s*(?P<ampm>[ap]m)", re.IGNORECASE)
_CLOCK_24H = re.compile(r"(?P<h>\d{1,2}):(?P<mi>\d{2})(?::(?P<s>\d{2}))?")


def _add_exact(reference: datetime, delta: timedelta) -> datetime:
    """Add elapsed time, independent of wall-clock shifts in the local zone."""
    if reference.tzinfo is None:
        return reference + delta
    return (reference.astimezone(UTC) + delta).astimezone(reference.tzinfo)


def _at(day: date, clock: time, reference: datetime) -> datetime:
    return datetime.combine(day, clock, tzinfo=reference.tzinfo)


def parse_clock(text: str) -> time | None:
    """Parse a time-of-day clause: ``3pm``, ``3:30 PM``, ``15:30``, ``15:30:05``."""
    text = text.strip()
    if match := _CLOCK_12H.fullmatch(text):
        hour = int(match["h"])
        minute = int(match["mi"] or 0)
        if not 1 <= hour <= 12 or minute > 59:
            return None
        hour %= 12
        if match["ampm"].lower() == "pm":
            hour += 12
        return time(hour, minute)
    if match := _CLOCK_24H.fullmatch(text):
        hour, minute, second = int(match["h"]), int(match["mi"]), int(match["s"] or 0)
        if hour > 23 or minute > 59 or second > 59:
            return None
        return time(hour, minute, second)
    return None


def _clause_time(clause: str | None) -> time | None:
    if clause is None:
        return DEFAULT_TIME
    return parse_clock(clause)


def parse_duration(text: str) -> timedelta | None:
    """Parse ``1h30m``-style durations (units d, h, m, s)."""
    if not _DURATION.fullmatch(text):
        return None
    delta = timedelta()
    try:
        for amount, unit in _DURATION_PART.findall(text):
            delta += timedelta(**{_DURATION_UNITS[unit]: int(amount)})
    except OverflowError:
        return None
    return delta


def _relative(phrase: str, reference: datetime) -> datetime | None:
    if not phrase.startswith("+"):
        return None
    delta = parse_duration(phrase[1:])
    if delta is None:
        return None
    return _add_exact(reference, delta)


def _tomorrow(phrase: str, reference: datetime) -> datetime | None:
    match = _TOMORROW.fullmatch(phrase)
    if match is None:
        return None
    clock = _clause_time(match["clause"])
    if clock is None:
        return None
    return _at(reference.date() + timedelta(days=1), clock, reference)


def _in_n(phrase: str, reference: datetime) -> datetime | None:
    match = _IN_N.fullmatch(phrase)
    if match is None:
        return None
    n = int(match["n"])
    unit = match["unit"].lower()
    if unit.startswith("d"):
        # Calendar days keep the wall-clock time of day
        return reference + timedelta(days=n)
    if unit.startswith("h"):
        return _add_exact(reference, timedelta(hours=n))
    return _add_exact(reference, timedelta(minutes=n))


def weekday_index(word: str) -> int | None:
    """Monday=0 for a full weekday name or a 3-5 letter abbreviation."""
    word = word.lower()
    for index, name in enumerate(_WEEKDAYS):
        if word == name or (3 <= len(word) <= 5 and name.startswith(word)):
            return index
    return None


def _weekday(phrase: str, reference: datetime) -> datetime | None:
    match = _WEEKDAY.fullmatch(phrase)
    if match is None:
        return None
    target = weekday_index(match["day"])
    if target is None:
        return None
    clock = _clause_time(match["clause"])
    if clock is None:
        return None
    days_ahead = (target - reference.weekday()) % 7 or 7
    return _at(reference.date() + timedelta(days=days_ahead), clock, reference)


def _absolute(phrase: str, reference: datetime) -> datetime | None:
    if match := _ISO.fullmatch(phrase):
        try:
            return datetime(
                int(match["y"]),
                int(match["mo"]),
                int(match["d"]),
                int(match["h"]),
                int(match["mi"]),
                int(match["s"] or 0),
                tzinfo=reference.tzinfo,
            )
        except ValueError:
            return None

    for fmt in _MONTH_FORMATS_WITH_YEAR:
        try:
            parsed = datetime.strptime(phrase, fmt)
        except ValueError:
            continue
        return parsed.replace(tzinfo=reference.tzinfo)

    # Prefixing the year lets Feb 29 parse in leap years
    for fmt in _MONTH_FORMATS_NO_YEAR:
        try:
            parsed = datetime.strptime(f"{reference.year} {phrase}", f"%Y {fmt}")
        except ValueError:
            continue
        return parsed.replace(tzinfo=reference.tzinfo)
    return None


def _time_of_day(phrase: str, reference: datetime) -> datetime | None:
    clock = parse_clock(phrase)
    if clock is None:
        return None
    return _at(reference.date(), clock, reference)


GRAMMARS: tuple[tuple[str, Grammar], ...] = (
    ("relative", _relative),
    ("tomorrow", _tomorrow),
    ("in_n", _in_n),
    ("weekday", _weekday),
    ("absolute", _absolute),
    ("time_of_day", _time_of_day),
)


def resolve(phrase: str, reference: datetime) -> datetime | None:
    """Resolve a datetime phrase, or None when no grammar matches all of it."""
    phrase = phrase.strip()
    if not phrase:
        return None
    for _name, grammar in GRAMMARS:
        try:
            result = grammar(phrase, reference)
        except OverflowError:
            # e.g. "+99999999999d" lands outside the datetime range
            return None
        if result is not None:
            return result
    return None
