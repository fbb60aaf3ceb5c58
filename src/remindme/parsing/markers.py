"""Extract ``[remind_me <when> <description> #tags]`` markers from documents."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from remindme.parsing.timeparse import resolve
from remindme.scheduling.reminders import Reminder

log = logging.getLogger(__name__)

# Content stops at the first "]", so a "]" inside a description truncates it
MARKER_PATTERN = re.compile(r"\[remind_me\s+([^\]]+)\]")

# "#word" at start or after whitespace; "item#x" and "#a#b" are left alone
TAG_PATTERN = re.compile(r"(?<!\S)#(\w+)(?![\w#])")

USAGE_HINT = "e.g. '+1h Call mom' or 'friday 10am Team sync #work'"


@dataclass(frozen=True, slots=True)
class Entry:
    when: datetime
    description: str
    tags: list[str]


def extract_tags(text: str) -> tuple[str, list[str]]:
    """Strip #tag tokens from text. Returns (clean text, lowercased tags in order)."""
    tags = [tag.lower() for tag in TAG_PATTERN.findall(text)]
    clean = " ".join(TAG_PATTERN.sub("", text).split())
    return clean, tags


def split_entry(text: str, reference: datetime) -> Entry:
    """Split "<datetime phrase> <description>" at the longest phrase that resolves.

    Raises ValueError with a user-facing message when no split works.
    """
    words = text.split()
    if len(words) < 2:
        raise ValueError(f"need both time and description ({USAGE_HINT})")

    # Longest prefix first so "friday 10am" beats "friday"
    for count in range(len(words) - 1, 0, -1):
        when = resolve(" ".join(words[:count]), reference)
        if when is None:
            continue
        description, tags = extract_tags(" ".join(words[count:]))
        if not description:
            raise ValueError("description is empty after removing tags")
        return Entry(when=when, description=description, tags=tags)

    raise ValueError(f"couldn't parse time from {text.strip()!r} ({USAGE_HINT})")


def parse_document(text: str, reference: datetime, origin: str) -> list[Reminder]:
    """Every valid marker in text as a pending reminder; invalid markers are skipped."""
    reminders: list[Reminder] = []
    for line_number, line in enumerate(text.split("\n"), start=1):
        for match in MARKER_PATTERN.finditer(line):
            try:
                entry = split_entry(match.group(1), reference)
            except ValueError as e:
                log.debug("Skipping marker at %s:%d: %s", origin, line_number, e)
                continue
            reminders.append(
                Reminder.new(
                    entry.when,
                    entry.description,
                    tags=entry.tags,
                    origin=origin,
                    origin_line=line_number,
                )
            )
    return reminders


def parse_file(path: Path | str, reference: datetime) -> list[Reminder]:
    """Raises OSError when the file cannot be read."""
    path = Path(path)
    text = path.read_text(encoding="utf-8", errors="replace")
    return parse_document(text, reference, str(path))
