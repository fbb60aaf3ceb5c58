"""Parsing: datetime phrases, #tags, and [remind_me ...] markers."""

from remindme.parsing.markers import (
    Entry,
    extract_tags,
    parse_document,
    parse_file,
    split_entry,
)
from remindme.parsing.timeparse import parse_clock, parse_duration, resolve

__all__ = [
    "Entry",
    "extract_tags",
    "parse_clock",
    "parse_document",
    "parse_duration",
    "parse_file",
    "resolve",
    "split_entry",
]
