"""CLI handlers for `remindme reminder` and `remindme parse`."""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from remindme.config import TZ
from remindme.engine import ReminderEngine, UnknownReminder
from remindme.events import Acknowledge, Add, Delete, Edit, Event, Snooze, Tick, Unacknowledge
from remindme.formatting import format_edit_prefill, format_reminder
from remindme.parsing.markers import parse_file
from remindme.parsing.timeparse import parse_duration
from remindme.scheduling import reminders as store
from remindme.scheduling.reminders import ACKNOWLEDGED


def _guard_watcher() -> None:
    from remindme.main import watcher_pid

    pid = watcher_pid()
    if pid is not None:
        print(f"remindme watch is running (pid {pid}); make changes there or stop it first")
        sys.exit(1)


def _apply(event: Event) -> None:
    """Run one event against the stored collection and save the result."""
    _guard_watcher()
    engine = ReminderEngine(store.list_reminders(), on_change=store.save_reminders)
    try:
        message = engine.dispatch(event)
    except (ValueError, UnknownReminder) as e:
        print(f"error: {e}")
        sys.exit(1)
    print(message or "nothing to change")


def run_reminder_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="remindme reminder")
    parser.add_argument("--test-dir", action="store_true", help="Use the test state directory")
    sub = parser.add_subparsers(dest="action")

    add_p = sub.add_parser("add", help="Add a reminder: TIME DESCRIPTION [#tags]")
    add_p.add_argument("text", nargs="+", help='e.g. friday 10am Team sync #work')

    list_p = sub.add_parser("list", help="Show reminders ordered by time")
    list_p.add_argument("--all", action="store_true", help="Include acknowledged reminders")
    list_p.add_argument("--tag", default=None, help="Only reminders with this tag")
    list_p.add_argument("--search", default=None, help="Only reminders whose description contains TEXT")

    for name, help_text in (
        ("ack", "Acknowledge a reminder"),
        ("unack", "Undo an acknowledgement"),
        ("delete", "Stop tracking a reminder"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("id", help="Reminder ID")

    snooze_p = sub.add_parser("snooze", help="Push a reminder back by a duration")
    snooze_p.add_argument("id", help="Reminder ID")
    snooze_p.add_argument("duration", help="e.g. 5m, 1h, 1d, 1h30m")

    edit_p = sub.add_parser("edit", help="Replace a reminder's time, description and tags")
    edit_p.add_argument("id", help="Reminder ID")
    edit_p.add_argument("text", nargs="*", help="New text; omit to print the current one")

    args = parser.parse_args(argv)
    if args.test_dir:
        store.use_test_store()

    now = datetime.now(TZ)
    if args.action == "add":
        _apply(Add(text=" ".join(args.text), now=now))
    elif args.action == "list":
        _handle_list(now, show_all=args.all, tag=args.tag, search=args.search)
    elif args.action == "ack":
        _apply(Acknowledge(reminder_id=args.id))
    elif args.action == "unack":
        _apply(Unacknowledge(reminder_id=args.id, now=now))
    elif args.action == "delete":
        _apply(Delete(reminder_id=args.id))
    elif args.action == "snooze":
        delta = parse_duration(args.duration)
        if delta is None:
            print(f"error: invalid duration {args.duration!r} (e.g. 5m, 1h, 1d)")
            sys.exit(1)
        _apply(Snooze(reminder_id=args.id, delta=delta, now=now))
    elif args.action == "edit":
        if args.text:
            _apply(Edit(reminder_id=args.id, text=" ".join(args.text), now=now))
        else:
            _handle_show_edit(args.id)
    else:
        parser.print_help()
        sys.exit(1)


def _handle_list(now: datetime, *, show_all: bool, tag: str | None, search: str | None) -> None:
    engine = ReminderEngine(store.list_reminders())
    # Statuses on disk may lag behind the clock; refresh for display only
    engine.dispatch(Tick(now=now))
    reminders = engine.snapshot()
    if not show_all:
        reminders = [r for r in reminders if r.status != ACKNOWLEDGED]
    if tag is not None:
        reminders = [r for r in reminders if tag.lower().lstrip("#") in r.tags]
    if search is not None:
        reminders = [r for r in reminders if search.lower() in r.description.lower()]
    if not reminders:
        print("no reminders")
        return
    for r in reminders:
        print(f"  {format_reminder(r)}")


def _handle_show_edit(reminder_id: str) -> None:
    engine = ReminderEngine(store.list_reminders())
    try:
        print(format_edit_prefill(engine.get(reminder_id)))
    except UnknownReminder as e:
        print(f"error: {e}")
        sys.exit(1)


def run_parse_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="remindme parse", description="Dry-run marker extraction")
    parser.add_argument("file", help="Markdown file to scan")
    args = parser.parse_args(argv)

    try:
        found = parse_file(Path(args.file), datetime.now(TZ))
    except OSError as e:
        print(f"error: could not read {args.file}: {e}")
        sys.exit(1)
    if not found:
        print("no reminders found")
        return
    for r in found:
        print(f"  {format_reminder(r)}")
