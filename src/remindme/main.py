"""Entry point for remindme."""

from __future__ import annotations

import argparse
import asyncio
import atexit
import logging
import os
import signal
import sys
from datetime import datetime
from pathlib import Path

from remindme.storage import STATE_DIR

PID_FILE = STATE_DIR / "watch.pid"

HELP = """\
remindme -- reminders embedded in your markdown notes

Write [remind_me <when> <what> #tags] anywhere in a .md file.

commands:
  remindme watch [PATH]          Track reminders in a file or directory
  remindme reminder add          Add a reminder directly
  remindme reminder list         Show reminders ordered by time
  remindme reminder ack          Acknowledge a reminder by ID
  remindme reminder unack        Undo an acknowledgement
  remindme reminder snooze       Push a reminder back (5m, 1h, 1d)
  remindme reminder edit         Change a reminder's time/description/tags
  remindme reminder delete       Stop tracking a reminder
  remindme parse FILE            Show the markers a file contains
  remindme help                  Show this help message

time formats:
  +30m  +1h30m  +1d  tomorrow  tomorrow 3pm  in 3 days  in 2 hours
  fri  friday 10am  Jan 15 3pm  January 15 2026 3:30pm  2026-01-15 15:30
  3pm  15:30

examples:
  remindme watch ~/notes
  remindme reminder add friday 10am Team sync #work
  remindme reminder snooze a1b2c3d4 1h
"""

log = logging.getLogger(__name__)


def watcher_pid() -> int | None:
    """PID of a live `remindme watch` process, if any."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
    except ValueError:
        return None
    if pid == os.getpid():
        return None
    proc_cmdline = Path(f"/proc/{pid}/cmdline")
    if proc_cmdline.exists() and "remindme" in proc_cmdline.read_bytes().decode(errors="replace"):
        return pid
    return None


def _check_already_running() -> None:
    STATE_DIR.mkdir(parents=True, exist_ok=True)
    pid = watcher_pid()
    if pid is not None:
        print(f"remindme watch is already running (pid {pid})")
        raise SystemExit(1)
    PID_FILE.write_text(str(os.getpid()))
    atexit.register(PID_FILE.unlink, missing_ok=True)


def _dispatch_subcommand() -> bool:
    """Route CLI subcommands. Returns True if handled."""
    if len(sys.argv) < 2:
        return False
    cmd = sys.argv[1]
    rest = sys.argv[2:]
    if cmd in ("help", "--help", "-h"):
        print(HELP)
        return True
    routes: dict[str, tuple[str, str]] = {
        "reminder": ("remindme.scheduling.reminder_cmd", "run_reminder_command"),
        "parse": ("remindme.scheduling.reminder_cmd", "run_parse_command"),
        "watch": ("remindme.main", "run_watch_command"),
    }
    if cmd in routes:
        from importlib import import_module

        mod_path, func_name = routes[cmd]
        getattr(import_module(mod_path), func_name)(rest)
        return True
    return False


def _print_status(message: str) -> None:
    from remindme.config import TZ

    print(f"{datetime.now(TZ):%H:%M:%S}  {message}", flush=True)


async def _watch(root: Path | None) -> None:
    """Own the collection until SIGINT/SIGTERM."""
    from remindme.config import TZ
    from remindme.engine import ReminderEngine
    from remindme.events import Tick
    from remindme.formatting import format_reminder
    from remindme.scheduling import reminders as store
    from remindme.scheduling.reconcile import reconcile_all
    from remindme.scheduling.scheduler import setup_scheduler
    from remindme.watcher import DocumentWatcher, initial_scan, vanished_origins

    reminders = store.list_reminders()
    watcher = None
    if root is not None:
        watcher = DocumentWatcher(root)
        # Prime before scanning so edits made during the scan are picked up
        watcher.prime()
        parsed = initial_scan(root, datetime.now(TZ))
        for origin in vanished_origins(reminders, root, parsed):
            parsed[origin] = []
        reminders = reconcile_all(reminders, parsed)
        log.info("Loaded %d reminders from %d documents", len(reminders), len(parsed))

    engine = ReminderEngine(reminders, on_change=store.save_reminders, on_status=_print_status)
    store.save_reminders(engine.snapshot())
    for r in engine.snapshot():
        print(f"  {format_reminder(r)}")

    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGTERM, engine.close)
    loop.add_signal_handler(signal.SIGINT, engine.close)

    scheduler = setup_scheduler(engine, watcher)
    scheduler.start()
    engine.post(Tick(now=datetime.now(TZ)))
    try:
        await engine.run()
    finally:
        scheduler.shutdown(wait=False)
        log.info("Stopped watching")


def run_watch_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="remindme watch")
    parser.add_argument("path", nargs="?", default=None, help="Markdown file or directory")
    parser.add_argument("--test-dir", action="store_true", help="Use the test state directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    if args.test_dir:
        from remindme.scheduling.reminders import use_test_store

        use_test_store()

    root = None
    if args.path is not None:
        root = Path(args.path).expanduser().resolve()
        if not root.exists():
            print(f"Error: {args.path} does not exist")
            raise SystemExit(1)

    _check_already_running()
    asyncio.run(_watch(root))


def main() -> None:
    if _dispatch_subcommand():
        return
    if len(sys.argv) > 1:
        print(f"unknown command: {sys.argv[1]}\n")
    print(HELP)
    raise SystemExit(1)


if __name__ == "__main__":
    main()
