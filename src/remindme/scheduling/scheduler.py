"""Periodic work via APScheduler: trigger checks and document polling.

Both jobs only *post* events; the engine applies them in order. Document
parsing runs in a worker thread so a large notes directory never stalls the
trigger tick.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from remindme.config import POLL_SECONDS, TICK_SECONDS, TZ
from remindme.events import DocumentChanged, DocumentRemoved, Tick
from remindme.parsing.markers import parse_file
from remindme.scheduling.reminders import Reminder, trigger_if_due

if TYPE_CHECKING:
    from remindme.engine import ReminderEngine
    from remindme.watcher import DocumentWatcher

log = logging.getLogger(__name__)


def trigger_due(reminders: list[Reminder], now: datetime) -> list[Reminder]:
    """Pending reminders whose time has come, as their triggered replacements.

    Already triggered or acknowledged reminders are never returned, so repeated
    scans are no-ops.
    """
    fired: list[Reminder] = []
    for reminder in reminders:
        updated = trigger_if_due(reminder, now)
        if updated is not reminder:
            fired.append(updated)
    return fired


def _scan(watcher: DocumentWatcher, now: datetime) -> tuple[dict[Path, list[Reminder]], list[Path]]:
    """Poll and parse in one worker-thread hop. Unreadable documents are skipped."""
    changed, removed = watcher.poll()
    parsed: dict[Path, list[Reminder]] = {}
    for path in changed:
        try:
            parsed[path] = parse_file(path, now)
        except OSError as e:
            log.warning("Could not read %s: %s", path, e)
    return parsed, removed


async def poll_documents(engine: ReminderEngine, watcher: DocumentWatcher) -> None:
    parsed, removed = await asyncio.to_thread(_scan, watcher, datetime.now(TZ))
    # The engine may have shut down while the scan ran; post() drops late results
    for path, reminders in parsed.items():
        engine.post(DocumentChanged(origin=str(path), reminders=reminders))
    for path in removed:
        engine.post(DocumentRemoved(origin=str(path)))


def setup_scheduler(engine: ReminderEngine, watcher: DocumentWatcher | None = None) -> AsyncIOScheduler:
    """Tick every TICK_SECONDS; poll documents every POLL_SECONDS when a watcher is given."""
    scheduler = AsyncIOScheduler(timezone=TZ)

    @scheduler.scheduled_job(IntervalTrigger(seconds=TICK_SECONDS), id="tick")
    async def tick() -> None:
        engine.post(Tick(now=datetime.now(TZ)))

    if watcher is not None:
        @scheduler.scheduled_job(IntervalTrigger(seconds=POLL_SECONDS), id="poll_documents")
        async def poll() -> None:
            try:
                await poll_documents(engine, watcher)
            except Exception:
                log.exception("Document poll failed")

    return scheduler
