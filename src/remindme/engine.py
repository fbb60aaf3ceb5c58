"""The single owner of the reminder collection.

Every mutation (document re-parses, user actions, trigger ticks) arrives as an
event and is applied by ``dispatch`` in order. ``run`` drains an asyncio queue
so background producers never touch the collection directly. Reminders are
keyed by their surrogate id and replaced wholesale on change.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from remindme import events
from remindme.parsing.markers import split_entry
from remindme.scheduling import reminders as model
from remindme.scheduling.reconcile import reconcile
from remindme.scheduling.reminders import Reminder, sort_by_when
from remindme.scheduling.scheduler import trigger_due

log = logging.getLogger(__name__)

ChangeCallback = Callable[[list[Reminder]], None]
StatusCallback = Callable[[str], None]


class UnknownReminder(LookupError):
    pass


class ReminderEngine:
    def __init__(
        self,
        reminders: list[Reminder] | None = None,
        *,
        on_change: ChangeCallback | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        self._reminders: dict[str, Reminder] = {r.id: r for r in reminders or []}
        self._on_change = on_change
        self._on_status = on_status
        self._queue: asyncio.Queue[events.Event | None] = asyncio.Queue()
        self._closed = False
        self._handlers: dict[type, Callable[..., str | None]] = {
            events.Tick: self._tick,
            events.DocumentChanged: self._document_changed,
            events.DocumentRemoved: self._document_removed,
            events.Acknowledge: self._acknowledge,
            events.Unacknowledge: self._unacknowledge,
            events.Snooze: self._snooze,
            events.Delete: self._delete,
            events.Add: self._add,
            events.Edit: self._edit,
        }

    # --- Views ---

    def snapshot(self) -> list[Reminder]:
        """The collection ordered by when."""
        return sort_by_when(list(self._reminders.values()))

    def get(self, reminder_id: str) -> Reminder:
        try:
            return self._reminders[reminder_id]
        except KeyError:
            raise UnknownReminder(f"no reminder with id {reminder_id}") from None

    @property
    def closed(self) -> bool:
        return self._closed

    # --- Event application ---

    def dispatch(self, event: events.Event) -> str | None:
        """Apply one event synchronously. Returns a status message, or None if nothing happened.

        Raises ValueError for unparseable add/edit input and UnknownReminder for
        stale ids; the collection is left untouched in both cases.
        """
        before = dict(self._reminders)
        message = self._handlers[type(event)](event)
        if self._reminders != before and self._on_change is not None:
            try:
                self._on_change(self.snapshot())
            except OSError:
                log.exception("Saving reminders failed")
        return message

    def _tick(self, event: events.Tick) -> str | None:
        fired = trigger_due(list(self._reminders.values()), event.now)
        for reminder in fired:
            self._reminders[reminder.id] = reminder
        if not fired:
            return None
        return "Triggered: " + ", ".join(r.description for r in sort_by_when(fired))

    def _document_changed(self, event: events.DocumentChanged) -> str:
        merged = reconcile(list(self._reminders.values()), event.origin, event.reminders)
        self._reminders = {r.id: r for r in merged}
        return f"File updated: {len(event.reminders)} reminders"

    def _document_removed(self, event: events.DocumentRemoved) -> str:
        merged = reconcile(list(self._reminders.values()), event.origin, [])
        self._reminders = {r.id: r for r in merged}
        return f"File removed: {event.origin}"

    def _acknowledge(self, event: events.Acknowledge) -> str | None:
        current = self.get(event.reminder_id)
        updated = model.acknowledge(current)
        if updated is current:
            return None
        self._reminders[updated.id] = updated
        return f"Acknowledged: {updated.description}"

    def _unacknowledge(self, event: events.Unacknowledge) -> str | None:
        current = self.get(event.reminder_id)
        updated = model.unacknowledge(current, event.now)
        if updated is current:
            return None
        self._reminders[updated.id] = updated
        return f"Unacknowledged: {updated.description}"

    def _snooze(self, event: events.Snooze) -> str | None:
        current = self.get(event.reminder_id)
        updated = model.snooze(current, event.delta, event.now)
        if updated is current:
            return None
        self._reminders[updated.id] = updated
        return f"Snoozed until {updated.when:%Y-%m-%d %H:%M}: {updated.description}"

    def _delete(self, event: events.Delete) -> str:
        removed = self.get(event.reminder_id)
        del self._reminders[removed.id]
        return f"Deleted: {removed.description}"

    def _add(self, event: events.Add) -> str:
        entry = split_entry(event.text, event.now)
        reminder = Reminder.new(entry.when, entry.description, tags=entry.tags)
        self._reminders[reminder.id] = reminder
        return f"Added {reminder.id}: {reminder.description}"

    def _edit(self, event: events.Edit) -> str:
        current = self.get(event.reminder_id)
        entry = split_entry(event.text, event.now)
        updated = model.edit(current, entry.when, entry.description, entry.tags, event.now)
        self._reminders[updated.id] = updated
        return f"Updated: {updated.description}"

    # --- Loop ---

    def post(self, event: events.Event) -> bool:
        """Queue an event for run(). Events posted after close() are discarded."""
        if self._closed:
            log.debug("Discarding %s after shutdown", type(event).__name__)
            return False
        self._queue.put_nowait(event)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def run(self) -> None:
        """Apply queued events one at a time until close()."""
        while True:
            event = await self._queue.get()
            if event is None:
                break
            try:
                message = self.dispatch(event)
            except (ValueError, UnknownReminder) as e:
                log.warning("%s rejected: %s", type(event).__name__, e)
                message = f"Error: {e}"
            if message and self._on_status is not None:
                self._on_status(message)
