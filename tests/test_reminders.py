"""Tests for scheduling/reminders.py: state machine and persistence."""

from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from remindme.config import TZ
from remindme.scheduling.reminders import (
    ACKNOWLEDGED,
    ADDED_DIRECTLY,
    PENDING,
    TRIGGERED,
    Reminder,
    acknowledge,
    edit,
    is_due,
    list_reminders,
    save_reminders,
    snooze,
    sort_by_when,
    trigger_if_due,
    unacknowledge,
    use_test_store,
)

REF = datetime(2026, 1, 13, 10, 0, tzinfo=TZ)


def _reminder(offset_minutes=0, description="Call mom", status=PENDING, **kwargs):
    r = Reminder.new(REF + timedelta(minutes=offset_minutes), description, **kwargs)
    return replace(r, status=status)


def test_reminder_new_defaults():
    reminder = Reminder.new(REF, "Call mom")

    assert len(reminder.id) == 8
    assert reminder.status == PENDING
    assert reminder.tags == []
    assert reminder.origin == ADDED_DIRECTLY
    assert reminder.origin_line == 0


def test_reminder_new_ids_are_unique():
    assert Reminder.new(REF, "a").id != Reminder.new(REF, "a").id


def test_reminder_rejects_empty_description():
    with pytest.raises(ValueError, match="description"):
        Reminder.new(REF, "   ")


def test_reminder_rejects_unknown_status():
    with pytest.raises(ValueError, match="status"):
        replace(Reminder.new(REF, "x"), status="done")


# --- transitions ---


def test_trigger_when_due():
    r = _reminder(offset_minutes=0)

    assert is_due(r, REF)
    assert trigger_if_due(r, REF).status == TRIGGERED


def test_trigger_not_yet_due_is_same_instance():
    r = _reminder(offset_minutes=1)

    assert trigger_if_due(r, REF) is r


def test_trigger_ignores_acknowledged():
    r = _reminder(offset_minutes=-5, status=ACKNOWLEDGED)

    assert trigger_if_due(r, REF) is r


def test_acknowledge_from_pending_and_triggered():
    assert acknowledge(_reminder()).status == ACKNOWLEDGED
    assert acknowledge(_reminder(status=TRIGGERED)).status == ACKNOWLEDGED


def test_acknowledge_twice_is_noop():
    r = _reminder(status=ACKNOWLEDGED)

    assert acknowledge(r) is r


def test_unacknowledge_past_goes_to_triggered():
    r = _reminder(offset_minutes=-5, status=ACKNOWLEDGED)

    assert unacknowledge(r, REF).status == TRIGGERED


def test_unacknowledge_future_goes_to_pending():
    r = _reminder(offset_minutes=5, status=ACKNOWLEDGED)

    assert unacknowledge(r, REF).status == PENDING


def test_unacknowledge_non_acknowledged_is_noop():
    r = _reminder(status=TRIGGERED)

    assert unacknowledge(r, REF) is r


def test_snooze_triggered():
    r = _reminder(offset_minutes=-5, status=TRIGGERED)

    snoozed = snooze(r, timedelta(minutes=5), REF)

    assert snoozed.when == REF + timedelta(minutes=5)
    assert snoozed.status == PENDING
    assert snoozed.id == r.id


def test_snooze_pending_pushes_from_now():
    r = _reminder(offset_minutes=60)

    assert snooze(r, timedelta(minutes=5), REF).when == REF + timedelta(minutes=5)


def test_snooze_acknowledged_is_noop():
    r = _reminder(status=ACKNOWLEDGED)

    assert snooze(r, timedelta(hours=1), REF) is r


def test_edit_into_past_triggers():
    r = _reminder(offset_minutes=30, origin="notes.md", origin_line=3)

    edited = edit(r, REF - timedelta(hours=1), "Call dad", ["family"], REF)

    assert edited.status == TRIGGERED
    assert edited.description == "Call dad"
    assert edited.tags == ["family"]
    assert edited.origin == "notes.md"
    assert edited.origin_line == 3


def test_edit_into_future_is_pending():
    r = _reminder(offset_minutes=-30, status=TRIGGERED)

    assert edit(r, REF + timedelta(hours=1), "Call mom", [], REF).status == PENDING


def test_edit_keeps_acknowledged():
    r = _reminder(status=ACKNOWLEDGED)

    assert edit(r, REF + timedelta(hours=1), "Later", [], REF).status == ACKNOWLEDGED


def test_sort_by_when_is_stable():
    a = _reminder(10, "a")
    b = _reminder(0, "b")
    c = _reminder(10, "c")

    assert [r.description for r in sort_by_when([a, b, c])] == ["b", "a", "c"]


# --- persistence ---


def test_save_and_list_reminders(data_dir):
    r1 = _reminder(20, "second")
    r2 = _reminder(10, "first", tags=["work"], origin="/notes/todo.md", origin_line=4)

    save_reminders([r1, r2])
    result = list_reminders()

    assert result == [r2, r1]


def test_list_reminders_empty(data_dir):
    assert list_reminders() == []


def test_persistence_round_trip_preserves_fields(data_dir):
    r = replace(
        _reminder(-5, "Pay rent", tags=["home", "money"], origin="/n/a.md", origin_line=7),
        status=ACKNOWLEDGED,
    )

    save_reminders([r])
    (loaded,) = list_reminders()

    assert loaded == r
    assert loaded.when.utcoffset() == r.when.utcoffset()


def test_save_reminders_replaces_collection(data_dir):
    keep = _reminder(0, "keep")
    drop = _reminder(5, "drop")
    save_reminders([keep, drop])

    save_reminders([replace(keep, status=TRIGGERED)])

    assert [(r.description, r.status) for r in list_reminders()] == [("keep", TRIGGERED)]
    assert len(list((data_dir / "reminders").glob("*.md"))) == 1


def test_invalid_reminder_file_survives_save(data_dir):
    d = data_dir / "reminders"
    d.mkdir()
    bad_content = "---\nid: x1\nstatus: done\nwhen: not-a-date\n---\nbroken\n"
    (d / "bad.md").write_text(bad_content)

    loaded = list_reminders()
    save_reminders([*loaded, _reminder(0, "good")])

    assert [r.description for r in list_reminders()] == ["good"]
    assert (d / "bad.md.bad").read_text() == bad_content


def test_corrupt_reminder_file_survives_save(data_dir):
    d = data_dir / "reminders"
    d.mkdir()
    broken = d / "hand-edited.md"
    broken.write_text("---\nid: x2\nwhen: [unclosed\n---\nCall mom\n")

    assert list_reminders() == []
    save_reminders([_reminder(0, "Other")])

    assert not broken.exists()
    assert (d / "hand-edited.md.bad").exists()
    assert [r.description for r in list_reminders()] == ["Other"]


def test_use_test_store(data_dir, monkeypatch):
    import remindme.scheduling.reminders as reminders_mod

    monkeypatch.setattr(reminders_mod, "REMINDERS_DIR", reminders_mod.REMINDERS_DIR)
    use_test_store()
    save_reminders([_reminder()])

    assert len(list((data_dir / "test" / "reminders").glob("*.md"))) == 1
    assert not (data_dir / "reminders").exists()
