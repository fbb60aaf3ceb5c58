"""Tests for scheduling/reconcile.py: merging a re-parsed document."""

from dataclasses import replace
from datetime import datetime, timedelta

from remindme.config import TZ
from remindme.parsing.markers import parse_document
from remindme.scheduling.reconcile import reconcile, reconcile_all
from remindme.scheduling.reminders import ACKNOWLEDGED, PENDING, TRIGGERED, Reminder

REF = datetime(2026, 1, 13, 10, 0, tzinfo=TZ)


def _from(origin, description, minutes=0, status=PENDING):
    r = Reminder.new(REF + timedelta(minutes=minutes), description, origin=origin, origin_line=1)
    return replace(r, status=status)


def test_other_origins_pass_through():
    other = _from("b.md", "Elsewhere", status=TRIGGERED)
    mine = _from("a.md", "Mine")

    result = reconcile([other, mine], "a.md", [])

    assert result == [other]


def test_time_edit_keeps_existing_entry():
    existing = _from("a.md", "Call mom", minutes=60, status=TRIGGERED)
    fresh = [_from("a.md", "Call mom", minutes=120)]

    result = reconcile([existing], "a.md", fresh)

    assert result == [existing]


def test_reworded_marker_replaces_entry():
    existing = _from("a.md", "Call mom")
    fresh = [_from("a.md", "Call dad")]

    result = reconcile([existing], "a.md", fresh)

    assert [r.description for r in result] == ["Call dad"]
    assert result[0].id == fresh[0].id


def test_acknowledged_survives_removal_from_document():
    done = _from("a.md", "Pay rent", status=ACKNOWLEDGED)

    assert reconcile([done], "a.md", []) == [done]


def test_acknowledged_blocks_duplicate_add():
    done = _from("a.md", "Pay rent", status=ACKNOWLEDGED)
    fresh = [_from("a.md", "Pay rent", minutes=30)]

    assert reconcile([done], "a.md", fresh) == [done]


def test_new_entries_are_pending():
    fresh = [_from("a.md", "New", status=TRIGGERED)]

    (added,) = reconcile([], "a.md", fresh)

    assert added.status == PENDING
    assert added.id == fresh[0].id


def test_one_existing_entry_satisfies_duplicate_markers():
    existing = _from("a.md", "Stretch")
    fresh = [_from("a.md", "Stretch", minutes=5), _from("a.md", "Stretch", minutes=10)]

    assert reconcile([existing], "a.md", fresh) == [existing]


def test_output_order_is_others_kept_new():
    other = _from("b.md", "Other")
    kept = _from("a.md", "Kept")
    fresh = [_from("a.md", "Brand new"), _from("a.md", "Kept")]

    result = reconcile([kept, other], "a.md", fresh)

    assert [r.description for r in result] == ["Other", "Kept", "Brand new"]


def test_reconcile_is_idempotent():
    existing = [_from("a.md", "Keep"), _from("a.md", "Drop"), _from("b.md", "Other")]
    fresh = [_from("a.md", "Keep"), _from("a.md", "Add")]

    once = reconcile(existing, "a.md", fresh)

    assert reconcile(once, "a.md", fresh) == once


def test_reparse_after_time_edit_keeps_old_when():
    original = parse_document("[remind_me tomorrow 3pm Call mom]", REF, "a.md")
    edited = parse_document("[remind_me tomorrow 5pm Call mom]", REF, "a.md")

    result = reconcile(original, "a.md", edited)

    assert len(result) == 1
    assert result[0].when == datetime(2026, 1, 14, 15, 0, tzinfo=TZ)
    assert result[0].id == original[0].id


def test_reconcile_all_merges_per_document():
    stale = _from("a.md", "Stale")
    kept = _from("b.md", "Kept", status=TRIGGERED)
    parsed = {
        "a.md": [_from("a.md", "One"), _from("a.md", "Two")],
        "b.md": [_from("b.md", "Kept")],
    }

    result = reconcile_all([stale, kept], parsed)

    assert sorted(r.description for r in result) == ["Kept", "One", "Two"]
    assert kept in result


def test_reconcile_all_empty_parse_drops_unacknowledged():
    gone = _from("a.md", "Gone")
    done = _from("a.md", "Done", status=ACKNOWLEDGED)

    assert reconcile_all([gone, done], {"a.md": []}) == [done]


def test_reparse_after_delete_and_time_edit():
    before = "[remind_me tomorrow 3pm Call mom]\n[remind_me fri Pay rent]\n"
    after = "[remind_me tomorrow 6pm Call mom]\n"
    existing = parse_document(before, REF, "a.md")

    result = reconcile(existing, "a.md", parse_document(after, REF, "a.md"))

    assert [(r.description, r.when) for r in result] == [
        ("Call mom", datetime(2026, 1, 14, 15, 0, tzinfo=TZ)),
    ]
