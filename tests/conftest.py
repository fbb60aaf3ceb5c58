"""Shared fixtures for remindme tests."""

import pytest


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    """Redirect all data file paths to a temp directory."""
    import remindme.main as main_mod
    import remindme.scheduling.reminders as reminders_mod
    import remindme.storage as storage_mod

    state_dir = tmp_path / "state"
    monkeypatch.setattr(storage_mod, "DATA_DIR", tmp_path)
    monkeypatch.setattr(storage_mod, "STATE_DIR", state_dir)
    monkeypatch.setattr(reminders_mod, "DATA_DIR", tmp_path)
    monkeypatch.setattr(reminders_mod, "REMINDERS_DIR", tmp_path / "reminders")
    monkeypatch.setattr(main_mod, "STATE_DIR", state_dir)
    monkeypatch.setattr(main_mod, "PID_FILE", state_dir / "watch.pid")
    return tmp_path
