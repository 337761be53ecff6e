# tests/test_repos.py
# SQLite layer: schema, app_state, timer snapshot, tasks, sessions

import json

import pytest

from core.timer_engine import LONG_BREAK, TimerState
from storage.db import Database


class TestSchema:

    def test_tables_created(self, db):
        names = {
            r["name"]
            for r in db.conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        assert {"app_state", "tasks", "sessions"} <= names

    def test_init_is_idempotent(self, db):
        db.init_schema()
        db.init_schema()

    def test_reopen_keeps_rows(self, tmp_path):
        path = str(tmp_path / "reopen.db")
        first = Database(db_path=path)
        first.init_schema()
        first.conn.execute("INSERT INTO app_state(key, value) VALUES('k', 'v')")
        first.conn.commit()
        first.close()

        second = Database(db_path=path)
        try:
            second.init_schema()
            row = second.conn.execute("SELECT value FROM app_state WHERE key='k'").fetchone()
            assert row["value"] == "v"
        finally:
            second.close()


class TestAppState:

    def test_set_get_delete(self, state_repo):
        assert state_repo.get("k") is None
        state_repo.set("k", "1")
        state_repo.set("k", "2")
        assert state_repo.get("k") == "2"
        state_repo.delete("k")
        assert state_repo.get("k") is None


class TestTimerStateStore:

    def test_round_trip(self, store):
        st = TimerState(
            mode=LONG_BREAK,
            remaining_seconds=12,
            running=True,
            deadline=1_700_000_012_000,
            completed_focus_count=4,
            has_started=True,
        )
        assert store.save(st) is True
        assert store.load() == st

    def test_stored_as_camel_case_json(self, store, state_repo):
        store.save(TimerState())
        data = json.loads(state_repo.get(store.KEY))
        assert data["remainingSeconds"] == 1500
        assert data["completedFocusCount"] == 0
        assert data["deadline"] is None

    def test_nothing_saved(self, store):
        assert store.load() is None

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[]",
            json.dumps({"mode": "focus"}),
            json.dumps(
                {
                    "mode": "focus",
                    "remainingSeconds": 10,
                    "running": True,
                    "deadline": None,
                    "completedFocusCount": 0,
                    "hasStarted": True,
                }
            ),
        ],
    )
    def test_malformed_discarded(self, store, state_repo, raw):
        state_repo.set(store.KEY, raw)
        assert store.load() is None
        assert state_repo.get(store.KEY) is None

    def test_save_failure_is_reported(self, store, db):
        db.conn.execute("DROP TABLE app_state")
        assert store.save(TimerState()) is False


class TestTaskRepo:

    def test_create_and_get(self, task_repo):
        t = task_repo.create("Write report", est_pomodoros=3, note="# Plan")
        got = task_repo.get(t.id)
        assert got.title == "Write report"
        assert got.est_pomodoros == 3
        assert got.act_pomodoros == 0
        assert got.note == "# Plan"
        assert got.completed is False

    def test_list_filters_completed(self, task_repo):
        a = task_repo.create("a")
        b = task_repo.create("b")
        task_repo.set_completed(a.id, True)
        assert [t.id for t in task_repo.list(include_completed=False)] == [b.id]
        assert {t.id for t in task_repo.list()} == {a.id, b.id}
        assert task_repo.list()[-1].id == a.id

    def test_increment_pomodoros(self, task_repo):
        t = task_repo.create("a")
        task_repo.increment_pomodoros(t.id)
        task_repo.increment_pomodoros(t.id)
        assert task_repo.get(t.id).act_pomodoros == 2

    def test_rename_and_note(self, task_repo):
        t = task_repo.create("a")
        task_repo.rename(t.id, "b")
        task_repo.set_note(t.id, "- [ ] item")
        got = task_repo.get(t.id)
        assert got.title == "b"
        assert got.note == "- [ ] item"


class TestSessionRepo:

    def test_add_returns_stored_row(self, session_repo):
        s = session_repo.add("shortBreak", 5, completed_at=200)
        rows = session_repo.list_since(0)
        assert rows == [s]
        assert rows[0].task_id is None

    def test_newest_first(self, session_repo):
        session_repo.add("focus", 25, completed_at=100)
        session_repo.add("shortBreak", 5, completed_at=200)
        assert [s.completed_at for s in session_repo.list_since(0)] == [200, 100]

    def test_list_since_by_kind(self, session_repo):
        session_repo.add("focus", 25, completed_at=100)
        session_repo.add("focus", 25, completed_at=300)
        session_repo.add("longBreak", 15, completed_at=400)
        rows = session_repo.list_since(200, kind="focus")
        assert [s.completed_at for s in rows] == [300]
        assert len(session_repo.list_since(0)) == 3

    def test_deleting_task_keeps_history(self, session_repo, task_repo):
        t = task_repo.create("a")
        session_repo.add("focus", 25, task_id=t.id, completed_at=100)
        task_repo.delete_task(t.id)
        rows = session_repo.list_since(0)
        assert len(rows) == 1
        assert rows[0].task_id is None
