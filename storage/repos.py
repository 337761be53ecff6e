# storage/repos.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import json
import logging
import sqlite3
import time
import uuid
from typing import List, Optional

from core.timer_engine import TimerState
from domain.models import FocusSession, Task
from storage.db import Database

LOGGER = logging.getLogger(__name__)


def _now_ts() -> int:
    return int(time.time())


class AppStateRepo:
    def __init__(self, db: Database):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        row = self.db.conn.execute(
            "SELECT value FROM app_state WHERE key=?",
            (key,),
        ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.db.conn.execute(
            """
            INSERT INTO app_state(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
        self.db.conn.commit()

    def delete(self, key: str) -> None:
        self.db.conn.execute("DELETE FROM app_state WHERE key=?", (key,))
        self.db.conn.commit()


class TimerStateStore:
    """
    Single-record snapshot of the timer, overwritten after every mutation.
    Writes are best effort; a corrupt record reads back as "nothing saved".
    """

    KEY = "timer_state"

    def __init__(self, state_repo: AppStateRepo):
        self.state_repo = state_repo

    def load(self) -> Optional[TimerState]:
        raw = self.state_repo.get(self.KEY)
        if raw is None:
            return None
        try:
            return TimerState.from_dict(json.loads(raw))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            LOGGER.warning("Discarding malformed timer snapshot: %s", e)
            self.clear()
            return None

    def save(self, state: TimerState) -> bool:
        try:
            self.state_repo.set(self.KEY, json.dumps(state.to_dict()))
            return True
        except sqlite3.Error:
            LOGGER.warning("Could not persist timer snapshot", exc_info=True)
            return False

    def clear(self) -> None:
        try:
            self.state_repo.delete(self.KEY)
        except sqlite3.Error:
            LOGGER.warning("Could not clear timer snapshot", exc_info=True)


_TASK_COLS = """
    id, title, note, completed, est_pomodoros, act_pomodoros,
    created_at, updated_at
"""


def _task(row) -> Task:
    d = dict(row)
    d["completed"] = bool(d["completed"])
    return Task(**d)


class TaskRepo:
    def __init__(self, db: Database):
        self.db = db

    def create(self, title: str, est_pomodoros: int = 1, note: str = "") -> Task:
        tid = str(uuid.uuid4())
        ts = _now_ts()
        self.db.conn.execute(
            """
            INSERT INTO tasks(
                id, title, note, completed, est_pomodoros, act_pomodoros,
                created_at, updated_at
            )
            VALUES(?,?,?,?,?,?,?,?)
            """,
            (tid, title, note or "", 0, int(est_pomodoros), 0, ts, ts),
        )
        self.db.conn.commit()
        return self.get(tid)

    def list(self, include_completed: bool = True) -> List[Task]:
        if include_completed:
            rows = self.db.conn.execute(
                f"SELECT {_TASK_COLS} FROM tasks ORDER BY completed ASC, created_at ASC"
            ).fetchall()
        else:
            rows = self.db.conn.execute(
                f"SELECT {_TASK_COLS} FROM tasks WHERE completed=0 ORDER BY created_at ASC"
            ).fetchall()
        return [_task(r) for r in rows]

    def get(self, task_id: str) -> Optional[Task]:
        r = self.db.conn.execute(
            f"SELECT {_TASK_COLS} FROM tasks WHERE id=?",
            (task_id,),
        ).fetchone()
        return _task(r) if r else None

    def rename(self, task_id: str, title: str) -> None:
        ts = _now_ts()
        self.db.conn.execute(
            "UPDATE tasks SET title=?, updated_at=? WHERE id=?",
            (title, ts, task_id),
        )
        self.db.conn.commit()

    def set_completed(self, task_id: str, completed: bool) -> None:
        ts = _now_ts()
        self.db.conn.execute(
            "UPDATE tasks SET completed=?, updated_at=? WHERE id=?",
            (1 if completed else 0, ts, task_id),
        )
        self.db.conn.commit()

    def set_note(self, task_id: str, note: str) -> None:
        ts = _now_ts()
        self.db.conn.execute(
            "UPDATE tasks SET note=?, updated_at=? WHERE id=?",
            (note, ts, task_id),
        )
        self.db.conn.commit()

    def increment_pomodoros(self, task_id: str) -> None:
        ts = _now_ts()
        self.db.conn.execute(
            "UPDATE tasks SET act_pomodoros=act_pomodoros+1, updated_at=? WHERE id=?",
            (ts, task_id),
        )
        self.db.conn.commit()

    def delete_task(self, task_id: str) -> None:
        # sessions keep their history, task link goes NULL (FK ON DELETE SET NULL)
        self.db.conn.execute("DELETE FROM tasks WHERE id=?", (task_id,))
        self.db.conn.commit()


class SessionRepo:
    def __init__(self, db: Database):
        self.db = db

    def add(
        self,
        kind: str,
        duration_min: int,
        task_id: Optional[str] = None,
        completed_at: Optional[int] = None,
    ) -> FocusSession:
        sid = str(uuid.uuid4())
        ts = _now_ts() if completed_at is None else int(completed_at)
        self.db.conn.execute(
            """
            INSERT INTO sessions(id, task_id, kind, duration_min, completed_at)
            VALUES(?,?,?,?,?)
            """,
            (sid, task_id, kind, int(duration_min), ts),
        )
        self.db.conn.commit()
        return FocusSession(
            id=sid,
            task_id=task_id,
            kind=kind,
            duration_min=int(duration_min),
            completed_at=ts,
        )

    def list_since(self, since_ts: int, kind: Optional[str] = None) -> List[FocusSession]:
        if kind:
            rows = self.db.conn.execute(
                """
                SELECT id, task_id, kind, duration_min, completed_at
                FROM sessions WHERE completed_at >= ? AND kind=?
                ORDER BY completed_at DESC
                """,
                (since_ts, kind),
            ).fetchall()
        else:
            rows = self.db.conn.execute(
                """
                SELECT id, task_id, kind, duration_min, completed_at
                FROM sessions WHERE completed_at >= ?
                ORDER BY completed_at DESC
                """,
                (since_ts,),
            ).fetchall()
        return [FocusSession(**dict(r)) for r in rows]
