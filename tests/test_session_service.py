# tests/test_session_service.py
# Completed phases written to the session log and credited to the active task

import pytest

from core.timer_engine import FOCUS, LONG_BREAK, SHORT_BREAK, Durations
from services.session_service import SessionService, duration_minutes
from services.settings_service import SettingsService
from services.task_service import TaskService


@pytest.fixture
def settings(state_repo):
    return SettingsService(state_repo)


@pytest.fixture
def tasks(task_repo, state_repo):
    return TaskService(task_repo, state_repo)


@pytest.fixture
def sessions(session_repo, task_repo, settings, tasks):
    return SessionService(
        session_repo,
        task_repo,
        settings,
        get_active_task_id=tasks.get_active_task_id,
    )


class TestDurationMinutes:

    @pytest.mark.parametrize(
        "seconds,minutes",
        [(1500, 25), (300, 5), (90, 2), (89, 1), (150, 3), (29, 0), (3659, 61)],
    )
    def test_rounds_half_up(self, seconds, minutes):
        assert duration_minutes(seconds) == minutes


class TestLogCompletion:

    def test_focus_without_task(self, sessions, session_repo):
        s = sessions.log_completion(FOCUS)
        assert s.kind == FOCUS
        assert s.duration_min == 25
        assert s.task_id is None
        assert session_repo.list_since(0)[0].id == s.id

    def test_focus_credits_active_task(self, sessions, tasks, task_repo):
        t = tasks.create_task("Write report", est_pomodoros=2)
        tasks.set_active_task(t.id)
        s = sessions.log_completion(FOCUS)
        assert s.task_id == t.id
        assert task_repo.get(t.id).act_pomodoros == 1

    def test_break_logged_but_not_credited(self, sessions, tasks, task_repo):
        t = tasks.create_task("Write report")
        tasks.set_active_task(t.id)
        s = sessions.log_completion(LONG_BREAK)
        assert s.kind == LONG_BREAK
        assert s.duration_min == 15
        assert task_repo.get(t.id).act_pomodoros == 0

    def test_uses_current_settings(self, sessions, settings):
        settings.set_durations(Durations(focus=1500, short_break=90, long_break=900))
        assert sessions.log_completion(SHORT_BREAK).duration_min == 2

    def test_vanished_task_logged_without_link(self, sessions, state_repo):
        state_repo.set("active_task_id", "gone")
        s = sessions.log_completion(FOCUS)
        assert s.task_id is None

    def test_storage_failure_returns_none(self, sessions, db):
        db.conn.execute("DROP TABLE sessions")
        assert sessions.log_completion(FOCUS) is None
