# tests/test_task_service.py
# Tasks, notes and the active task that focus sessions are credited to

import pytest

from services.task_service import MAX_EST_POMODOROS, TaskService


@pytest.fixture
def tasks(task_repo, state_repo):
    return TaskService(task_repo, state_repo)


class TestTasks:

    def test_create_trims_title(self, tasks):
        t = tasks.create_task("  Read paper  ", est_pomodoros=2)
        assert t.title == "Read paper"
        assert t.est_pomodoros == 2

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_empty_title_rejected(self, tasks, title):
        with pytest.raises(ValueError):
            tasks.create_task(title)

    @pytest.mark.parametrize("est", [0, MAX_EST_POMODOROS + 1])
    def test_estimate_bounds(self, tasks, est):
        with pytest.raises(ValueError):
            tasks.create_task("x", est_pomodoros=est)

    def test_rename(self, tasks):
        t = tasks.create_task("a")
        tasks.rename_task(t.id, " b ")
        assert tasks.get_task(t.id).title == "b"
        with pytest.raises(ValueError):
            tasks.rename_task(t.id, " ")

    def test_rename_missing(self, tasks):
        with pytest.raises(ValueError):
            tasks.rename_task("nope", "b")

    def test_notes(self, tasks):
        t = tasks.create_task("a")
        tasks.set_note(t.id, "**bold**")
        assert tasks.get_note(t.id) == "**bold**"
        assert tasks.get_note("nope") == ""


class TestActiveTask:

    def test_set_and_clear(self, tasks):
        t = tasks.create_task("a")
        tasks.set_active_task(t.id)
        assert tasks.get_active_task_id() == t.id
        tasks.set_active_task(None)
        assert tasks.get_active_task_id() is None

    def test_missing_task_cannot_be_active(self, tasks):
        with pytest.raises(ValueError):
            tasks.set_active_task("nope")

    def test_completed_task_cannot_be_active(self, tasks):
        t = tasks.create_task("a")
        tasks.set_completed(t.id, True)
        with pytest.raises(ValueError):
            tasks.set_active_task(t.id)

    def test_completing_active_task_clears_it(self, tasks):
        t = tasks.create_task("a")
        tasks.set_active_task(t.id)
        tasks.set_completed(t.id, True)
        assert tasks.get_active_task_id() is None

    def test_deleting_active_task_clears_it(self, tasks):
        t = tasks.create_task("a")
        tasks.set_active_task(t.id)
        tasks.delete_task(t.id)
        assert tasks.get_active_task_id() is None
        assert tasks.list_tasks() == []
