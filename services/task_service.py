# services/task_service.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

from typing import List, Optional

from domain.models import Task
from storage.repos import AppStateRepo, TaskRepo

ACTIVE_TASK_KEY = "active_task_id"
MAX_EST_POMODOROS = 99


class TaskService:
    def __init__(self, tasks: TaskRepo, state: AppStateRepo):
        self.tasks = tasks
        self.state = state

    def _require(self, task_id: str) -> Task:
        t = self.tasks.get(task_id) if task_id else None
        if t is None:
            raise ValueError("Task not found.")
        return t

    # ---- tasks ----
    def create_task(self, title: str, est_pomodoros: int = 1, note: str = "") -> Task:
        title = (title or "").strip()
        if not title:
            raise ValueError("Task title cannot be empty.")
        if not (1 <= int(est_pomodoros) <= MAX_EST_POMODOROS):
            raise ValueError(f"Estimate must be between 1 and {MAX_EST_POMODOROS} pomodoros.")
        return self.tasks.create(title=title, est_pomodoros=int(est_pomodoros), note=note or "")

    def list_tasks(self, include_completed: bool = True) -> List[Task]:
        return self.tasks.list(include_completed=include_completed)

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.tasks.get(task_id)

    def rename_task(self, task_id: str, title: str) -> None:
        title = (title or "").strip()
        if not title:
            raise ValueError("Name cannot be empty.")
        self._require(task_id)
        self.tasks.rename(task_id, title)

    def set_completed(self, task_id: str, completed: bool = True) -> None:
        self._require(task_id)
        self.tasks.set_completed(task_id, completed)
        if completed and self.get_active_task_id() == task_id:
            self.set_active_task(None)

    def delete_task(self, task_id: str) -> None:
        if self.get_active_task_id() == task_id:
            self.state.delete(ACTIVE_TASK_KEY)
        self.tasks.delete_task(task_id)

    # ---- notes (markdown) ----
    def get_note(self, task_id: str) -> str:
        t = self.tasks.get(task_id)
        return t.note if t else ""

    def set_note(self, task_id: str, md: str) -> None:
        self._require(task_id)
        self.tasks.set_note(task_id, md or "")

    # ---- active task (linked to logged sessions) ----
    def get_active_task_id(self) -> Optional[str]:
        return self.state.get(ACTIVE_TASK_KEY) or None

    def set_active_task(self, task_id: Optional[str]) -> None:
        if not task_id:
            self.state.delete(ACTIVE_TASK_KEY)
            return
        t = self._require(task_id)
        if t.completed:
            raise ValueError("Completed tasks cannot be active.")
        self.state.set(ACTIVE_TASK_KEY, task_id)
