# -*- coding: utf-8 -*-

import logging
import math
import sqlite3
from typing import Callable, Optional

from core.timer_engine import FOCUS
from domain.models import FocusSession
from services.settings_service import SettingsService
from storage.repos import SessionRepo, TaskRepo

LOGGER = logging.getLogger(__name__)


def duration_minutes(seconds: int) -> int:
    # half-up, so 90s -> 2 and 150s -> 3
    return int(math.floor(seconds / 60 + 0.5))


class SessionService:
    """
    Completion listener that records finished phases.
    Logging is best effort: a storage failure is logged and dropped so the
    timer keeps advancing.
    """

    def __init__(
        self,
        session_repo: SessionRepo,
        task_repo: TaskRepo,
        settings: SettingsService,
        get_active_task_id: Callable[[], Optional[str]],
    ):
        self.session_repo = session_repo
        self.task_repo = task_repo
        self.settings = settings
        self.get_active_task_id = get_active_task_id

    def log_completion(self, completed_mode: str) -> Optional[FocusSession]:
        minutes = duration_minutes(self.settings.get_durations().for_mode(completed_mode))
        task_id = self.get_active_task_id()
        try:
            if task_id and self.task_repo.get(task_id) is None:
                task_id = None
            session = self.session_repo.add(
                kind=completed_mode,
                duration_min=minutes,
                task_id=task_id,
            )
            if completed_mode == FOCUS and task_id:
                self.task_repo.increment_pomodoros(task_id)
        except sqlite3.Error:
            LOGGER.exception("Failed to log %s session", completed_mode)
            return None

        LOGGER.info(
            "Session logged: %s, %smin, task: %s",
            completed_mode,
            minutes,
            task_id or "none",
        )
        return session
