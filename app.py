#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import tkinter as tk

from core.config import load_config
from core.ticker import Ticker
from services.alarm_service import AlarmPlayer
from services.session_service import SessionService
from services.settings_service import SettingsService
from services.stats_service import StatsService
from services.task_service import TaskService
from services.timer_service import TimerService
from storage.db import Database
from storage.repos import AppStateRepo, SessionRepo, TaskRepo, TimerStateStore
from ui.main_window import MainWindow


def main():
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = Database(db_path=config.db_path)
    db.init_schema()

    state_repo = AppStateRepo(db)
    task_repo = TaskRepo(db)
    session_repo = SessionRepo(db)

    settings_service = SettingsService(state_repo)
    task_service = TaskService(task_repo, state_repo)
    stats_service = StatsService(session_repo)

    root = tk.Tk()
    ticker = Ticker(root, prefer_thread=config.prefer_thread_ticker)
    timer_service = TimerService(
        store=TimerStateStore(state_repo),
        scheduler=root,
        ticker=ticker,
        durations=settings_service.get_durations(),
        auto_start=settings_service.get_auto_start(),
    )

    # completion consumers, in order: alarm first, then the session log
    alarm = AlarmPlayer(settings_service, scheduler=root, bell=root.bell)
    sessions = SessionService(
        session_repo,
        task_repo,
        settings_service,
        get_active_task_id=task_service.get_active_task_id,
    )
    timer_service.add_on_complete(alarm.on_complete)
    timer_service.add_on_complete(sessions.log_completion)
    settings_service.add_on_change(timer_service.on_config_change)

    app = MainWindow(
        root,
        task_service,
        timer_service,
        stats_service,
        settings_service,
        preview_sound=alarm.play,
    )
    timer_service.restore()
    try:
        app.run()
    finally:
        db.close()


if __name__ == "__main__":
    main()
