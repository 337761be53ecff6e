# -*- coding: utf-8 -*-

import os
from pathlib import Path

APP_NAME = "PomodoroCycle"


def user_data_dir(app_name: str = APP_NAME) -> Path:
    """Return per-user data dir (Windows/macOS/Linux)."""
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA", os.path.expanduser("~\\AppData\\Local"))
    elif os.name == "posix":
        base = os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
    else:
        base = os.path.expanduser("~")
    path = Path(base) / app_name
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_db_path() -> Path:
    return user_data_dir() / "pomodoro.db"
