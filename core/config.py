# -*- coding: utf-8 -*-

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from core.paths import default_db_path

TICKER_KINDS = ("thread", "scheduler")


@dataclass(frozen=True)
class AppConfig:
    db_path: str
    log_level: int = logging.INFO
    ticker: str = "thread"  # thread | scheduler

    @property
    def prefer_thread_ticker(self) -> bool:
        return self.ticker == "thread"


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build the process config from environment variables:
    - POMODORO_DB_PATH: sqlite file (default: per-user data dir)
    - POMODORO_LOG_LEVEL: DEBUG | INFO | WARNING | ...
    - POMODORO_TICKER: thread | scheduler
    """
    env = os.environ if env is None else env

    db_path = (env.get("POMODORO_DB_PATH") or "").strip()
    if not db_path:
        db_path = str(default_db_path())

    level_name = (env.get("POMODORO_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    ticker = (env.get("POMODORO_TICKER") or "thread").strip().lower()
    if ticker not in TICKER_KINDS:
        raise ValueError(f"POMODORO_TICKER must be one of {', '.join(TICKER_KINDS)}.")

    return AppConfig(db_path=db_path, log_level=level, ticker=ticker)
