# -*- coding: utf-8 -*-

from dataclasses import dataclass
from typing import Optional

ALARM_SOUNDS = ("beep", "chime", "bell", "digital", "gentle", "none")


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    note: str
    completed: bool
    est_pomodoros: int
    act_pomodoros: int
    created_at: int
    updated_at: int


@dataclass(frozen=True)
class FocusSession:
    id: str
    task_id: Optional[str]
    kind: str  # focus | shortBreak | longBreak
    duration_min: int
    completed_at: int


@dataclass(frozen=True)
class AlarmSettings:
    focus: str = "beep"
    short_break: str = "chime"
    long_break: str = "bell"
    enabled: bool = True
