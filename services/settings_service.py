# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from core.timer_engine import FOCUS, LONG_BREAK, MODES, SHORT_BREAK, Durations
from domain.models import ALARM_SOUNDS, AlarmSettings
from storage.repos import AppStateRepo

LOGGER = logging.getLogger(__name__)

# minutes field tops out at 60/30/60, seconds at 59
MAX_SECONDS = {
    FOCUS: 60 * 60 + 59,
    SHORT_BREAK: 30 * 60 + 59,
    LONG_BREAK: 60 * 60 + 59,
}

MAX_AUTO_START_DELAY_MS = 10_000


@dataclass(frozen=True)
class AutoStartPolicy:
    enabled: bool = True
    delay_ms: int = 500


def validate_durations(durations: Durations) -> Durations:
    for mode in MODES:
        value = durations.for_mode(mode)
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"{mode} duration must be a whole number of seconds.")
        if value <= 0:
            raise ValueError(f"{mode} duration must be greater than zero.")
        if value > MAX_SECONDS[mode]:
            raise ValueError(f"{mode} duration cannot exceed {MAX_SECONDS[mode]} seconds.")
    return durations


class SettingsService:
    """
    Owns the user-editable timer configuration in app_state:
    - durations per mode (seconds)
    - alarm sound per mode + sound on/off
    - auto-start policy after a phase completes
    Listeners registered with add_on_change get the new Durations after each save.
    """

    DURATIONS_KEY = "timer_settings"
    ALARMS_KEY = "alarm_settings"
    AUTO_START_KEY = "auto_start"

    def __init__(self, state_repo: AppStateRepo):
        self.state = state_repo
        self._on_change: List[Callable[[Durations], None]] = []

    def add_on_change(self, fn: Callable[[Durations], None]) -> None:
        self._on_change.append(fn)

    def _emit_change(self, durations: Durations) -> None:
        for fn in list(self._on_change):
            fn(durations)

    def _load_json(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.state.get(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            LOGGER.warning("Ignoring unreadable %s", key)
            return None
        if not isinstance(data, dict):
            LOGGER.warning("Ignoring malformed %s", key)
            return None
        return data

    # ----- durations -----
    def get_durations(self) -> Durations:
        data = self._load_json(self.DURATIONS_KEY)
        if data is None:
            return Durations()
        try:
            return validate_durations(
                Durations(
                    focus=data["focus"],
                    short_break=data["shortBreak"],
                    long_break=data["longBreak"],
                )
            )
        except (KeyError, ValueError) as e:
            LOGGER.warning("Stored durations invalid, using defaults: %s", e)
            return Durations()

    def set_durations(self, durations: Durations) -> Durations:
        validate_durations(durations)
        self.state.set(
            self.DURATIONS_KEY,
            json.dumps(
                {
                    "focus": durations.focus,
                    "shortBreak": durations.short_break,
                    "longBreak": durations.long_break,
                }
            ),
        )
        LOGGER.info(
            "Durations saved: focus=%ss shortBreak=%ss longBreak=%ss",
            durations.focus,
            durations.short_break,
            durations.long_break,
        )
        self._emit_change(durations)
        return durations

    # ----- alarms -----
    def get_alarms(self) -> AlarmSettings:
        data = self._load_json(self.ALARMS_KEY) or {}
        defaults = AlarmSettings()

        def pick(key: str, default: str) -> str:
            v = data.get(key, default)
            return v if v in ALARM_SOUNDS else default

        enabled = data.get("enabled", defaults.enabled)
        return AlarmSettings(
            focus=pick(FOCUS, defaults.focus),
            short_break=pick(SHORT_BREAK, defaults.short_break),
            long_break=pick(LONG_BREAK, defaults.long_break),
            enabled=enabled if isinstance(enabled, bool) else defaults.enabled,
        )

    def set_alarms(self, alarms: AlarmSettings) -> AlarmSettings:
        for sound in (alarms.focus, alarms.short_break, alarms.long_break):
            if sound not in ALARM_SOUNDS:
                raise ValueError(f"Unknown alarm sound: {sound!r}")
        self.state.set(
            self.ALARMS_KEY,
            json.dumps(
                {
                    FOCUS: alarms.focus,
                    SHORT_BREAK: alarms.short_break,
                    LONG_BREAK: alarms.long_break,
                    "enabled": bool(alarms.enabled),
                }
            ),
        )
        return alarms

    def alarm_for(self, mode: str) -> str:
        alarms = self.get_alarms()
        if mode == FOCUS:
            return alarms.focus
        if mode == SHORT_BREAK:
            return alarms.short_break
        if mode == LONG_BREAK:
            return alarms.long_break
        raise ValueError(f"Unknown mode: {mode!r}")

    # ----- auto-start -----
    def get_auto_start(self) -> AutoStartPolicy:
        data = self._load_json(self.AUTO_START_KEY) or {}
        defaults = AutoStartPolicy()
        enabled = data.get("enabled", defaults.enabled)
        delay = data.get("delayMs", defaults.delay_ms)
        if not isinstance(enabled, bool):
            enabled = defaults.enabled
        if not isinstance(delay, int) or isinstance(delay, bool) or not (
            0 <= delay <= MAX_AUTO_START_DELAY_MS
        ):
            delay = defaults.delay_ms
        return AutoStartPolicy(enabled=enabled, delay_ms=delay)

    def set_auto_start(self, policy: AutoStartPolicy) -> AutoStartPolicy:
        if not (0 <= int(policy.delay_ms) <= MAX_AUTO_START_DELAY_MS):
            raise ValueError(
                f"Auto-start delay must be between 0 and {MAX_AUTO_START_DELAY_MS} ms."
            )
        self.state.set(
            self.AUTO_START_KEY,
            json.dumps({"enabled": bool(policy.enabled), "delayMs": int(policy.delay_ms)}),
        )
        return policy
