# -*- coding: utf-8 -*-

import logging
from typing import Any, Callable, Dict, Tuple

from domain.models import ALARM_SOUNDS
from services.settings_service import SettingsService

LOGGER = logging.getLogger(__name__)

# ring offsets (ms) per sound, played on the window bell
PATTERNS: Dict[str, Tuple[int, ...]] = {
    "beep": (0, 400, 800),
    "chime": (0, 150, 300, 450),
    "bell": (0, 1200),
    "digital": (0, 250, 500, 750),
    "gentle": (0,),
    "none": (),
}


class AlarmPlayer:
    """
    Completion listener: picks the sound configured for the mode that just
    finished and plays it without blocking (rings are scheduled, not awaited).
    """

    def __init__(
        self,
        settings: SettingsService,
        scheduler: Any,
        bell: Callable[[], None],
    ):
        self.settings = settings
        self.scheduler = scheduler
        self.bell = bell

    def on_complete(self, completed_mode: str) -> None:
        alarms = self.settings.get_alarms()
        if not alarms.enabled:
            return
        self.play(self.settings.alarm_for(completed_mode))

    def play(self, sound: str) -> int:
        if sound not in ALARM_SOUNDS:
            raise ValueError(f"Unknown alarm sound: {sound!r}")
        offsets = PATTERNS[sound]
        for offset in offsets:
            self.scheduler.after(offset, self._ring)
        return len(offsets)

    def _ring(self) -> None:
        try:
            self.bell()
        except Exception:
            LOGGER.warning("Alarm ring failed", exc_info=True)
