# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk
from typing import Callable, Dict, Optional

from core.timer_engine import FOCUS, LONG_BREAK, MODES, SHORT_BREAK, Durations
from domain.models import ALARM_SOUNDS, AlarmSettings
from services.settings_service import (
    MAX_SECONDS,
    AutoStartPolicy,
    SettingsService,
    validate_durations,
)
from ui.pomodoro_widget import MODE_LABELS


class SettingsDialog:
    """Modal editor for durations, alarm sounds and auto-start."""

    def __init__(
        self,
        master,
        settings: SettingsService,
        on_saved: Optional[Callable[[], None]] = None,
        preview: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings
        self.on_saved = on_saved
        self.preview = preview

        self.win = tk.Toplevel(master)
        self.win.title("Settings")
        self.win.transient(master)
        self.win.resizable(False, False)

        self._min_vars: Dict[str, tk.StringVar] = {}
        self._sec_vars: Dict[str, tk.StringVar] = {}
        self._sound_vars: Dict[str, tk.StringVar] = {}

        self._build_ui()
        self._fill()
        self.win.grab_set()

    def _build_ui(self):
        outer = ttk.Frame(self.win, padding=12)
        outer.pack(fill="both", expand=True)

        ttk.Label(outer, text="Timer", font=("Sans", 11, "bold")).grid(
            row=0, column=0, sticky="w", pady=(0, 6)
        )
        for i, mode in enumerate(MODES, start=1):
            max_min = MAX_SECONDS[mode] // 60
            self._min_vars[mode] = tk.StringVar()
            self._sec_vars[mode] = tk.StringVar()
            self._sound_vars[mode] = tk.StringVar()

            ttk.Label(outer, text=MODE_LABELS[mode]).grid(row=i, column=0, sticky="w")
            ttk.Spinbox(
                outer, from_=0, to=max_min, width=4, textvariable=self._min_vars[mode]
            ).grid(row=i, column=1, padx=(6, 2))
            ttk.Label(outer, text="min").grid(row=i, column=2, sticky="w")
            ttk.Spinbox(
                outer, from_=0, to=59, width=4, textvariable=self._sec_vars[mode]
            ).grid(row=i, column=3, padx=(6, 2))
            ttk.Label(outer, text="sec").grid(row=i, column=4, sticky="w")

            ttk.Combobox(
                outer,
                values=ALARM_SOUNDS,
                state="readonly",
                width=9,
                textvariable=self._sound_vars[mode],
            ).grid(row=i, column=5, padx=(12, 4))
            ttk.Button(
                outer, text="▶", width=2, command=lambda m=mode: self._preview(m)
            ).grid(row=i, column=6)

        self.sound_enabled_var = tk.BooleanVar()
        self.auto_start_var = tk.BooleanVar()
        ttk.Checkbutton(outer, text="Alarm sound", variable=self.sound_enabled_var).grid(
            row=4, column=0, columnspan=3, sticky="w", pady=(10, 0)
        )
        ttk.Checkbutton(
            outer, text="Auto-start next phase", variable=self.auto_start_var
        ).grid(row=5, column=0, columnspan=3, sticky="w")

        self.err_var = tk.StringVar(value="")
        ttk.Label(outer, textvariable=self.err_var, foreground="red").grid(
            row=6, column=0, columnspan=7, sticky="w", pady=(8, 0)
        )

        btns = ttk.Frame(outer)
        btns.grid(row=7, column=0, columnspan=7, sticky="e", pady=(8, 0))
        ttk.Button(btns, text="Cancel", command=self.win.destroy).grid(row=0, column=0)
        ttk.Button(btns, text="Save", command=self._save).grid(row=0, column=1, padx=(6, 0))

    def _fill(self):
        durations = self.settings.get_durations()
        alarms = self.settings.get_alarms()
        sounds = {FOCUS: alarms.focus, SHORT_BREAK: alarms.short_break, LONG_BREAK: alarms.long_break}
        for mode in MODES:
            total = durations.for_mode(mode)
            self._min_vars[mode].set(str(total // 60))
            self._sec_vars[mode].set(str(total % 60))
            self._sound_vars[mode].set(sounds[mode])
        self.sound_enabled_var.set(alarms.enabled)
        self.auto_start_var.set(self.settings.get_auto_start().enabled)

    def _seconds(self, mode: str) -> int:
        try:
            m = int(self._min_vars[mode].get() or 0)
            s = int(self._sec_vars[mode].get() or 0)
        except ValueError:
            raise ValueError(f"{MODE_LABELS[mode]}: minutes and seconds must be numbers.")
        if not (0 <= s <= 59):
            raise ValueError(f"{MODE_LABELS[mode]}: seconds must be 0-59.")
        return m * 60 + s

    def _preview(self, mode: str):
        if self.preview:
            self.preview(self._sound_vars[mode].get())

    def _save(self):
        try:
            durations = Durations(
                focus=self._seconds(FOCUS),
                short_break=self._seconds(SHORT_BREAK),
                long_break=self._seconds(LONG_BREAK),
            )
            validate_durations(durations)
            self.settings.set_alarms(
                AlarmSettings(
                    focus=self._sound_vars[FOCUS].get(),
                    short_break=self._sound_vars[SHORT_BREAK].get(),
                    long_break=self._sound_vars[LONG_BREAK].get(),
                    enabled=bool(self.sound_enabled_var.get()),
                )
            )
            current = self.settings.get_auto_start()
            self.settings.set_auto_start(
                AutoStartPolicy(enabled=bool(self.auto_start_var.get()), delay_ms=current.delay_ms)
            )
            self.settings.set_durations(durations)
        except ValueError as e:
            self.err_var.set(str(e))
            return

        if self.on_saved:
            self.on_saved()
        self.win.destroy()
